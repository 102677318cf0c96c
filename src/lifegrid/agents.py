"""
Agent model: species tags, the per-species capability table, the consume rules
and the three concrete agents (grass, prey, predator).

Grass is the producer, prey the primary consumer and predator the secondary
consumer. Behaviour that differs per species is looked up in the tables below
instead of being derived from the class of an agent.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Mapping, Optional, Type

from lifegrid.exceptions import AgentIsDeadError, CapabilityError

if TYPE_CHECKING:
    from lifegrid.grid import Point2D


class Species(Enum):
    GRASS = "grass"
    PREY = "prey"
    PREDATOR = "predator"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Capabilities:
    ages: bool
    consumes: bool
    consumable: bool
    mobile: bool


SPECIES_CAPABILITIES: Mapping[Species, Capabilities] = MappingProxyType(
    {
        Species.GRASS: Capabilities(ages=False, consumes=False, consumable=True, mobile=False),
        Species.PREY: Capabilities(ages=True, consumes=True, consumable=True, mobile=True),
        Species.PREDATOR: Capabilities(ages=True, consumes=True, consumable=True, mobile=True),
    }
)

# Who may eat whom: predator eats prey, prey eats grass
CONSUME_RULES: Mapping[Species, FrozenSet[Species]] = MappingProxyType(
    {
        Species.GRASS: frozenset(),
        Species.PREY: frozenset({Species.GRASS}),
        Species.PREDATOR: frozenset({Species.PREY}),
    }
)


def can_consume(predator: Species, prey: Species) -> bool:
    return prey in CONSUME_RULES[predator]


class IdPool:
    """Hands out agent ids that never collide within one simulation run."""

    def __init__(self, start: int = 0):
        self._start = start
        self._next_id = start

    def new_id(self) -> int:
        agent_id = self._next_id
        self._next_id += 1
        return agent_id

    def id_exists(self, agent_id: int) -> bool:
        return self._start <= agent_id < self._next_id

    def __len__(self) -> int:
        return self._next_id - self._start


class Agent(ABC):
    @property
    @abstractmethod
    def species(self) -> Species:
        """Species tag; each concrete agent class binds it to a class attribute."""

    def __init__(self, agent_id: int, energy: int, pos: Optional[Point2D] = None):
        if energy <= 0:
            raise AgentIsDeadError(f"{self.species} agent {agent_id} created with energy {energy}")
        self.agent_id = agent_id
        self.energy = int(energy)
        self.initial_energy = int(energy)
        self.pos = pos

    @property
    def capabilities(self) -> Capabilities:
        return SPECIES_CAPABILITIES[self.species]

    @property
    def is_alive(self) -> bool:
        return self.energy > 0

    def _check_alive(self, operation: str) -> None:
        if not self.is_alive:
            raise AgentIsDeadError(f"Cannot {operation} {self}: agent is dead")

    def decrease_energy_by(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Energy decrease must be non-negative, got {amount}")
        self._check_alive("decrease energy of")
        self.energy = max(0, self.energy - int(amount))

    def increase_energy_by(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Energy increase must be non-negative, got {amount}")
        self._check_alive("increase energy of")
        self.energy += int(amount)

    def age_by(self, amount: int) -> None:
        if not self.capabilities.ages:
            raise CapabilityError(f"{self.species} does not age")
        self.decrease_energy_by(amount)

    def die(self) -> None:
        if not self.capabilities.consumable:
            raise CapabilityError(f"{self.species} cannot be consumed")
        self._check_alive("kill")
        self.energy = 0

    def consume(self, prey: Agent) -> None:
        """Kill prey; the consumer itself is left untouched."""
        if not self.capabilities.consumes:
            raise CapabilityError(f"{self.species} does not consume other agents")
        if not can_consume(self.species, prey.species):
            raise CapabilityError(f"{self.species} cannot consume {prey.species}")
        prey.die()

    def consume_all(self, preys: Iterable[Agent]) -> None:
        for prey in preys:
            self.consume(prey)

    def reproduce(self, id_pool: IdPool) -> Agent:
        """Return an offspring of the same species, not yet placed on the grid."""
        self._check_alive("reproduce")
        return type(self)(id_pool.new_id(), self.initial_energy)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.agent_id}, energy={self.energy}, pos={self.pos})"


class Grass(Agent):
    species = Species.GRASS


class Prey(Agent):
    species = Species.PREY


class Predator(Agent):
    species = Species.PREDATOR


SPECIES_CLASSES: Mapping[Species, Type[Agent]] = MappingProxyType(
    {
        Species.GRASS: Grass,
        Species.PREY: Prey,
        Species.PREDATOR: Predator,
    }
)


def create_agent(species: Species, agent_id: int, energy: int) -> Agent:
    return SPECIES_CLASSES[species](agent_id, energy)


def count_by_species(agents: Iterable[Agent]) -> Dict[Species, int]:
    counts = {species: 0 for species in Species}
    for agent in agents:
        counts[agent.species] += 1
    return counts
