"""
Life: one run of the grass/prey/predator ecosystem.

Each call to step() picks a single agent at random, works out what it does
(move, eat, reproduce), applies those actions against the grid and the
population, removes whoever died and returns the actions for presentation.
"""
from __future__ import annotations

import numbers
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

# external libraries
import numpy as np
from numpy.typing import NDArray

from lifegrid.actions import COMMIT_ORDER, Action, Consume, Move, Reproduce
from lifegrid.agents import (
    CONSUME_RULES,
    SPECIES_CAPABILITIES,
    Agent,
    IdPool,
    Species,
    count_by_species,
    create_agent,
)
from lifegrid.config.config_life import config_life
from lifegrid.exceptions import ConfigurationError, LifeConsistencyError
from lifegrid.grid import Cell, Grid, Point2D

_INT_KEYS = (
    "max_iterations",
    "grid_rows",
    "grid_cols",
    "n_initial_grass",
    "n_initial_prey",
    "n_initial_predator",
    "initial_energy_grass",
    "initial_energy_prey",
    "initial_energy_predator",
    "energy_gain_prey",
    "energy_gain_predator",
    "energy_loss_per_step",
)
_NON_NEGATIVE_KEYS = tuple(key for key in _INT_KEYS if key != "max_iterations")
_RATE_KEYS = (
    "reproduction_chance_grass",
    "reproduction_chance_prey",
    "reproduction_chance_predator",
)
_FLAG_KEYS = (
    "energy_gain_on_consume",
    "verbose_movement",
    "verbose_engagement",
    "verbose_reproduction",
    "verbose_decay",
)


def _as_int(key: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if float(value).is_integer():
        return int(value)
    raise ConfigurationError(f"{key} must be an integer, got {value!r}")


def _as_rate(key: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{key} must be a number between 0 and 1, got {value!r}")
    rate = float(value)
    # also rejects NaN
    if not 0.0 <= rate <= 1.0:
        raise ConfigurationError(f"{key} must be between 0 and 1: {rate} given")
    return rate


def resolve_config(config: Optional[Mapping[str, object]] = None) -> Dict[str, object]:
    """
    Merge config over the defaults and validate every value.

    Unknown keys are ignored. Raises ConfigurationError on the first illegal
    value, before anything is built.
    """
    resolved: Dict[str, object] = dict(config_life)
    if config:
        resolved.update({key: value for key, value in config.items() if key in config_life})

    for key in _INT_KEYS:
        resolved[key] = _as_int(key, resolved[key])
    for key in _NON_NEGATIVE_KEYS:
        if resolved[key] < 0:
            raise ConfigurationError(f"{key} must be non-negative: {resolved[key]} given")
    for key in _RATE_KEYS:
        resolved[key] = _as_rate(key, resolved[key])
    for key in _FLAG_KEYS:
        resolved[key] = bool(resolved[key])
    if resolved["seed"] is not None:
        resolved["seed"] = _as_int("seed", resolved["seed"])
        if resolved["seed"] < 0:
            raise ConfigurationError(f"seed must be non-negative: {resolved['seed']} given")

    n_cells = resolved["grid_rows"] * resolved["grid_cols"]
    for species in Species:
        count = resolved[f"n_initial_{species}"]
        if count > 0 and resolved[f"initial_energy_{species}"] == 0:
            raise ConfigurationError(f"initial_energy_{species} must be positive when n_initial_{species} > 0")
        if count > 0 and n_cells == 0:
            raise ConfigurationError(f"Cannot place {count} {species} agents on an empty grid")
    if resolved["n_initial_grass"] > n_cells:
        raise ConfigurationError(
            f"n_initial_grass ({resolved['n_initial_grass']}) exceeds the number of cells ({n_cells})"
        )
    return resolved


class Life:
    def __init__(self, config: Optional[Mapping[str, object]] = None, rng: Optional[np.random.Generator] = None):
        resolved = resolve_config(config)
        self.config: Mapping[str, object] = MappingProxyType(resolved)

        self.verbose_movement = resolved["verbose_movement"]
        self.verbose_engagement = resolved["verbose_engagement"]
        self.verbose_reproduction = resolved["verbose_reproduction"]
        self.verbose_decay = resolved["verbose_decay"]

        self._max_iterations: int = resolved["max_iterations"]
        self._iteration = 0

        # Energy settings
        self.energy_loss_per_step: int = resolved["energy_loss_per_step"]
        self.energy_gain_on_consume: bool = resolved["energy_gain_on_consume"]
        self.energy_gains: Dict[Species, int] = {
            Species.PREY: resolved["energy_gain_prey"],
            Species.PREDATOR: resolved["energy_gain_predator"],
        }
        self.initial_energies: Dict[Species, int] = {s: resolved[f"initial_energy_{s}"] for s in Species}
        self.initial_counts: Dict[Species, int] = {s: resolved[f"n_initial_{s}"] for s in Species}
        self.reproduction_chances: Dict[Species, float] = {s: resolved[f"reproduction_chance_{s}"] for s in Species}

        self.rng = rng if rng is not None else np.random.default_rng(resolved["seed"])
        self.id_pool = IdPool()

        # Action selection per species, committed per action type
        self._act_handlers: Dict[Species, Callable[[Agent], List[Action]]] = {
            species: self._act_mobile if capabilities.mobile else self._act_stationary
            for species, capabilities in SPECIES_CAPABILITIES.items()
        }
        self._commit_handlers: Dict[type, Callable[[Action], None]] = {
            Move: self._process_move,
            Consume: self._process_consume,
            Reproduce: self._process_reproduce,
        }

        self._grid = Grid(resolved["grid_rows"], resolved["grid_cols"])
        # all agents by id; insertion ordered so a seeded run is reproducible
        self._agents: Dict[int, Agent] = {}
        self._populate()

    def _populate(self) -> None:
        for species in (Species.PREY, Species.PREDATOR):
            for _ in range(self.initial_counts[species]):
                agent = create_agent(species, self.id_pool.new_id(), self.initial_energies[species])
                self._add_agent(agent, self._grid.random_point(self.rng))

        # at most one grass per cell, also at bootstrap
        n_grass = self.initial_counts[Species.GRASS]
        if n_grass:
            cell_indices = self.rng.choice(len(self._grid), size=n_grass, replace=False)
            for index in cell_indices:
                x, y = divmod(int(index), self._grid.cols)
                agent = create_agent(Species.GRASS, self.id_pool.new_id(), self.initial_energies[Species.GRASS])
                self._add_agent(agent, Point2D(x, y))

    def _add_agent(self, agent: Agent, point: Point2D) -> None:
        if agent.agent_id in self._agents:
            raise LifeConsistencyError(f"Agent id {agent.agent_id} is already in the population")
        self._grid.place_agent(agent, point)
        self._agents[agent.agent_id] = agent

    def step(self) -> List[Action]:
        """
        Let one randomly chosen agent act.

        Returns the actions of this step in commit order; an empty list when the
        population is extinct (the iteration counter then stays put) or when the
        actor was grass. Position and dead-agent errors propagate to the caller.
        """
        if not self._agents:
            return []

        actor = self._select_actor()
        actions = self._act(actor)
        self._iteration += 1
        return actions

    def _select_actor(self) -> Agent:
        agent_ids = list(self._agents)
        actor = self._agents[agent_ids[int(self.rng.integers(len(agent_ids)))]]
        if not actor.is_alive:
            raise LifeConsistencyError(f"Selected {actor}, but dead agents should have left the population")
        return actor

    def _act(self, actor: Agent) -> List[Action]:
        return self._act_handlers[actor.species](actor)

    def _act_mobile(self, actor: Agent) -> List[Action]:
        # Move
        from_pos = actor.pos
        to_pos = self._grid.random_adjacent_point(from_pos, self.rng)
        next_cell = self._grid.get(to_pos)
        actions: List[Action] = [Move(actor, from_pos, to_pos)]

        # Consume
        consumables = self._consumables_for(actor, next_cell)
        if consumables:
            prey = consumables[int(self.rng.integers(len(consumables)))]
            actions.append(Consume(actor, prey))

        # Reproduce; the offspring takes the cell its parent leaves
        if self.rng.random() < self.reproduction_chances[actor.species]:
            offspring = actor.reproduce(self.id_pool)
            offspring.pos = from_pos
            actions.append(Reproduce(actor, (offspring,)))

        # Age
        actor.age_by(self.energy_loss_per_step)
        if self.verbose_decay:
            print(f"[DECAY] {actor} lost {self.energy_loss_per_step} energy.")

        self._commit(actions)

        # only in the destination cell can someone die this step
        self._recycle_dead_agents(next_cell)
        return actions

    def _act_stationary(self, actor: Agent) -> List[Action]:
        # spreads into a neighbouring cell without moving itself
        to_pos = self._grid.random_adjacent_point(actor.pos, self.rng)
        next_cell = self._grid.get(to_pos)
        if not next_cell.agent_ids_of(actor.species):
            offspring = actor.reproduce(self.id_pool)
            self._add_agent(offspring, to_pos)
            if self.verbose_reproduction:
                print(f"[REPRODUCE] {actor} spread to {to_pos}: {offspring}.")
        return []

    def _consumables_for(self, agent: Agent, cell: Cell) -> List[Agent]:
        edible = CONSUME_RULES[agent.species]
        # sorted by id so the random draw, not cell history, decides
        return [self._agents[agent_id] for agent_id in sorted(cell.agent_ids()) if self._agents[agent_id].species in edible]

    def _commit(self, actions: List[Action]) -> None:
        for action in sorted(actions, key=lambda a: COMMIT_ORDER.index(type(a))):
            self._commit_handlers[type(action)](action)

    def _process_move(self, action: Move) -> None:
        self._grid.move_agent_to_cell(action.agent, self._grid.get(action.to_pos))
        if self.verbose_movement:
            print(f"[MOVE] Agent {action.agent} moved: {action.from_pos} -> {action.to_pos}.")

    def _process_consume(self, action: Consume) -> None:
        predator = action.agent
        predator.consume(action.prey)
        if self.energy_gain_on_consume and predator.is_alive:
            predator.increase_energy_by(self.energy_gains[predator.species])
        if self.verbose_engagement:
            print(f"[ENGAGE] {predator} consumed {action.prey} at {action.prey.pos}.")

    def _process_reproduce(self, action: Reproduce) -> None:
        for offspring in action.offspring:
            self._add_agent(offspring, offspring.pos)
            if self.verbose_reproduction:
                print(f"[REPRODUCE] {action.agent} produced {offspring}.")

    def _recycle_dead_agents(self, cell: Cell) -> List[Agent]:
        dead_agents = [self._agents[agent_id] for agent_id in cell.agent_ids() if not self._agents[agent_id].is_alive]
        for agent in dead_agents:
            self._grid.remove_agent(agent)
            del self._agents[agent.agent_id]
        return dead_agents

    @property
    def agents(self) -> List[Agent]:
        return list(self._agents.values())

    @property
    def population(self) -> int:
        return len(self._agents)

    def get_agent(self, agent_id: int) -> Optional[Agent]:
        return self._agents.get(agent_id)

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def max_iterations(self) -> int:
        """Configured bound on step() calls; negative means unbounded. Not enforced here."""
        return self._max_iterations

    @property
    def reached_max_iterations(self) -> bool:
        return 0 <= self._max_iterations <= self._iteration

    @property
    def grid(self) -> Grid:
        """The live grid, for queries only. Callers must not place or move agents through it."""
        return self._grid

    @property
    def grid_rows(self) -> int:
        return self._grid.rows

    @property
    def grid_cols(self) -> int:
        return self._grid.cols

    def population_counts(self) -> Dict[Species, int]:
        return count_by_species(self._agents.values())

    def grid_world_state(self) -> NDArray[np.float64]:
        """
        Energy per cell, one channel per species:
        channel 0: grass
        channel 1: prey
        channel 2: predator
        """
        channels = {species: i for i, species in enumerate(Species)}
        state = np.zeros((len(channels), self._grid.rows, self._grid.cols), dtype=np.float64)
        for agent in self._agents.values():
            state[channels[agent.species], agent.pos.x, agent.pos.y] += agent.energy
        return state

    def __repr__(self) -> str:
        counts = ", ".join(f"{species}={n}" for species, n in self.population_counts().items())
        return f"Life({self.grid_rows}x{self.grid_cols}, iteration={self._iteration}, {counts})"
