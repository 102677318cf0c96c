"""
Spatial model of the ecosystem: integer points, cells holding agent ids and the
fixed rows x cols grid with bounded Moore neighbourhoods.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

import numpy as np

from lifegrid.agents import Agent, Species
from lifegrid.exceptions import InvalidPositionError

# Moore neighbourhood without the centre cell
NEIGHBOUR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)


@dataclass(frozen=True)
class Point2D:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> Point2D:
        return Point2D(self.x + dx, self.y + dy)

    def chebyshev_dist(self, other: Point2D) -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class Cell:
    """
    A grid location and the agents currently standing on it.

    Cells only keep agent ids (with their species); the agents themselves live in
    the population owned by Life. The one-grass-per-cell rule is kept by Life,
    not by the cell.
    """

    def __init__(self, pos: Point2D):
        self.pos = pos
        self._agents: Dict[int, Species] = {}

    def add_agent(self, agent: Agent) -> None:
        if agent.agent_id in self._agents:
            raise InvalidPositionError(f"{agent} is already in cell {self.pos}")
        self._agents[agent.agent_id] = agent.species

    def remove_agent(self, agent: Agent) -> None:
        if agent.agent_id not in self._agents:
            raise InvalidPositionError(f"{agent} is not in cell {self.pos}")
        del self._agents[agent.agent_id]

    def has_agent(self, agent: Agent) -> bool:
        return agent.agent_id in self._agents

    def agent_ids(self) -> Tuple[int, ...]:
        return tuple(self._agents)

    def agent_ids_of(self, species: Species) -> Tuple[int, ...]:
        return tuple(agent_id for agent_id, s in self._agents.items() if s is species)

    @property
    def contains_grass(self) -> bool:
        return any(s is Species.GRASS for s in self._agents.values())

    def __len__(self) -> int:
        return len(self._agents)

    def __repr__(self) -> str:
        return f"Cell({self.pos}, agents={list(self._agents)})"


class Grid:
    def __init__(self, rows: int, cols: int):
        if rows < 0 or cols < 0:
            raise InvalidPositionError(f"Grid dimensions must be non-negative, got {rows}x{cols}")
        self._rows = rows
        self._cols = cols
        self._cells: List[List[Cell]] = [[Cell(Point2D(x, y)) for y in range(cols)] for x in range(rows)]

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        return self._rows, self._cols

    def __len__(self) -> int:
        return self._rows * self._cols

    def __iter__(self) -> Iterator[Cell]:
        for row in self._cells:
            yield from row

    def in_bounds(self, point: Point2D) -> bool:
        return 0 <= point.x < self._rows and 0 <= point.y < self._cols

    def get(self, point: Point2D) -> Cell:
        if not self.in_bounds(point):
            raise InvalidPositionError(f"{point} is outside the {self._rows}x{self._cols} grid")
        return self._cells[point.x][point.y]

    def neighbours(self, point: Point2D) -> List[Point2D]:
        """In-bounds Moore neighbours of point; the grid does not wrap."""
        if not self.in_bounds(point):
            raise InvalidPositionError(f"{point} is outside the {self._rows}x{self._cols} grid")
        candidates = (point.offset(dx, dy) for dx, dy in NEIGHBOUR_OFFSETS)
        return [p for p in candidates if self.in_bounds(p)]

    def random_adjacent_point(self, point: Point2D, rng: np.random.Generator) -> Point2D:
        neighbours = self.neighbours(point)
        if not neighbours:
            raise InvalidPositionError(f"{point} has no neighbour on a {self._rows}x{self._cols} grid")
        return neighbours[int(rng.integers(len(neighbours)))]

    def random_point(self, rng: np.random.Generator) -> Point2D:
        if len(self) == 0:
            raise InvalidPositionError("Cannot draw a point from an empty grid")
        return Point2D(int(rng.integers(self._rows)), int(rng.integers(self._cols)))

    def place_agent(self, agent: Agent, point: Point2D) -> None:
        """Put an agent that is not on the grid yet into the cell at point."""
        cell = self.get(point)
        cell.add_agent(agent)
        agent.pos = point

    def move_agent_to_cell(self, agent: Agent, cell: Cell) -> None:
        source = self.get(agent.pos)
        if not source.has_agent(agent):
            raise InvalidPositionError(f"{agent} is not registered in cell {agent.pos}")
        if cell is source:
            return
        if cell.has_agent(agent):
            raise InvalidPositionError(f"{agent} is already in cell {cell.pos}")
        source.remove_agent(agent)
        cell.add_agent(agent)
        agent.pos = cell.pos

    def remove_agent(self, agent: Agent) -> None:
        if agent.pos is None:
            raise InvalidPositionError(f"{agent} is not on the grid")
        self.get(agent.pos).remove_agent(agent)
