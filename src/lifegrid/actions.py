"""
Records of the effects chosen during one Life.step(). They are built during
selection, applied once during commit and then handed back to the caller.
Records are frozen, so a step's action list can be passed on to a renderer
running in another thread.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from lifegrid.agents import Agent
from lifegrid.grid import Point2D


@dataclass(frozen=True)
class Action:
    agent: Agent


@dataclass(frozen=True)
class Move(Action):
    from_pos: Point2D
    to_pos: Point2D

    def __str__(self) -> str:
        return f"[Move({self.agent}): {self.from_pos} -> {self.to_pos}]"


@dataclass(frozen=True)
class Consume(Action):
    prey: Agent

    def __str__(self) -> str:
        return f"[Consume({self.agent}): {self.prey}]"


@dataclass(frozen=True)
class Reproduce(Action):
    offspring: Tuple[Agent, ...]

    def __str__(self) -> str:
        return f"[Reproduce({self.agent}): {list(self.offspring)}]"


# Commit order inside one step
COMMIT_ORDER: Tuple[type, ...] = (Move, Consume, Reproduce)
