"""
Exceptions raised by the lifegrid engine. Everything derives from LifeError so a
driver can catch the whole family in one place.
"""


class LifeError(Exception):
    pass


class ConfigurationError(LifeError, ValueError):
    """A configuration value is outside its legal range; raised before any grid or agent exists."""


class InvalidPositionError(LifeError, IndexError):
    """A coordinate lies outside the grid, or a cell has no valid neighbour."""


class AgentIsDeadError(LifeError):
    """An operation was attempted on an agent whose energy is already zero."""


class CapabilityError(LifeError, TypeError):
    """The species of an agent does not support the requested capability."""


class LifeConsistencyError(LifeError, RuntimeError):
    """Internal bookkeeping of a Life instance is broken (e.g. a dead agent left in the population)."""
