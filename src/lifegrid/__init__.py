from lifegrid.life import Life
from lifegrid.agents import Species

__all__ = ["Life", "Species"]
