"""
Headless driver for Life: steps a simulation until extinction, until
max_iterations is reached or for a fixed number of steps, printing a short
population summary along the way.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional
import json

from lifegrid.actions import Action, Consume, Reproduce
from lifegrid.agents import Species
from lifegrid.config.config_life import config_life
from lifegrid.exceptions import ConfigurationError
from lifegrid.life import Life

# Edit these for quick runs without CLI arguments.
RUN_SETTINGS = {
    "steps": 10000,  # None: run until extinction or max_iterations
    "log_every": 100,
    "seed": 1,
}

# Optional config overrides (leave empty to use config_life defaults).
CONFIG_OVERRIDES: Dict[str, object] = {
    # "grid_rows": 30,
    # "grid_cols": 30,
    # "max_iterations": 5000,
}

# Optional config file (JSON). If present, it seeds the config before overrides.
CONFIG_PATH = Path(__file__).with_name("life_config.json")

StepCallback = Callable[[int, List[Action]], None]


def load_config(path: str | Path) -> Dict[str, object]:
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object, got {type(data).__name__}")
    cfg = dict(config_life)
    for key, value in data.items():
        if key not in config_life:
            continue
        cfg[key] = value
    return cfg


def build_config(overrides: Optional[Mapping[str, object]] = None, path: Optional[Path] = None) -> Dict[str, object]:
    path = CONFIG_PATH if path is None else Path(path)
    if path.exists():
        cfg = load_config(path)
    else:
        cfg = dict(config_life)
    if overrides:
        for key, value in overrides.items():
            if key not in cfg:
                raise ConfigurationError(f"Unknown config field: {key}")
            cfg[key] = value
    return cfg


def _should_stop(life: Life, steps_done: int, steps: Optional[int]) -> bool:
    if life.population == 0:
        return True
    if life.reached_max_iterations:
        return True
    return steps is not None and steps_done >= steps


def run_simulation(
    steps: Optional[int] = None,
    log_every: int = 10,
    seed: Optional[int] = None,
    config: Optional[Mapping[str, object]] = None,
    collect_history: bool = False,
    on_step: Optional[StepCallback] = None,
) -> Dict[str, List[int]]:
    """
    Run one Life and return its history (empty unless collect_history).

    on_step receives the iteration number and the action list of every step;
    the list is never touched again by the engine, so it may be queued for a
    renderer on another thread.
    """
    cfg = dict(config or config_life)
    if seed is not None:
        cfg["seed"] = seed
    life = Life(cfg)
    history: Dict[str, List[int]] = {
        "iteration": [],
        "grass_count": [],
        "prey_count": [],
        "predator_count": [],
        "consumes": [],
        "births": [],
    }

    steps_done = 0
    while not _should_stop(life, steps_done, steps):
        actions = life.step()
        steps_done += 1
        if on_step is not None:
            on_step(life.iteration, actions)
        counts = life.population_counts()
        if collect_history:
            history["iteration"].append(life.iteration)
            history["grass_count"].append(counts[Species.GRASS])
            history["prey_count"].append(counts[Species.PREY])
            history["predator_count"].append(counts[Species.PREDATOR])
            history["consumes"].append(sum(1 for a in actions if isinstance(a, Consume)))
            history["births"].append(sum(len(a.offspring) for a in actions if isinstance(a, Reproduce)))
        if log_every > 0 and (steps_done % log_every == 0 or _should_stop(life, steps_done, steps)):
            print(
                f"t={life.iteration:05d} grass={counts[Species.GRASS]:3d} "
                f"prey={counts[Species.PREY]:3d} pred={counts[Species.PREDATOR]:3d}"
            )
    return history if collect_history else {}


def main() -> None:
    cfg = build_config(CONFIG_OVERRIDES)
    steps = RUN_SETTINGS.get("steps")
    run_simulation(
        steps=None if steps is None else int(steps),
        log_every=int(RUN_SETTINGS["log_every"]),
        seed=int(RUN_SETTINGS["seed"]),
        config=cfg,
    )


if __name__ == "__main__":
    main()
