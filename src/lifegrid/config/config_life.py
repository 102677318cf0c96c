config_life = {
    "seed": None,
    # a negative value means run indefinitely; the driver enforces it, not Life
    "max_iterations": -1,
    # Grid settings
    "grid_rows": 10,
    "grid_cols": 10,
    # Initial populations
    "n_initial_grass": 5,
    "n_initial_prey": 5,
    "n_initial_predator": 5,
    # Energy settings
    "initial_energy_grass": 10,
    "initial_energy_prey": 10,
    "initial_energy_predator": 10,
    "energy_gain_prey": 2,
    "energy_gain_predator": 2,
    "energy_gain_on_consume": False,
    "energy_loss_per_step": 1,
    # Reproduction chance when the agent is picked to act
    "reproduction_chance_grass": 0.33,
    "reproduction_chance_prey": 0.33,
    "reproduction_chance_predator": 0.33,
    # Console output
    "verbose_movement": False,
    "verbose_engagement": False,
    "verbose_reproduction": False,
    "verbose_decay": False,
}
