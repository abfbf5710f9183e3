"""Config — load game rules and training parameters from YAML files.

All tunable constants (costs, income, match length, network shape and
genetic-algorithm settings) live in YAML and are parsed into a typed
dataclass here.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml


@dataclass
class SimulationConfig:
    """Top-level game and training configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        build_cost: Scrap debited per recycler.
        unit_cost: Scrap debited per spawned unit.
        turn_income: Flat scrap credited to each bank every turn.
        sticky_ownership: If True, a cell emptied of units stays owned
            by its last holder instead of turning neutral.
        max_turns: Turn limit for a match.
        population_size: Number of agents kept by the genetic algorithm.
        game_count: Matches each agent plays per generation.
        selection_rate: Fraction of the population surviving selection.
        mutation_rate: Probability that a single weight is perturbed.
        mutation_scale: Standard deviation of weight perturbations.
        conv_size: Side length of every convolution kernel.
        inner_channels: Width of the hidden convolution layers.
        hidden_layers: Number of hidden conv + PReLU blocks.
    """

    seed: int = 42

    # Game rules
    build_cost: int = 10
    unit_cost: int = 10
    turn_income: int = 10
    sticky_ownership: bool = False
    max_turns: int = 200

    # Genetic algorithm
    population_size: int = 20
    game_count: int = 3
    selection_rate: float = 0.5
    mutation_rate: float = 0.1
    mutation_scale: float = 0.2

    # Network shape
    conv_size: int = 5
    inner_channels: int = 16
    hidden_layers: int = 2

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Keys not present fall back to the dataclass defaults; unknown
        keys are ignored.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
