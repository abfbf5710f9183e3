"""Shared fixtures for the scrapwar test suite."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from numpy.random import Generator

from scrapwar.simulation.config import SimulationConfig
from scrapwar.world.grid import Grid

MAPS_DIR = Path(__file__).resolve().parent.parent / "maps"


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default rules (no YAML file needed)."""
    return SimulationConfig()


@pytest.fixture
def start_map_text() -> str:
    """The bundled 14x7 start map."""
    return (MAPS_DIR / "start_map.txt").read_text()


@pytest.fixture
def open_grid() -> Grid:
    """An 8x8 grid with 5 scrap on every cell, no units, empty banks."""
    grid = Grid(width=8, height=8)
    for cell in grid.iter_cells():
        cell.scrap = 5
    return grid
