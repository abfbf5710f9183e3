"""Entry point for ``python -m scrapwar``.

Loads the YAML config and a start map, optionally evolves a population
of network agents, then plays a match between two agents either
headless or in a Pygame window.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

import numpy as np

from scrapwar.agents.agent import NetworkAgent
from scrapwar.agents.evolution import GeneticAlgorithm
from scrapwar.agents.net import SimpleNetwork
from scrapwar.simulation.config import SimulationConfig
from scrapwar.simulation.engine import TurnEngine
from scrapwar.simulation.match import Match
from scrapwar.ui.pygame_client import PygameRenderer
from scrapwar.world.loader import load_grid

logger = logging.getLogger("scrapwar")

_ROOT = pathlib.Path(__file__).resolve().parent.parent
_DEFAULT_CONFIG = _ROOT / "config" / "default.yaml"
_DEFAULT_MAP = _ROOT / "maps" / "start_map.txt"


def main() -> None:
    """Parse CLI args, prepare agents, play a match."""
    parser = argparse.ArgumentParser(
        prog="scrapwar",
        description="scrapwar - two-player scrap and recycler war game",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "-m",
        "--map",
        type=pathlib.Path,
        default=_DEFAULT_MAP,
        help="Path to start map (default: maps/start_map.txt)",
    )
    parser.add_argument(
        "--turns",
        type=int,
        default=None,
        help="Turn limit (default: max_turns from config)",
    )
    parser.add_argument(
        "--evolve",
        type=int,
        default=0,
        help="Generations to evolve before the match (default: 0)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Play without opening a window",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=32,
        help="Pixel size per grid cell (default: 32)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=2.0,
        help="Turns per second (default: 2)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    map_text = args.map.read_text()
    rng = np.random.default_rng(config.seed)

    def make_network() -> SimpleNetwork:
        return SimpleNetwork.simple_maker(
            rng,
            conv_size=config.conv_size,
            inner_channels=config.inner_channels,
            layers=config.hidden_layers,
        )

    if args.evolve > 0:
        ga = GeneticAlgorithm.from_config(config)
        ga.fill(
            max(2, config.population_size),
            make_network,
            build_cost=config.build_cost,
            unit_cost=config.unit_cost,
        )
        for _ in range(args.evolve):
            ga.step(map_text, config, rng)
        agent_a, agent_b = ga.population[:2]
    else:
        agent_a = NetworkAgent(
            network=make_network(),
            build_cost=config.build_cost,
            unit_cost=config.unit_cost,
        )
        agent_b = NetworkAgent(
            network=make_network(),
            build_cost=config.build_cost,
            unit_cost=config.unit_cost,
        )

    engine = TurnEngine(grid=load_grid(map_text), config=config)
    match = Match(
        engine,
        agent_a,
        agent_b,
        max_turns=args.turns if args.turns is not None else config.max_turns,
    )

    if args.headless:
        winner = match.play()
        logger.info(
            "Finished after %d turns, winner: %s",
            engine.turn,
            winner.name if winner else "draw",
        )
        return

    renderer = PygameRenderer(
        match=match,
        cell_size=args.cell_size,
        turns_per_second=args.speed,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
