"""Evolution — a genetic algorithm over network agents.

Each generation every agent plays ``game_count`` matches against
randomly drawn members of the population, alternating sides.  The best
``selection_rate`` fraction survives; the rest of the population is
refilled with mutated crossovers of survivors.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scrapwar.agents.agent import NetworkAgent
from scrapwar.simulation.engine import TurnEngine
from scrapwar.simulation.match import Match
from scrapwar.world.cell import Player
from scrapwar.world.loader import load_grid

if TYPE_CHECKING:
    from numpy.random import Generator

    from scrapwar.agents.net import SimpleNetwork
    from scrapwar.simulation.config import SimulationConfig

logger = logging.getLogger(__name__)


def mutate_network(
    network: SimpleNetwork,
    rng: Generator,
    *,
    rate: float,
    scale: float,
) -> None:
    """Perturb a random subset of weights in place with gaussian noise.

    Args:
        network: Network to mutate.
        rng: Seeded random generator.
        rate: Probability that any single weight is perturbed.
        scale: Standard deviation of the noise.
    """
    for param in network.parameters():
        hit = rng.random(param.shape) < rate
        param += hit * rng.normal(0.0, scale, size=param.shape)


def crossover_networks(
    parent_a: SimpleNetwork,
    parent_b: SimpleNetwork,
    rng: Generator,
) -> SimpleNetwork:
    """Return a child taking each weight from one parent at random.

    Raises:
        ValueError: If the parents' architectures differ.
    """
    child = parent_a.copy()
    params_b = parent_b.parameters()
    params_child = child.parameters()
    if len(params_b) != len(params_child) or any(
        a.shape != b.shape for a, b in zip(params_child, params_b, strict=True)
    ):
        msg = "cannot cross networks with different architectures"
        raise ValueError(msg)
    for mine, theirs in zip(params_child, params_b, strict=True):
        take = rng.random(mine.shape) < 0.5
        mine[take] = theirs[take]
    return child


@dataclass
class GeneticAlgorithm:
    """Population manager for NetworkAgents.

    Attributes:
        population: Current agents.
        game_count: Matches per agent per generation.
        selection_rate: Fraction of agents kept after ranking.
        mutation_rate: Per-weight mutation probability for offspring.
        mutation_scale: Standard deviation of offspring mutations.
        generation: Number of completed generations.
    """

    population: list[NetworkAgent] = field(default_factory=list)
    game_count: int = 3
    selection_rate: float = 0.5
    mutation_rate: float = 0.1
    mutation_scale: float = 0.2
    generation: int = 0

    @classmethod
    def from_config(cls, config: SimulationConfig) -> GeneticAlgorithm:
        """Create an empty population manager from config values."""
        return cls(
            game_count=config.game_count,
            selection_rate=config.selection_rate,
            mutation_rate=config.mutation_rate,
            mutation_scale=config.mutation_scale,
        )

    def fill(
        self,
        size: int,
        network_factory: Callable[[], SimpleNetwork],
        *,
        build_cost: int = 10,
        unit_cost: int = 10,
    ) -> None:
        """Top the population up to ``size`` agents with fresh networks."""
        while len(self.population) < size:
            self.population.append(
                NetworkAgent(
                    network=network_factory(),
                    build_cost=build_cost,
                    unit_cost=unit_cost,
                ),
            )

    def evaluate(
        self,
        map_text: str,
        config: SimulationConfig,
        rng: Generator,
    ) -> None:
        """Reset and recompute every agent's fitness by playing matches.

        Args:
            map_text: Starting map, reloaded fresh for every match.
            config: Rules and match length.
            rng: Seeded random generator for opponent draws.
        """
        for agent in self.population:
            agent.fitness = 0.0

        size = len(self.population)
        for i, agent in enumerate(self.population):
            for game in range(self.game_count):
                opponent = self.population[int(rng.integers(0, size))]
                side = Player.A if game % 2 == 0 else Player.B
                engine = TurnEngine(grid=load_grid(map_text), config=config)
                if side is Player.A:
                    match = Match(engine, agent, opponent, max_turns=config.max_turns)
                else:
                    match = Match(engine, opponent, agent, max_turns=config.max_turns)
                match.play()
                agent.fitness += match.score(side)
            logger.debug("Agent %d fitness %.1f", i, agent.fitness)

    def step(
        self,
        map_text: str,
        config: SimulationConfig,
        rng: Generator,
    ) -> float:
        """Run one generation: evaluate, select, breed.

        Returns:
            The best fitness seen in the evaluated generation.

        Raises:
            ValueError: If the population is empty.
        """
        if not self.population:
            msg = "population is empty; call fill() first"
            raise ValueError(msg)

        self.evaluate(map_text, config, rng)
        ranked = sorted(self.population, key=lambda a: a.fitness, reverse=True)
        best = ranked[0].fitness

        keep = max(1, int(len(ranked) * self.selection_rate))
        survivors = ranked[:keep]
        offspring: list[NetworkAgent] = []
        while keep + len(offspring) < len(ranked):
            mother = survivors[int(rng.integers(0, keep))]
            father = survivors[int(rng.integers(0, keep))]
            network = crossover_networks(mother.network, father.network, rng)
            mutate_network(
                network,
                rng,
                rate=self.mutation_rate,
                scale=self.mutation_scale,
            )
            offspring.append(
                NetworkAgent(
                    network=network,
                    build_cost=mother.build_cost,
                    unit_cost=mother.unit_cost,
                ),
            )

        self.population = survivors + offspring
        self.generation += 1
        logger.info(
            "Generation %d: best fitness %.1f, mean %.1f",
            self.generation,
            best,
            sum(a.fitness for a in ranked) / len(ranked),
        )
        return best
