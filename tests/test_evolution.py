"""Tests for scrapwar.agents.evolution."""

import numpy as np
import pytest
from numpy.random import Generator

from scrapwar.agents.evolution import (
    GeneticAlgorithm,
    crossover_networks,
    mutate_network,
)
from scrapwar.agents.net import SimpleNetwork
from scrapwar.simulation.config import SimulationConfig

# 4x3 board: one A stack on the left, one B stack on the right
TINY_MAP = ";".join(
    [
        "4 3",
        "10 10",
        *["5 -1 0 0 0 0 0"] * 4,
        "5 1 2 0 0 1 0",
        "5 -1 0 0 0 0 0",
        "5 -1 0 0 0 0 0",
        "5 0 2 0 0 1 0",
        *["5 -1 0 0 0 0 0"] * 4,
    ],
)


def tiny_network(rng: Generator) -> SimpleNetwork:
    return SimpleNetwork.simple_maker(rng, conv_size=3, inner_channels=2, layers=0)


class TestOperators:
    """Tests for mutation and crossover."""

    def test_zero_rate_mutation_is_noop(self, rng: Generator) -> None:
        net = tiny_network(rng)
        before = [p.copy() for p in net.parameters()]
        mutate_network(net, rng, rate=0.0, scale=1.0)
        for old, new in zip(before, net.parameters(), strict=True):
            assert np.array_equal(old, new)

    def test_full_rate_mutation_changes_weights(self, rng: Generator) -> None:
        net = tiny_network(rng)
        before = [p.copy() for p in net.parameters()]
        mutate_network(net, rng, rate=1.0, scale=0.5)
        changed = [
            not np.array_equal(old, new)
            for old, new in zip(before, net.parameters(), strict=True)
        ]
        assert all(changed)

    def test_crossover_takes_weights_from_parents(self, rng: Generator) -> None:
        mother = tiny_network(rng)
        father = tiny_network(rng)
        child = crossover_networks(mother, father, rng)
        for c, m, f in zip(
            child.parameters(),
            mother.parameters(),
            father.parameters(),
            strict=True,
        ):
            assert np.all((c == m) | (c == f))
        assert child.parameters()[0] is not mother.parameters()[0]

    def test_crossover_rejects_mismatched_architectures(self, rng: Generator) -> None:
        small = tiny_network(rng)
        big = SimpleNetwork.simple_maker(rng, conv_size=3, inner_channels=2, layers=1)
        with pytest.raises(ValueError):
            crossover_networks(small, big, rng)


class TestGeneticAlgorithm:
    """Tests for population management."""

    def test_from_config(self) -> None:
        cfg = SimulationConfig(game_count=5, selection_rate=0.25)
        ga = GeneticAlgorithm.from_config(cfg)
        assert ga.game_count == 5
        assert ga.selection_rate == 0.25
        assert ga.population == []

    def test_fill(self, rng: Generator) -> None:
        ga = GeneticAlgorithm()
        ga.fill(6, lambda: tiny_network(rng), unit_cost=5)
        assert len(ga.population) == 6
        assert all(agent.unit_cost == 5 for agent in ga.population)

    def test_step_keeps_population_size(self, rng: Generator) -> None:
        cfg = SimulationConfig(max_turns=4)
        ga = GeneticAlgorithm(game_count=2, selection_rate=0.5)
        ga.fill(4, lambda: tiny_network(rng))
        best = ga.step(TINY_MAP, cfg, rng)

        assert ga.generation == 1
        assert len(ga.population) == 4
        assert best == max(a.fitness for a in ga.population[:2])
        # Survivors come first, ranked by fitness
        assert ga.population[0].fitness >= ga.population[1].fitness

    def test_evaluate_resets_fitness(self, rng: Generator) -> None:
        cfg = SimulationConfig(max_turns=2)
        ga = GeneticAlgorithm(game_count=1)
        ga.fill(2, lambda: tiny_network(rng))
        for agent in ga.population:
            agent.fitness = 1000.0
        ga.evaluate(TINY_MAP, cfg, rng)
        assert all(abs(agent.fitness) <= 12 for agent in ga.population)

    def test_step_on_empty_population(self, rng: Generator) -> None:
        with pytest.raises(ValueError):
            GeneticAlgorithm().step(TINY_MAP, SimulationConfig(), rng)
