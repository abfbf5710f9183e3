"""Agent — turns a grid snapshot into an order batch for one side.

Any object with an ``act(grid, player)`` method returning a list of
orders can play.  ``NetworkAgent`` is the evolvable implementation: it
encodes the grid as a 4-channel image from its own perspective, runs a
``SimpleNetwork`` over it and decodes the output channels into Build,
Spawn and Move orders.

Input channels:
    0. units, positive for own troops
    1. scrap
    2. ownership, +1 own / -1 enemy / 0 neutral
    3. recycler flag

Output channels:
    0. build score (build where positive)
    1. spawn score (spawn on the best cell)
    2. horizontal move offset (tanh, scaled to the grid width)
    3. vertical move offset (tanh, scaled to the grid height)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np
from numpy.typing import NDArray

from scrapwar.simulation.orders import Build, Move, Order, Spawn

if TYPE_CHECKING:
    from scrapwar.agents.net import SimpleNetwork
    from scrapwar.world.cell import Player
    from scrapwar.world.grid import Grid

INPUT_CHANNELS = 4
OUTPUT_CHANNELS = 4


class Agent(Protocol):
    """Produces one side's orders for the coming turn.  Must not mutate the grid."""

    def act(self, grid: Grid, player: Player) -> list[Order]: ...


@dataclass
class IdleAgent:
    """Submits nothing; useful as a baseline opponent."""

    def act(self, grid: Grid, player: Player) -> list[Order]:
        return []


@dataclass
class NetworkAgent:
    """Agent driven by a convolution network.

    Attributes:
        network: The policy network.
        fitness: Score accumulated during evaluation.
        build_cost: Scrap per recycler, used to budget orders.
        unit_cost: Scrap per spawned unit, used to budget orders.
    """

    network: SimpleNetwork
    fitness: float = 0.0
    build_cost: int = 10
    unit_cost: int = 10

    @staticmethod
    def encode(grid: Grid, player: Player) -> NDArray[np.float64]:
        """Return the ``(height, width, 4)`` input image seen by ``player``."""
        image = np.zeros((grid.height, grid.width, INPUT_CHANNELS), dtype=np.float64)
        sign = player.sign
        for cell in grid.iter_cells():
            owner = 0.0
            if cell.owner is not None:
                owner = 1.0 if cell.owner is player else -1.0
            image[cell.y, cell.x] = (
                cell.units * sign,
                cell.scrap,
                owner,
                1.0 if cell.recycler else 0.0,
            )
        return image

    def act(self, grid: Grid, player: Player) -> list[Order]:
        """Run the network on the grid and decode its output into orders."""
        out = self.network.process(self.encode(grid, player))
        bank = grid.banks[player]
        orders: list[Order] = []

        # Builds: owned empty cells with a positive score, best first
        candidates = [
            cell
            for cell in grid.iter_cells()
            if cell.owner is player
            and cell.units == 0
            and not cell.recycler
            and cell.scrap > 0
            and out[cell.y, cell.x, 0] > 0
        ]
        candidates.sort(key=lambda c: out[c.y, c.x, 0], reverse=True)
        for cell in candidates:
            if bank < self.build_cost:
                break
            orders.append(Build(x=cell.x, y=cell.y))
            bank -= self.build_cost

        # Spawn: whole remaining bank on the best owned cell
        amount = bank // self.unit_cost if self.unit_cost > 0 else 0
        spawnable = [
            cell for cell in grid.iter_cells() if cell.owner is player and not cell.is_wall
        ]
        if amount > 0 and spawnable:
            best = max(spawnable, key=lambda c: out[c.y, c.x, 1])
            orders.append(Spawn(x=best.x, y=best.y, amount=int(amount)))

        # Moves: every own stack heads for its decoded target
        for cell in grid.iter_cells():
            units = cell.units_of(player)
            if units <= 0:
                continue
            dx = np.tanh(out[cell.y, cell.x, 2]) * grid.width
            dy = np.tanh(out[cell.y, cell.x, 3]) * grid.height
            tx = int(np.clip(cell.x + round(float(dx)), 0, grid.width - 1))
            ty = int(np.clip(cell.y + round(float(dy)), 0, grid.height - 1))
            if (tx, ty) != (cell.x, cell.y):
                orders.append(
                    Move(from_x=cell.x, from_y=cell.y, to_x=tx, to_y=ty, amount=units),
                )
        return orders
