"""TurnEngine — resolves one game turn from two order batches.

Every turn runs the same five phases in a fixed order; changing the
order changes the rules of the game:

1. Build recyclers
2. Queue moves and spawns (pathfinder resolves each move's step)
3. Fold queued deltas into units and derive ownership
4. Recycler harvest and cell destruction
5. Flat income for both players
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from scrapwar.simulation.config import SimulationConfig
from scrapwar.simulation.orders import Order
from scrapwar.world.cell import Player
from scrapwar.world.grid import Grid
from scrapwar.world.pathfinder import Pathfinder

logger = logging.getLogger(__name__)


@dataclass
class TurnEngine:
    """Applies turns to a Grid it exclusively owns.

    Attributes:
        grid: The battlefield being simulated.
        config: Rule values (costs, income, ownership mode).
        pathfinder: Search state reused by every move order.
        turn: Number of turns resolved so far.
    """

    grid: Grid
    config: SimulationConfig = field(default_factory=SimulationConfig)
    pathfinder: Pathfinder = field(init=False, repr=False)
    turn: int = 0

    def __post_init__(self) -> None:
        """Size the pathfinder scratch space to the grid."""
        self.pathfinder = Pathfinder(self.grid.width, self.grid.height)

    def next_turn(
        self,
        orders_a: Sequence[Order],
        orders_b: Sequence[Order],
    ) -> None:
        """Resolve one turn in place.

        Args:
            orders_a: Player A's orders, in submission order.
            orders_b: Player B's orders, in submission order.
        """
        grid = self.grid
        cfg = self.config

        # 1. Build
        grid.build_phase(orders_a, orders_b, build_cost=cfg.build_cost)
        logger.debug(
            "Turn %d build: banks A=%d B=%d",
            self.turn + 1,
            grid.banks[Player.A],
            grid.banks[Player.B],
        )

        # 2. Move / spawn
        grid.move_and_spawn_phase(
            orders_a,
            orders_b,
            self.pathfinder,
            unit_cost=cfg.unit_cost,
        )
        logger.debug("Turn %d move/spawn queued", self.turn + 1)

        # 3. Units and ownership
        grid.resolve_units_and_ownership(sticky_ownership=cfg.sticky_ownership)
        logger.debug("Turn %d units and ownership resolved", self.turn + 1)

        # 4. Recyclers
        grid.recycler_phase()
        logger.debug("Turn %d recyclers harvested", self.turn + 1)

        # 5. Income
        grid.end_of_turn_income(cfg.turn_income)

        self.turn += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Turn %d: banks A=%d B=%d, territory A=%d B=%d",
                self.turn,
                grid.banks[Player.A],
                grid.banks[Player.B],
                grid.territory(Player.A),
                grid.territory(Player.B),
            )
