"""Grid — the battlefield and the per-phase mutators of a turn.

The Grid owns all cells, both scrap banks and the recycler influence
masks.  Turn resolution is split into phases (build, move/spawn,
resolve, recycler, income); ``TurnEngine`` calls them in that fixed
order.  Illegal orders never raise: they are dropped and logged at
DEBUG level.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from scrapwar.simulation.orders import Build, Move, Order, Spawn
from scrapwar.world.cell import Cell, Player

if TYPE_CHECKING:
    from scrapwar.world.pathfinder import Pathfinder

logger = logging.getLogger(__name__)

_OFFSETS = ((-1, 0), (0, -1), (1, 0), (0, 1))


@dataclass
class Grid:
    """A ``width`` x ``height`` battlefield.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        cells: 2D list of Cell objects indexed as ``cells[y][x]``.
        banks: Scrap bank per player.
        recycler_masks: Per-player boolean ``(height, width)`` arrays of
            cells covered by that player's recyclers, rebuilt each
            recycler phase.
    """

    width: int
    height: int
    cells: list[list[Cell]] = field(init=False, repr=False)
    banks: dict[Player, int] = field(
        default_factory=lambda: {Player.A: 0, Player.B: 0},
    )
    recycler_masks: dict[Player, NDArray[np.bool_]] = field(
        init=False,
        repr=False,
    )

    def __post_init__(self) -> None:
        """Initialise barren cells and empty masks."""
        if self.width <= 0 or self.height <= 0:
            msg = f"grid dimensions must be positive, got {self.width}x{self.height}"
            raise ValueError(msg)
        self.cells = [
            [Cell(x=x, y=y) for x in range(self.width)] for y in range(self.height)
        ]
        self.recycler_masks = {
            player: np.zeros((self.height, self.width), dtype=np.bool_)
            for player in Player
        }

    # -- Queries -------------------------------------------------------------

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies on the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Cell:
        """Return the cell at grid coordinates ``(x, y)``.

        Raises:
            IndexError: If coordinates are out of bounds.
        """
        if not self.in_bounds(x, y):
            msg = f"({x}, {y}) out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        return self.cells[y][x]

    def neighbours(self, x: int, y: int) -> list[Cell]:
        """Return the orthogonally adjacent cells (excludes out-of-bounds)."""
        result: list[Cell] = []
        for dx, dy in _OFFSETS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                result.append(self.cells[ny][nx])
        return result

    def iter_cells(self) -> Iterator[Cell]:
        """Yield every cell in row-major order."""
        for row in self.cells:
            yield from row

    def territory(self, player: Player) -> int:
        """Return the number of cells owned by ``player``."""
        return sum(1 for cell in self.iter_cells() if cell.owner is player)

    def unit_count(self, player: Player) -> int:
        """Return the total troops ``player`` has on the board."""
        return sum(cell.units_of(player) for cell in self.iter_cells())

    def wall_mask(self) -> NDArray[np.bool_]:
        """Return a ``(height, width)`` mask of cells the pathfinder avoids."""
        return np.array(
            [[cell.is_wall for cell in row] for row in self.cells],
            dtype=np.bool_,
        )

    # -- Turn phases ---------------------------------------------------------

    def build_phase(
        self,
        orders_a: Sequence[Order],
        orders_b: Sequence[Order],
        *,
        build_cost: int = 10,
    ) -> None:
        """Place recyclers for both players.

        Each player's batch is walked in order.  As soon as a Build order
        finds the bank below ``build_cost`` the rest of that player's
        batch is abandoned for this phase.  Other illegal builds (wrong
        owner, units present, barren or already a recycler) are skipped.

        Args:
            orders_a: Player A's orders for the turn.
            orders_b: Player B's orders for the turn.
            build_cost: Scrap debited per recycler.
        """
        for player, orders in ((Player.A, orders_a), (Player.B, orders_b)):
            for order in orders:
                match order:
                    case Build(x=x, y=y):
                        if self.banks[player] < build_cost:
                            logger.debug(
                                "%s cannot afford build at (%d, %d); halting builds",
                                player.name,
                                x,
                                y,
                            )
                            break
                        if not self.in_bounds(x, y):
                            logger.debug("%s build out of bounds: %s", player.name, order)
                            continue
                        cell = self.cells[y][x]
                        if (
                            cell.owner is not player
                            or cell.units != 0
                            or cell.recycler
                            or cell.scrap == 0
                        ):
                            logger.debug("%s illegal build: %s", player.name, order)
                            continue
                        cell.recycler = True
                        cell.recycler_owner = player
                        self.banks[player] -= build_cost

    def move_and_spawn_phase(
        self,
        orders_a: Sequence[Order],
        orders_b: Sequence[Order],
        pathfinder: Pathfinder,
        *,
        unit_cost: int = 10,
    ) -> None:
        """Queue unit movement and spawns into ``pending_delta``.

        Legality is judged on ``units`` and ``owner`` as they stood when
        the phase began; queued deltas are only folded in by
        :meth:`resolve_units_and_ownership`.  A stack can still only be
        sent once: units already dispatched from a cell this phase are
        not available to later orders.

        Args:
            orders_a: Player A's orders for the turn.
            orders_b: Player B's orders for the turn.
            pathfinder: Search state sized to this grid.
            unit_cost: Scrap debited per spawned unit.
        """
        pathfinder.set_walls(self.wall_mask())

        for player, orders in ((Player.A, orders_a), (Player.B, orders_b)):
            dispatched: dict[tuple[int, int], int] = {}
            for order in orders:
                match order:
                    case Move():
                        self._queue_move(player, order, pathfinder, dispatched)
                    case Spawn():
                        self._queue_spawn(player, order, unit_cost)

    def _queue_move(
        self,
        player: Player,
        order: Move,
        pathfinder: Pathfinder,
        dispatched: dict[tuple[int, int], int],
    ) -> None:
        """Apply one Move order to the pending deltas, or drop it."""
        source = (order.from_x, order.from_y)
        destination = (order.to_x, order.to_y)
        if not (self.in_bounds(*source) and self.in_bounds(*destination)):
            logger.debug("%s move out of bounds: %s", player.name, order)
            return

        cell = self.cells[order.from_y][order.from_x]
        if cell.owner is not player or cell.units_of(player) <= 0:
            logger.debug("%s move from foreign or empty cell: %s", player.name, order)
            return

        available = cell.units_of(player) - dispatched.get(source, 0)
        amount = min(available, order.amount)
        if amount <= 0:
            return

        sx, sy = pathfinder.find_step(source, destination)
        cell.pending_delta -= amount * player.sign
        self.cells[sy][sx].pending_delta += amount * player.sign
        dispatched[source] = dispatched.get(source, 0) + amount

    def _queue_spawn(self, player: Player, order: Spawn, unit_cost: int) -> None:
        """Apply one Spawn order to the pending deltas, or drop it."""
        if order.amount <= 0 or not self.in_bounds(order.x, order.y):
            logger.debug("%s illegal spawn: %s", player.name, order)
            return
        cell = self.cells[order.y][order.x]
        if cell.is_wall:
            logger.debug("%s spawn onto wall: %s", player.name, order)
            return
        cost = order.amount * unit_cost
        if self.banks[player] < cost:
            logger.debug("%s cannot afford spawn: %s", player.name, order)
            return
        self.banks[player] -= cost
        cell.pending_delta += order.amount * player.sign

    def resolve_units_and_ownership(self, *, sticky_ownership: bool = False) -> None:
        """Fold pending deltas into units and derive owners from their sign.

        Args:
            sticky_ownership: If True, a cell emptied of units keeps its
                previous owner instead of reverting to neutral.
        """
        for cell in self.iter_cells():
            cell.units += cell.pending_delta
            cell.pending_delta = 0
            if cell.units > 0:
                cell.owner = Player.A
            elif cell.units < 0:
                cell.owner = Player.B
            elif not sticky_ownership:
                cell.owner = None

    def recycler_phase(self) -> None:
        """Harvest scrap around every recycler and destroy exhausted cells.

        Influence masks are rebuilt from scratch.  Each covered cell with
        scrap left loses one scrap per turn, and every player whose mask
        covers it earns one scrap, so a shared border pays both sides.
        """
        for mask in self.recycler_masks.values():
            mask.fill(False)

        for cell in self.iter_cells():
            if not cell.recycler or cell.recycler_owner is None:
                continue
            mask = self.recycler_masks[cell.recycler_owner]
            mask[cell.y, cell.x] = True
            for n in self.neighbours(cell.x, cell.y):
                mask[n.y, n.x] = True

        mask_a = self.recycler_masks[Player.A]
        mask_b = self.recycler_masks[Player.B]
        for cell in self.iter_cells():
            in_a = bool(mask_a[cell.y, cell.x])
            in_b = bool(mask_b[cell.y, cell.x])
            if not (in_a or in_b) or cell.scrap <= 0:
                continue
            cell.scrap -= 1
            if in_a:
                self.banks[Player.A] += 1
            if in_b:
                self.banks[Player.B] += 1
            if cell.scrap == 0:
                cell.destroy()

    def end_of_turn_income(self, amount: int = 10) -> None:
        """Credit the flat per-turn income to both banks."""
        for player in Player:
            self.banks[player] += amount
