"""Cell — a single tile in the battle grid.

Each cell holds its remaining scrap, an optional recycler, and a signed
unit count whose sign encodes the owning side.  Ownership is never set
directly; it is derived from the unit sign during turn resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Player(Enum):
    """The two competing sides.  The value is the sign of their units."""

    A = 1
    B = -1

    @property
    def sign(self) -> int:
        """Return +1 for player A and -1 for player B."""
        return self.value

    @property
    def opponent(self) -> Player:
        """Return the other side."""
        return Player.B if self is Player.A else Player.A


@dataclass
class Cell:
    """A single tile in the grid.

    Attributes:
        x: Column position.
        y: Row position.
        scrap: Remaining scrap (0 = barren, impassable).
        recycler: Whether a recycler occupies this cell.
        recycler_owner: Side that built the recycler, if any.
        units: Signed troop count (positive = A, negative = B).
        pending_delta: Arrivals/departures queued during the current
            move/spawn phase, folded into ``units`` on resolution.
        owner: Side derived from the sign of ``units``.
    """

    x: int
    y: int
    scrap: int = 0
    recycler: bool = False
    recycler_owner: Player | None = None
    units: int = 0
    pending_delta: int = 0
    owner: Player | None = None

    @property
    def is_wall(self) -> bool:
        """Return True if the pathfinder may not enter this cell."""
        return self.recycler or self.scrap == 0

    def units_of(self, player: Player) -> int:
        """Return how many of ``player``'s troops stand here (never negative)."""
        return max(0, self.units * player.sign)

    def destroy(self) -> None:
        """Clear occupancy once the cell's scrap is exhausted."""
        self.units = 0
        self.pending_delta = 0
        self.recycler = False
        self.recycler_owner = None
        self.owner = None
