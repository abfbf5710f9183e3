"""Orders — the per-turn instructions an agent submits for its side.

Orders form a tagged union.  Each turn phase pattern-matches on the tag
it cares about and ignores the rest, so a single mixed batch can be fed
to every phase.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class Build:
    """Turn an owned, empty cell into a recycler."""

    x: int
    y: int


@dataclass(frozen=True, slots=True)
class Spawn:
    """Materialise ``amount`` new units on a cell."""

    x: int
    y: int
    amount: int


@dataclass(frozen=True, slots=True)
class Move:
    """Send up to ``amount`` units from one cell toward another."""

    from_x: int
    from_y: int
    to_x: int
    to_y: int
    amount: int


Order: TypeAlias = Build | Spawn | Move
