"""Loader — build a Grid from the semicolon-delimited map format.

The format is a ``;``-separated list of records::

    <width> <height>;<bankA> <bankB>;<cell>;<cell>;...

followed by exactly ``width * height`` cell records in row-major order
(y outer, x inner).  Each cell record is seven space-separated integers::

    scrap owner units recycler can_build can_spawn in_range_of_recycler

where ``owner`` is ``1`` for player A, ``0`` for player B and ``-1`` for
nobody.  The last three flags are informational and discarded.  Units
are stored signed, so player B's magnitudes are negated on load.
"""

from __future__ import annotations

import logging
from pathlib import Path

from scrapwar.world.cell import Player
from scrapwar.world.grid import Grid

logger = logging.getLogger(__name__)

_OWNER_CODES: dict[int, Player | None] = {1: Player.A, 0: Player.B, -1: None}
_CELL_FIELDS = 7


class GridFormatError(ValueError):
    """Raised when map text cannot be turned into a consistent Grid."""


def _parse_ints(record: str, expected: int, what: str) -> list[int]:
    parts = record.split()
    if len(parts) != expected:
        msg = f"{what}: expected {expected} fields, got {len(parts)} in {record!r}"
        raise GridFormatError(msg)
    try:
        return [int(p) for p in parts]
    except ValueError as exc:
        msg = f"{what}: non-integer field in {record!r}"
        raise GridFormatError(msg) from exc


def load_grid(text: str) -> Grid:
    """Parse map text into a new Grid.

    Args:
        text: The full map description.

    Returns:
        A Grid with cells, owners, units, recyclers and banks populated.

    Raises:
        GridFormatError: On a record count mismatch, a malformed record,
            an unknown owner code or an inconsistent cell (units or a
            recycler on a barren cell).
    """
    records = [r.strip() for r in text.strip().split(";")]
    if records and records[-1] == "":
        records.pop()
    if len(records) < 2:
        msg = f"expected size and bank records, got {len(records)} records"
        raise GridFormatError(msg)

    width, height = _parse_ints(records[0], 2, "size record")
    if width <= 0 or height <= 0:
        msg = f"grid dimensions must be positive, got {width}x{height}"
        raise GridFormatError(msg)
    bank_a, bank_b = _parse_ints(records[1], 2, "bank record")

    cell_records = records[2:]
    if len(cell_records) != width * height:
        msg = f"expected {width * height} cell records, got {len(cell_records)}"
        raise GridFormatError(msg)

    grid = Grid(width=width, height=height)
    grid.banks[Player.A] = bank_a
    grid.banks[Player.B] = bank_b

    for i, record in enumerate(cell_records):
        x, y = i % width, i // width
        what = f"cell ({x}, {y})"
        scrap, owner_code, units, recycler, *_flags = _parse_ints(
            record,
            _CELL_FIELDS,
            what,
        )
        if owner_code not in _OWNER_CODES:
            msg = f"{what}: unknown owner code {owner_code}"
            raise GridFormatError(msg)
        if scrap < 0 or units < 0:
            msg = f"{what}: scrap and units must be non-negative"
            raise GridFormatError(msg)
        if scrap == 0 and (units != 0 or recycler or owner_code != -1):
            msg = f"{what}: barren cell cannot hold units, a recycler or an owner"
            raise GridFormatError(msg)

        owner = _OWNER_CODES[owner_code]
        if owner is None and (units != 0 or recycler):
            msg = f"{what}: neutral cell cannot hold units or a recycler"
            raise GridFormatError(msg)
        cell = grid.cells[y][x]
        cell.scrap = scrap
        cell.owner = owner
        cell.units = -units if owner is Player.B else units
        cell.recycler = recycler == 1
        if cell.recycler:
            cell.recycler_owner = owner

    logger.debug("Loaded %dx%d grid, banks A=%d B=%d", width, height, bank_a, bank_b)
    return grid


def load_grid_file(path: str | Path) -> Grid:
    """Read a map file and parse it with :func:`load_grid`.

    Raises:
        FileNotFoundError: If the map file does not exist.
        GridFormatError: If its contents are malformed.
    """
    path = Path(path)
    with path.open("r") as f:
        return load_grid(f.read())
