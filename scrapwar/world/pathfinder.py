"""Pathfinder — breadth-first flood fill that yields one step per query.

Units advance a single tile per turn, so a move order only needs the
first step of a shortest path toward its destination.  When walls cut
the destination off, the search falls back to the reachable cell that
lies closest (Euclidean) to it.

The scratch arrays are allocated once per grid size and cleared in place
at the start of every search.
"""

from __future__ import annotations

from collections import deque

import numpy as np
from numpy.typing import NDArray

# Expansion order matters for tie-breaking: left, up, right, down.
_OFFSETS = ((-1, 0), (0, -1), (1, 0), (0, 1))


class Pathfinder:
    """Reusable BFS search state sized to one grid.

    Attributes:
        width: Grid columns.
        height: Grid rows.
        distance: Step distance from the source (source = 1, 0 = unvisited).
        walls: Cells the search may not enter.
        previous: Predecessor ``(x, y)`` for each visited cell.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.distance: NDArray[np.int32] = np.zeros((height, width), dtype=np.int32)
        self.walls: NDArray[np.bool_] = np.zeros((height, width), dtype=np.bool_)
        self.previous: NDArray[np.int32] = np.zeros(
            (height, width, 2),
            dtype=np.int32,
        )

    def set_walls(self, mask: NDArray[np.bool_]) -> None:
        """Copy a ``(height, width)`` wall mask into the scratch buffer.

        Raises:
            ValueError: If the mask shape does not match the grid.
        """
        if mask.shape != self.walls.shape:
            msg = f"wall mask shape {mask.shape} != {self.walls.shape}"
            raise ValueError(msg)
        np.copyto(self.walls, mask)

    def find_step(
        self,
        source: tuple[int, int],
        destination: tuple[int, int],
    ) -> tuple[int, int]:
        """Return the cell a mover at ``source`` should step to this turn.

        Args:
            source: ``(x, y)`` of the moving stack.  Always expandable,
                even if it is marked as a wall.
            destination: ``(x, y)`` the stack is heading for.

        Returns:
            The neighbour of ``source`` on a shortest path toward the
            destination, or toward the nearest reachable cell if the
            destination is walled off.  ``source`` itself when there is
            nowhere closer to go.

        Raises:
            IndexError: If either coordinate pair is outside the grid.
        """
        sx, sy = source
        dx, dy = destination
        for x, y in (source, destination):
            if not (0 <= x < self.width and 0 <= y < self.height):
                msg = f"({x}, {y}) out of bounds for {self.width}x{self.height}"
                raise IndexError(msg)

        distance = self.distance
        previous = self.previous
        walls = self.walls
        distance.fill(0)

        distance[sy, sx] = 1
        previous[sy, sx] = (sx, sy)
        nearest = (sx, sy)
        nearest_dist = (sx - dx) ** 2 + (sy - dy) ** 2

        frontier = deque([(sx, sy)])
        while frontier and distance[dy, dx] == 0:
            x, y = frontier.popleft()
            step = distance[y, x] + 1
            for ox, oy in _OFFSETS:
                nx, ny = x + ox, y + oy
                if not (0 <= nx < self.width and 0 <= ny < self.height):
                    continue
                if distance[ny, nx] != 0 or walls[ny, nx]:
                    continue
                distance[ny, nx] = step
                previous[ny, nx] = (x, y)
                # Squared distance preserves the Euclidean ordering
                d = (nx - dx) ** 2 + (ny - dy) ** 2
                if d < nearest_dist:
                    nearest_dist = d
                    nearest = (nx, ny)
                frontier.append((nx, ny))

        cx, cy = nearest
        while distance[cy, cx] > 2:
            cx, cy = (int(v) for v in previous[cy, cx])
        return cx, cy
