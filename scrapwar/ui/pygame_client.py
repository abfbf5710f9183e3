"""Pygame 2D visualization for scrapwar matches.

Renders the grid (scrap, ownership, recyclers, unit stacks) in a window.
The match advances at a configurable turn rate while the display
refreshes at the Pygame frame rate.  Drawing only reads the grid; turns
are resolved through ``Match.play_turn``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import pygame

from scrapwar.world.cell import Cell, Player

if TYPE_CHECKING:
    from scrapwar.simulation.match import Match

# Colour palette
_BG = (20, 20, 20)
_BARREN = (0, 100, 0)
_NEUTRAL = (64, 64, 64)
_OWNER_COLOURS: dict[Player, tuple[int, int, int]] = {
    Player.A: (0, 0, 139),
    Player.B: (139, 0, 0),
}
_UNIT_COLOURS: dict[Player, tuple[int, int, int]] = {
    Player.A: (173, 216, 230),
    Player.B: (255, 128, 128),
}
_RECYCLER = (200, 200, 60)
_TEXT = (200, 200, 200)


def tile_colour(cell: Cell) -> tuple[int, int, int]:
    """Return the background colour for a cell."""
    if cell.scrap == 0:
        return _BARREN
    if cell.owner is None:
        return _NEUTRAL
    return _OWNER_COLOURS[cell.owner]


class PygameRenderer:
    """Renders a Match into a Pygame window.

    Attributes:
        match: The match to visualise.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    # Speed presets: turns per second
    _SPEED_STEPS: ClassVar[list[float]] = [0.5, 1.0, 2.0, 5.0, 10.0, 30.0]

    def __init__(
        self,
        match: Match,
        cell_size: int = 32,
        turns_per_second: float = 2.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            match: The match to render.
            cell_size: Pixel width/height per grid cell.
            turns_per_second: Turns resolved per real-time second.
        """
        self.match = match
        self.cell_size = cell_size
        self.turns_per_second = turns_per_second
        self._speed_index = self._nearest_speed(turns_per_second)
        self._turn_accumulator = 0.0

        grid = match.engine.grid
        self._panel_width = 200
        self._win_w = grid.width * cell_size + self._panel_width
        self._win_h = max(grid.height * cell_size, 260)

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("scrapwar")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True
        self.paused = False

    def _nearest_speed(self, tps: float) -> int:
        """Return the index of the closest speed preset."""
        return min(
            range(len(self._SPEED_STEPS)),
            key=lambda i: abs(self._SPEED_STEPS[i] - tps),
        )

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, play turns, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0
            self._handle_events()
            if not self.paused and not self.match.finished:
                self._turn_accumulator += self.turns_per_second * dt
                turns = int(self._turn_accumulator)
                self._turn_accumulator -= turns
                for _ in range(turns):
                    if self.match.finished:
                        break
                    self.match.play_turn()
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.turns_per_second = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.turns_per_second = self._SPEED_STEPS[self._speed_index]

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_tiles()
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_tiles(self) -> None:
        """Draw each tile, its recycler and its unit stack."""
        cs = self.cell_size
        for cell in self.match.engine.grid.iter_cells():
            rect = pygame.Rect(cell.x * cs + 1, cell.y * cs + 1, cs - 2, cs - 2)
            pygame.draw.rect(self.screen, tile_colour(cell), rect)

            if cell.recycler:
                inner = rect.inflate(-cs // 2, -cs // 2)
                pygame.draw.rect(self.screen, _RECYCLER, inner)

            if cell.units != 0 and cell.owner is not None:
                centre = rect.center
                pygame.draw.circle(
                    self.screen,
                    _UNIT_COLOURS[cell.owner],
                    centre,
                    int(cs / 2 * 0.8),
                )
                label = self.font.render(str(abs(cell.units)), True, (0, 0, 0))
                self.screen.blit(label, label.get_rect(center=centre))

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        grid = self.match.engine.grid
        panel_x = grid.width * self.cell_size + 10
        y = 10

        lines = [
            f"Turn: {self.match.engine.turn}/{self.match.max_turns}",
            f"Speed: {self.turns_per_second:.1f} t/s",
            f"{'PAUSED' if self.paused else 'RUNNING'}",
            "",
        ]
        for player in Player:
            lines += [
                f"--- Player {player.name} ---",
                f"Scrap: {grid.banks[player]}",
                f"Tiles: {grid.territory(player)}",
                f"Units: {grid.unit_count(player)}",
                "",
            ]
        if self.match.finished:
            winner = self.match.winner()
            lines.append(f"Winner: {winner.name if winner else 'draw'}")

        lines += [
            "",
            "SPACE: pause",
            "+/-: speed",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18
