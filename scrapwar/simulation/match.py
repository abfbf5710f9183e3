"""Match — two agents playing turns against each other on one engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from scrapwar.world.cell import Player

if TYPE_CHECKING:
    from scrapwar.agents.agent import Agent
    from scrapwar.simulation.engine import TurnEngine

logger = logging.getLogger(__name__)


@dataclass
class Match:
    """Drives a TurnEngine with orders requested from two agents.

    Attributes:
        engine: The engine owning the grid.
        agent_a: Agent playing side A.
        agent_b: Agent playing side B.
        max_turns: Turn limit after which the match is over.
    """

    engine: TurnEngine
    agent_a: Agent
    agent_b: Agent
    max_turns: int = 200

    @property
    def finished(self) -> bool:
        """Return True once the turn limit is hit or a side is wiped out."""
        if self.engine.turn >= self.max_turns:
            return True
        grid = self.engine.grid
        return any(
            grid.unit_count(player) == 0 and grid.territory(player) == 0
            for player in Player
        )

    def play_turn(self) -> None:
        """Collect both agents' orders and resolve one turn."""
        grid = self.engine.grid
        orders_a = self.agent_a.act(grid, Player.A)
        orders_b = self.agent_b.act(grid, Player.B)
        self.engine.next_turn(orders_a, orders_b)

    def play(self) -> Player | None:
        """Play until finished and return the winner (None on a tie)."""
        while not self.finished:
            self.play_turn()
        winner = self.winner()
        logger.debug(
            "Match over after %d turns, winner: %s",
            self.engine.turn,
            winner.name if winner else "draw",
        )
        return winner

    def winner(self) -> Player | None:
        """Return the side ahead on territory, then on units."""
        grid = self.engine.grid
        a = (grid.territory(Player.A), grid.unit_count(Player.A))
        b = (grid.territory(Player.B), grid.unit_count(Player.B))
        if a == b:
            return None
        return Player.A if a > b else Player.B

    def score(self, player: Player) -> int:
        """Return ``player``'s territory minus the opponent's."""
        grid = self.engine.grid
        return grid.territory(player) - grid.territory(player.opponent)
