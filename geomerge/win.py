"""Win evaluation against the held token."""

from __future__ import annotations

from typing import Optional

from .logging_utils import log_success
from .render import NullRenderSink, RenderSink
from .schemas import Token


class WinEvaluator:
    """Signals a win the first time the held token reaches ``win_requirement``.

    Winning does not lock the game; later evaluations simply return False until
    ``reset()`` is called for a new game.
    """

    def __init__(self, win_requirement: int, render: Optional[RenderSink] = None):
        self.win_requirement = win_requirement
        self.render: RenderSink = render or NullRenderSink()
        self.won = False

    def evaluate(self, held: Optional[Token]) -> bool:
        """Return True only on the evaluation that first triggers the win."""
        if self.won or held is None or held.value < self.win_requirement:
            return False
        self.won = True
        log_success(f"You win! Holding a token worth {held.value}")
        self.render.game_won(held)
        return True

    def reset(self) -> None:
        self.won = False
