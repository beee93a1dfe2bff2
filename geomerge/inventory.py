"""
Inventory and the merge/swap state machine.

The player holds at most one token. Clicking an interactive cell runs exactly
one transition:

- merge: the held token and the cell token have the same value. The cell token
  doubles and the inventory empties.
- swap: anything else. Held and cell tokens trade places; either side may be
  empty, and empty-for-empty is a valid (no-op) swap.

After either transition the cell is marked modified, written to Persistent
Memory, redrawn, and the Win Evaluator runs against the new inventory. Clicks
on unknown coordinates, on cells out of range, or before the player has a
position are ignored and change nothing.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .cache import CellStore
from .interactivity import InteractivityEngine
from .logging_utils import log_player
from .persistence import InventoryMemory, PersistentMemory
from .render import NullRenderSink, RenderSink
from .schemas import GridCoord, InteractionKind, InteractionResult, Token
from .win import WinEvaluator


class Inventory:
    """Single optional token slot."""

    def __init__(self, token: Optional[Token] = None):
        self.token = token

    @property
    def is_empty(self) -> bool:
        return self.token is None

    @property
    def value(self) -> Optional[int]:
        return self.token.value if self.token is not None else None

    def clear(self) -> None:
        self.token = None

    def __repr__(self) -> str:
        return f"Inventory({self.value if self.token else 'empty'})"


def transition(
    held: Optional[Token], cell_token: Optional[Token]
) -> Tuple[InteractionKind, Optional[Token], Optional[Token]]:
    """Pure merge/swap rule.

    Returns:
        (kind, new_held, new_cell_token)
    """
    if held is not None and cell_token is not None and held.value == cell_token.value:
        return "merge", None, cell_token.doubled()
    return "swap", cell_token, held


class InteractionHandler:
    """Applies clicks to the Cell Store, inventory and Persistent Memory."""

    def __init__(
        self,
        store: CellStore,
        inventory: Inventory,
        memory: PersistentMemory,
        interactivity: InteractivityEngine,
        win: WinEvaluator,
        render: Optional[RenderSink] = None,
        inventory_memory: Optional[InventoryMemory] = None,
    ):
        self.store = store
        self.inventory = inventory
        self.memory = memory
        self.interactivity = interactivity
        self.win = win
        self.render: RenderSink = render or NullRenderSink()
        self.inventory_memory = inventory_memory

    def click(self, coord: GridCoord) -> InteractionResult:
        if self.interactivity.position is None:
            return self._ignored(coord, "player position not initialized")

        cell = self.store.get(coord)
        if cell is None:
            return self._ignored(coord, "no live cell at this coordinate")

        if not cell.is_interactive:
            return self._ignored(coord, "cell is out of range")

        held_before = self.inventory.token
        cell_before = cell.data.token
        kind, held_after, cell_after = transition(held_before, cell_before)

        cell.data.token = cell_after
        cell.data.modified = True
        self.inventory.token = held_after

        self.memory.upsert(cell.data)
        if self.inventory_memory is not None:
            self.inventory_memory.save(held_after)

        self.render.inventory_changed(held_after)
        self.render.cell_updated(cell)
        log_player(
            f"[{kind.title()}] {coord}: held {_fmt(held_before)} -> {_fmt(held_after)}, "
            f"cell {_fmt(cell_before)} -> {_fmt(cell_after)}"
        )

        won = self.win.evaluate(held_after)
        return InteractionResult(
            kind=kind,
            coord=coord,
            held_before=held_before,
            held_after=held_after,
            cell_before=cell_before,
            cell_after=cell_after,
            won=won,
        )

    def _ignored(self, coord: GridCoord, reason: str) -> InteractionResult:
        held = self.inventory.token
        cell = self.store.get(coord)
        cell_token = cell.data.token if cell is not None else None
        return InteractionResult(
            kind="ignored",
            coord=coord,
            reason=reason,
            held_before=held,
            held_after=held,
            cell_before=cell_token,
            cell_after=cell_token,
        )


def _fmt(token: Optional[Token]) -> str:
    return str(token.value) if token is not None else "empty"
