"""Render sink boundary.

The engine never owns rendering resources. It reports what changed through a
RenderSink, and the sink keeps whatever handles it needs (map markers, widgets)
in its own GridCoord-keyed index.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from .schemas import Cell, GeoPoint, GridCoord, Token, Viewport


class RenderSink(Protocol):
    """Callbacks the engine invokes after each state change."""

    def cell_spawned(self, cell: Cell) -> None:
        ...

    def cell_updated(self, cell: Cell) -> None:
        ...

    def cell_culled(self, coord: GridCoord) -> None:
        ...

    def inventory_changed(self, token: Optional[Token]) -> None:
        ...

    def player_moved(self, point: GeoPoint) -> None:
        ...

    def game_won(self, token: Token) -> None:
        ...


class NullRenderSink:
    """Sink that ignores every callback (headless sessions)."""

    def cell_spawned(self, cell: Cell) -> None:
        pass

    def cell_updated(self, cell: Cell) -> None:
        pass

    def cell_culled(self, coord: GridCoord) -> None:
        pass

    def inventory_changed(self, token: Optional[Token]) -> None:
        pass

    def player_moved(self, point: GeoPoint) -> None:
        pass

    def game_won(self, token: Token) -> None:
        pass


class RecordingRenderSink:
    """Keeps an event log and a GridCoord -> label index, like a real map layer would."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, object]] = []
        self.labels: Dict[GridCoord, str] = {}
        self.interactive: Dict[GridCoord, bool] = {}
        self.inventory: Optional[Token] = None
        self.player: Optional[GeoPoint] = None
        self.wins = 0

    def cell_spawned(self, cell: Cell) -> None:
        self.events.append(("spawned", cell.coord))
        self._draw(cell)

    def cell_updated(self, cell: Cell) -> None:
        self.events.append(("updated", cell.coord))
        self._draw(cell)

    def cell_culled(self, coord: GridCoord) -> None:
        self.events.append(("culled", coord))
        self.labels.pop(coord, None)
        self.interactive.pop(coord, None)

    def inventory_changed(self, token: Optional[Token]) -> None:
        self.events.append(("inventory", token))
        self.inventory = token

    def player_moved(self, point: GeoPoint) -> None:
        self.events.append(("player", point))
        self.player = point

    def game_won(self, token: Token) -> None:
        self.events.append(("won", token))
        self.wins += 1

    def count(self, kind: str) -> int:
        return sum(1 for event, _ in self.events if event == kind)

    def _draw(self, cell: Cell) -> None:
        self.labels[cell.coord] = token_label(cell.data.token)
        self.interactive[cell.coord] = cell.is_interactive


def token_label(token: Optional[Token]) -> str:
    return str(token.value) if token is not None else "-"


def render_ascii_viewport(
    viewport: Viewport,
    cells: Iterable[Cell],
    *,
    player: Optional[GridCoord] = None,
) -> str:
    """Render the viewport as text, north row first.

    Live cells show their token value (``-`` when empty), wrapped in brackets
    when interactive. The player's cell is ``@`` unless a cell is there too.
    Absent coordinates are ``.``.
    """

    by_coord = {cell.coord: cell for cell in cells}
    lines: List[str] = []
    for y in range(viewport.north, viewport.south - 1, -1):
        row: List[str] = []
        for x in range(viewport.west, viewport.east + 1):
            coord = GridCoord(x=x, y=y)
            cell = by_coord.get(coord)
            if cell is not None:
                label = token_label(cell.data.token)
                if coord == player:
                    label = f"@{label}"
                row.append(f"[{label}]" if cell.is_interactive else f" {label} ")
            elif coord == player:
                row.append(" @ ")
            else:
                row.append(" . ")
        lines.append("".join(f"{item:>5}" for item in row))
    return "\n".join(lines)
