"""
Cell Store and Cache Lifecycle Manager.

Every grid coordinate moves through the same lifecycle:

    Absent -> Live -> Culled                 (unmodified: regenerated on return)
    Absent -> Live -> Persisted-and-culled   (modified: restored from memory)

The Cell Store is the authoritative live working set. On every viewport change
the lifecycle manager reconciles it against the new rectangle:

1. Cull live cells outside the viewport. Modified cells were already written to
   Persistent Memory when they changed, so nothing is saved here.
2. For each coordinate inside the viewport that is not live, restore it from
   Persistent Memory if a record exists, otherwise ask the spawner. A "no cache"
   answer leaves the coordinate Absent, which is different from a live cell
   whose token has been taken.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from .logging_utils import log_deterministic
from .oracle import CellSpawner
from .persistence import PersistentMemory
from .render import NullRenderSink, RenderSink
from .schemas import Cell, CellData, GridCoord, Viewport, ViewportChange


class CellStore:
    """In-memory mapping from GridCoord to live Cell."""

    def __init__(self) -> None:
        self._cells: Dict[GridCoord, Cell] = {}

    def get(self, coord: GridCoord) -> Optional[Cell]:
        return self._cells.get(coord)

    def add(self, data: CellData) -> Cell:
        """Make ``data`` live. Replacing an existing live cell is a programming error."""
        coord = data.grid_coord
        if coord in self._cells:
            raise KeyError(f"Cell {coord} is already live")
        cell = Cell(data=data)
        self._cells[coord] = cell
        return cell

    def remove(self, coord: GridCoord) -> Optional[Cell]:
        return self._cells.pop(coord, None)

    def coords(self) -> List[GridCoord]:
        return list(self._cells)

    def clear(self) -> None:
        self._cells.clear()

    def __contains__(self, coord: object) -> bool:
        return coord in self._cells

    def __iter__(self) -> Iterator[Cell]:
        return iter(list(self._cells.values()))

    def __len__(self) -> int:
        return len(self._cells)


class CacheLifecycleManager:
    """Spawns, restores and culls live cells as the viewport moves."""

    def __init__(
        self,
        store: CellStore,
        memory: PersistentMemory,
        spawner: CellSpawner,
        render: Optional[RenderSink] = None,
    ):
        self.store = store
        self.memory = memory
        self.spawner = spawner
        self.render: RenderSink = render or NullRenderSink()

    def reconcile(self, viewport: Viewport) -> ViewportChange:
        """Bring the Cell Store in line with ``viewport``."""
        change = ViewportChange(viewport=viewport)

        for coord in self.store.coords():
            if not viewport.contains(coord):
                self._cull(coord)
                change.culled.append(coord)

        for coord in viewport.coords():
            if coord in self.store:
                continue

            # Persistent Memory first: a modified cell must never be regenerated
            saved = self.memory.get(coord)
            if saved is not None:
                self.render.cell_spawned(self.store.add(saved))
                change.restored.append(coord)
                continue

            data = self.spawner.spawn(coord)
            if data is None:
                continue
            self.render.cell_spawned(self.store.add(data))
            change.spawned.append(coord)

        log_deterministic(
            f"[Cache] Viewport x[{viewport.west}..{viewport.east}] "
            f"y[{viewport.south}..{viewport.north}]: "
            f"culled={len(change.culled)} restored={len(change.restored)} "
            f"spawned={len(change.spawned)} live={len(self.store)}"
        )
        return change

    def flush(self) -> List[GridCoord]:
        """Cull every live cell."""
        culled = self.store.coords()
        for coord in culled:
            self._cull(coord)
        return culled

    def _cull(self, coord: GridCoord) -> None:
        self.store.remove(coord)
        self.render.cell_culled(coord)
