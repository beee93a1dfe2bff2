"""Proximity gating: which live cells the player can currently reach."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

from .cache import CellStore
from .environment.mapper import CoordinateMapper
from .logging_utils import log_deterministic
from .render import NullRenderSink, RenderSink
from .schemas import Cell, GeoPoint, GridCoord

EARTH_RADIUS_METERS = 6_371_008.8


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in metres."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def planar_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Straight-line distance in degrees, for ranges expressed in tiles."""
    return math.hypot(a.lat - b.lat, a.lng - b.lng)


class InteractivityEngine:
    """Recomputes ``Cell.is_interactive`` from the player's position.

    A cell is interactive iff the great-circle distance from the player to the
    cell center is within ``interactable_range`` metres. Evaluation is
    idempotent: the same position never toggles a cell twice.
    """

    def __init__(
        self,
        store: CellStore,
        mapper: CoordinateMapper,
        interactable_range: float,
        render: Optional[RenderSink] = None,
    ):
        self.store = store
        self.mapper = mapper
        self.interactable_range = interactable_range
        self.render: RenderSink = render or NullRenderSink()
        self.position: Optional[GeoPoint] = None

    def in_range(self, coord: GridCoord, position: Optional[GeoPoint] = None) -> bool:
        position = position or self.position
        if position is None:
            return False
        center = self.mapper.cell_center(coord)
        return haversine_distance(position, center) <= self.interactable_range

    def update(self, position: GeoPoint) -> List[GridCoord]:
        """Record the new player position and re-evaluate every live cell.

        Returns:
            Coordinates whose interactive state flipped
        """
        self.position = position
        changed = self._evaluate(self.store)
        if changed:
            log_deterministic(f"[Range] {len(changed)} cells changed interactivity")
        return changed

    def refresh(self, coords: Iterable[GridCoord]) -> List[GridCoord]:
        """Evaluate only the given live cells (e.g. ones a viewport change just created)."""
        cells = [cell for cell in (self.store.get(c) for c in coords) if cell is not None]
        return self._evaluate(cells)

    def clear(self) -> None:
        self.position = None

    def _evaluate(self, cells: Iterable[Cell]) -> List[GridCoord]:
        changed: List[GridCoord] = []
        for cell in cells:
            interactive = self.in_range(cell.coord)
            if interactive == cell.is_interactive:
                continue
            cell.is_interactive = interactive
            changed.append(cell.coord)
            self.render.cell_updated(cell)
        return changed
