"""Viewport tracking: which grid rectangle must currently hold live cells."""

from __future__ import annotations

from typing import Optional

from ..schemas import GeoBounds, GeoPoint, Viewport
from .mapper import CoordinateMapper


def viewport_from_bounds(bounds: GeoBounds, mapper: CoordinateMapper) -> Viewport:
    """Grid rectangle covering the visible geographic bounds."""
    south_west = mapper.to_grid_coord(bounds.south, bounds.west)
    north_east = mapper.to_grid_coord(bounds.north, bounds.east)
    return Viewport(
        north=max(south_west.y, north_east.y),
        south=min(south_west.y, north_east.y),
        east=max(south_west.x, north_east.x),
        west=min(south_west.x, north_east.x),
    )


def viewport_around(point: GeoPoint, radius: int, mapper: CoordinateMapper) -> Viewport:
    """Square neighborhood of ``radius`` tiles on each side of ``point``'s cell."""
    radius = max(int(radius), 0)
    center = mapper.point_to_grid_coord(point)
    return Viewport(
        north=center.y + radius,
        south=center.y - radius,
        east=center.x + radius,
        west=center.x - radius,
    )


class ViewportTracker:
    """Remembers the last viewport so unchanged map moves skip reconciliation."""

    def __init__(self, mapper: CoordinateMapper):
        self.mapper = mapper
        self.current: Optional[Viewport] = None

    def update(self, bounds: GeoBounds) -> Optional[Viewport]:
        """Return the new viewport, or None if the grid rectangle did not change."""
        return self._accept(viewport_from_bounds(bounds, self.mapper))

    def center_on(self, point: GeoPoint, radius: int) -> Optional[Viewport]:
        return self._accept(viewport_around(point, radius, self.mapper))

    def reset(self) -> None:
        self.current = None

    def _accept(self, viewport: Viewport) -> Optional[Viewport]:
        if viewport == self.current:
            return None
        self.current = viewport
        return viewport
