"""Conversion between continuous geographic coordinates and grid cells.

Cells are squares of ``tile_degrees`` on each side. Cell ``(x, y)`` covers the
latitudes ``[y * tile, (y + 1) * tile]`` and longitudes
``[x * tile, (x + 1) * tile]``, so its south-west corner maps back onto the
same coordinate.
"""

from __future__ import annotations

import math

from ..config import Config
from ..schemas import GeoBounds, GeoPoint, GridCoord


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; the grid needs plain nearest-integer.
    return math.floor(value + 0.5)


class CoordinateMapper:
    """Maps between lat/lng and GridCoord for a fixed tile size."""

    def __init__(self, tile_degrees: float | None = None):
        self.tile_degrees = tile_degrees if tile_degrees is not None else Config.TILE_DEGREES
        if self.tile_degrees <= 0:
            raise ValueError(f"tile_degrees must be positive (got {self.tile_degrees})")

    def to_grid_coord(self, lat: float, lng: float) -> GridCoord:
        return GridCoord(
            x=_round_half_up(lng / self.tile_degrees),
            y=_round_half_up(lat / self.tile_degrees),
        )

    def point_to_grid_coord(self, point: GeoPoint) -> GridCoord:
        return self.to_grid_coord(point.lat, point.lng)

    def to_geo_bounds(self, coord: GridCoord) -> GeoBounds:
        """Bounds of a cell: south-west corner at ``coord * tile``, one tile wide."""
        tile = self.tile_degrees
        return GeoBounds(
            south=coord.y * tile,
            west=coord.x * tile,
            north=(coord.y + 1) * tile,
            east=(coord.x + 1) * tile,
        )

    def cell_center(self, coord: GridCoord) -> GeoPoint:
        return self.to_geo_bounds(coord).center

    def seed_for(self, coord: GridCoord) -> str:
        """Oracle seed string derived from the cell's south-west corner."""
        corner = self.to_geo_bounds(coord).southwest
        return f"{corner.lat!r},{corner.lng!r}"


def to_grid_coord(lat: float, lng: float) -> GridCoord:
    """Map a position to its cell using the configured tile size."""
    return CoordinateMapper().to_grid_coord(lat, lng)


def to_geo_bounds(coord: GridCoord) -> GeoBounds:
    """Bounds of ``coord`` using the configured tile size."""
    return CoordinateMapper().to_geo_bounds(coord)
