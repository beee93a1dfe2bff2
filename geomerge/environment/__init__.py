"""Geographic grid helpers: coordinate mapping and viewport tracking."""

from .mapper import CoordinateMapper, to_geo_bounds, to_grid_coord
from .viewport import ViewportTracker, viewport_around, viewport_from_bounds

__all__ = [
    "CoordinateMapper",
    "to_geo_bounds",
    "to_grid_coord",
    "ViewportTracker",
    "viewport_around",
    "viewport_from_bounds",
]
