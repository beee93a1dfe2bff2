"""
Pydantic schemas for the geomerge engine.

All data structures shared between the engine components are defined here.

Design Philosophy:
- GridCoord is the identity of a cell everywhere (Cell Store, Persistent Memory,
  render sinks); it is frozen so it can be used as a dict key
- CellData is the persistable essence of a cell; Cell wraps it with live-only state
- Field aliases match the durable storage format (camelCase ``gridCoord``)
- Pydantic validation keeps corrupt save files from leaking into the engine
"""

from __future__ import annotations

from typing import Iterator, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Grid & Geography
# ============================================================================


class GridCoord(BaseModel):
    """Integer identity of a grid cell.

    ``x`` counts tiles east-west (longitude), ``y`` counts tiles north-south
    (latitude). Frozen so instances hash and compare by value.
    """

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., description="Tile index along longitude")
    y: int = Field(..., description="Tile index along latitude")

    def key(self) -> str:
        """Stable string key used to index durable storage."""
        return f"{self.x},{self.y}"

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class GeoPoint(BaseModel):
    """A continuous geographic position in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float

    def offset(self, dlat: float = 0.0, dlng: float = 0.0) -> GeoPoint:
        return GeoPoint(lat=self.lat + dlat, lng=self.lng + dlng)


class GeoBounds(BaseModel):
    """Rectangular geographic bounds (south-west to north-east corner)."""

    model_config = ConfigDict(frozen=True)

    south: float
    west: float
    north: float
    east: float

    @property
    def southwest(self) -> GeoPoint:
        return GeoPoint(lat=self.south, lng=self.west)

    @property
    def northeast(self) -> GeoPoint:
        return GeoPoint(lat=self.north, lng=self.east)

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(lat=(self.south + self.north) / 2, lng=(self.west + self.east) / 2)

    def contains(self, point: GeoPoint) -> bool:
        return self.south <= point.lat <= self.north and self.west <= point.lng <= self.east


class Viewport(BaseModel):
    """Inclusive rectangle of grid coordinates that must have live cells.

    ``north``/``south`` bound ``GridCoord.y`` and ``east``/``west`` bound
    ``GridCoord.x``.
    """

    model_config = ConfigDict(frozen=True)

    north: int
    south: int
    east: int
    west: int

    def contains(self, coord: GridCoord) -> bool:
        return self.south <= coord.y <= self.north and self.west <= coord.x <= self.east

    def coords(self) -> Iterator[GridCoord]:
        """Yield every coordinate in the rectangle, south to north, west to east."""
        for y in range(self.south, self.north + 1):
            for x in range(self.west, self.east + 1):
                yield GridCoord(x=x, y=y)

    @property
    def size(self) -> int:
        if self.north < self.south or self.east < self.west:
            return 0
        return (self.north - self.south + 1) * (self.east - self.west + 1)


# ============================================================================
# Cells & Tokens
# ============================================================================


class Token(BaseModel):
    """A collectible power-of-two valued token.

    Only the spawn tiers (1, 2, 4) and merging (doubling) create tokens, so the
    value is always a power of two without extra validation here.
    """

    model_config = ConfigDict(frozen=True)

    value: int = Field(..., gt=0, description="Token value (power of two)")

    def doubled(self) -> Token:
        return Token(value=self.value * 2)


class CellData(BaseModel):
    """Persistable essence of a cell: its contents and whether a player changed them.

    Serialized with ``by_alias=True`` the record matches the durable format
    ``{"token": {"value": n} | null, "gridCoord": {"x": n, "y": n}, "modified": bool}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: Optional[Token] = Field(None, description="Token held by the cell, if any")
    grid_coord: GridCoord = Field(..., alias="gridCoord")
    # Flipped on the first interaction; only modified cells are ever persisted.
    # Unmodified cells are regenerated from the spawn oracle on demand.
    modified: bool = Field(False, description="Diverged from the generated state")


class Cell(BaseModel):
    """A live cell in the Cell Store.

    Rendering handles are not stored here; render sinks keep their own
    GridCoord -> handle index.
    """

    data: CellData
    is_interactive: bool = False

    @property
    def coord(self) -> GridCoord:
        return self.data.grid_coord


# ============================================================================
# Event outcomes
# ============================================================================

InteractionKind = Literal["merge", "swap", "ignored"]


class InteractionResult(BaseModel):
    """Outcome of a single cell click."""

    kind: InteractionKind
    coord: GridCoord
    # Why the click was ignored (unknown cell, out of range, no position yet)
    reason: Optional[str] = None
    held_before: Optional[Token] = None
    held_after: Optional[Token] = None
    cell_before: Optional[Token] = None
    cell_after: Optional[Token] = None
    won: bool = Field(False, description="True only for the click that first reached the win threshold")

    @property
    def applied(self) -> bool:
        return self.kind != "ignored"


class ViewportChange(BaseModel):
    """Outcome of reconciling the Cell Store against a viewport."""

    viewport: Viewport
    culled: List[GridCoord] = Field(default_factory=list)
    restored: List[GridCoord] = Field(default_factory=list)
    spawned: List[GridCoord] = Field(default_factory=list)

    @property
    def created(self) -> List[GridCoord]:
        return [*self.restored, *self.spawned]
