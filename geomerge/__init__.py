"""
Geomerge - deterministic grid-cache engine for a location-based merge game.

Cells on a geographic grid spawn power-of-two tokens from a deterministic
oracle. The player collects, swaps and merges them (equal values double) until
the held token reaches the win requirement.

No GUI, no map library, no global state.
All collaborators (durable store, oracle, render sink) are injected by the user.
"""

__version__ = "0.1.0"

# Main engine object
from .session import GameSession, SessionSnapshot

# Configuration
from .config import Config, GameSettings

# Components
from .cache import CacheLifecycleManager, CellStore
from .environment import (
    CoordinateMapper,
    ViewportTracker,
    to_geo_bounds,
    to_grid_coord,
    viewport_around,
    viewport_from_bounds,
)
from .interactivity import InteractivityEngine, haversine_distance, planar_distance
from .inventory import InteractionHandler, Inventory, transition
from .oracle import CellSpawner, SpawnPolicy, luck, spawn_cell
from .persistence import (
    InMemoryStore,
    InventoryMemory,
    JsonFileStore,
    KeyValueStore,
    PersistentMemory,
)
from .render import NullRenderSink, RecordingRenderSink, RenderSink, render_ascii_viewport
from .tracking import (
    Direction,
    GeomergeError,
    PositionSensor,
    PositionTracker,
    PositionUnsupported,
    ReplaySensor,
    TrackingAlreadyActive,
    TrackingNotActive,
)
from .win import WinEvaluator

# Core schemas
from .schemas import (
    Cell,
    CellData,
    GeoBounds,
    GeoPoint,
    GridCoord,
    InteractionResult,
    Token,
    Viewport,
    ViewportChange,
)

__all__ = [
    # Main class
    "GameSession",
    "SessionSnapshot",
    # Configuration
    "Config",
    "GameSettings",
    # Components
    "CacheLifecycleManager",
    "CellStore",
    "CoordinateMapper",
    "ViewportTracker",
    "to_geo_bounds",
    "to_grid_coord",
    "viewport_around",
    "viewport_from_bounds",
    "InteractivityEngine",
    "haversine_distance",
    "planar_distance",
    "InteractionHandler",
    "Inventory",
    "transition",
    "CellSpawner",
    "SpawnPolicy",
    "luck",
    "spawn_cell",
    "WinEvaluator",
    # Persistence
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "PersistentMemory",
    "InventoryMemory",
    # Rendering boundary
    "RenderSink",
    "NullRenderSink",
    "RecordingRenderSink",
    "render_ascii_viewport",
    # Position tracking
    "Direction",
    "PositionSensor",
    "PositionTracker",
    "ReplaySensor",
    # Errors
    "GeomergeError",
    "TrackingAlreadyActive",
    "TrackingNotActive",
    "PositionUnsupported",
    # Schemas
    "Cell",
    "CellData",
    "GeoBounds",
    "GeoPoint",
    "GridCoord",
    "InteractionResult",
    "Token",
    "Viewport",
    "ViewportChange",
]
