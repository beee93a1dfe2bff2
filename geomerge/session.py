"""
Game session: the explicit engine object every operation goes through.

Fully decoupled from file I/O and global state. All collaborators (durable
store, spawn oracle, render sink, settings) are injected, so several sessions
can run side by side and tests get deterministic, isolated worlds.

Event flow:
1. Viewport change -> Cache Lifecycle Manager reconciles the Cell Store
   (cull / restore / spawn), then new cells get their interactive state
2. Player position change -> Interactivity Engine re-evaluates every live cell
   (and, when following the player, the viewport is re-centred first)
3. Cell click -> Inventory & Merge State Machine -> Persistent Memory -> Win
4. New game -> memory, inventory and win flag reset, live cells rebuilt

Each event runs to completion before the next one is handled.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .cache import CacheLifecycleManager, CellStore
from .config import GameSettings
from .environment import CoordinateMapper, ViewportTracker
from .interactivity import InteractivityEngine
from .inventory import InteractionHandler, Inventory
from .logging_utils import log_error, log_info, log_player
from .oracle import CellSpawner, SpawnOracle, SpawnPolicy
from .persistence import InMemoryStore, InventoryMemory, KeyValueStore, PersistentMemory
from .render import NullRenderSink, RenderSink, render_ascii_viewport
from .schemas import (
    Cell,
    GeoBounds,
    GeoPoint,
    GridCoord,
    InteractionResult,
    Token,
    Viewport,
    ViewportChange,
)
from .tracking import Direction, PositionSensor, PositionTracker, PositionUnsupported, step_position
from .win import WinEvaluator


class SessionSnapshot(BaseModel):
    """Serializable view of a session for debugging and front-ends."""

    player: Optional[GeoPoint] = None
    player_cell: Optional[GridCoord] = None
    viewport: Optional[Viewport] = None
    held: Optional[Token] = None
    won: bool = False
    live_cells: List[Cell] = Field(default_factory=list)
    saved_cells: int = 0
    tracking: bool = False


class GameSession:
    """One player's game: cell cache, inventory, memory and position tracking.

    Args:
        settings: Tunables (defaults from GameSettings)
        store: Durable key-value store (defaults to InMemoryStore)
        oracle: Spawn oracle ``seed -> [0, 1)`` (defaults to ``luck``)
        policy: Spawn tiers; ``spawn_probability`` defaults to the settings value
        render: Render sink notified of every change (defaults to NullRenderSink)
        follow_player: Re-centre the viewport on the player after each move,
            using ``settings.neighborhood_size`` as the radius
        start: Optional initial player position
    """

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        store: Optional[KeyValueStore] = None,
        oracle: Optional[SpawnOracle] = None,
        policy: Optional[SpawnPolicy] = None,
        render: Optional[RenderSink] = None,
        follow_player: bool = True,
        start: Optional[GeoPoint] = None,
    ):
        self.settings = settings or GameSettings()
        self.render: RenderSink = render or NullRenderSink()
        self.follow_player = follow_player

        self.durable_store = store or InMemoryStore()
        self.memory = PersistentMemory(self.durable_store, self.settings.storage_key)
        self.inventory_memory = InventoryMemory(self.durable_store, self.settings.inventory_key)
        self.memory.load()
        self.inventory = Inventory(self.inventory_memory.load())

        self.mapper = CoordinateMapper(self.settings.tile_degrees)
        self.viewport_tracker = ViewportTracker(self.mapper)
        if policy is None:
            policy = SpawnPolicy(spawn_probability=self.settings.cache_spawn_probability)
        self.spawner = CellSpawner(self.mapper, policy, oracle)

        self.cells = CellStore()
        self.lifecycle = CacheLifecycleManager(self.cells, self.memory, self.spawner, self.render)
        self.interactivity = InteractivityEngine(
            self.cells, self.mapper, self.settings.interactable_range, self.render
        )
        self.win = WinEvaluator(self.settings.win_requirement, self.render)
        self.interactions = InteractionHandler(
            self.cells,
            self.inventory,
            self.memory,
            self.interactivity,
            self.win,
            self.render,
            self.inventory_memory,
        )
        self.tracker = PositionTracker()

        self.render.inventory_changed(self.inventory.token)
        # A restored inventory may already satisfy the win condition
        self.win.evaluate(self.inventory.token)

        if start is not None:
            self.move_player(start)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def position(self) -> Optional[GeoPoint]:
        return self.interactivity.position

    @property
    def viewport(self) -> Optional[Viewport]:
        return self.viewport_tracker.current

    @property
    def held(self) -> Optional[Token]:
        return self.inventory.token

    @property
    def won(self) -> bool:
        return self.win.won

    def cell(self, coord: GridCoord) -> Optional[Cell]:
        return self.cells.get(coord)

    # ------------------------------------------------------------------
    # Viewport events
    # ------------------------------------------------------------------

    def set_viewport(self, bounds: GeoBounds) -> Optional[ViewportChange]:
        """Handle a map viewport change. Returns None if the grid rectangle is unchanged."""
        viewport = self.viewport_tracker.update(bounds)
        if viewport is None:
            return None
        return self._reconcile(viewport)

    def _reconcile(self, viewport: Viewport) -> ViewportChange:
        change = self.lifecycle.reconcile(viewport)
        self.interactivity.refresh(change.created)
        return change

    # ------------------------------------------------------------------
    # Player position events
    # ------------------------------------------------------------------

    def move_player(self, point: GeoPoint) -> Optional[ViewportChange]:
        """Handle a player position change from any source."""
        change = None
        if self.follow_player:
            viewport = self.viewport_tracker.center_on(point, self.settings.neighborhood_size)
            if viewport is not None:
                change = self.lifecycle.reconcile(viewport)

        self.interactivity.update(point)
        self.render.player_moved(point)
        return change

    def step(self, direction: Direction) -> Optional[ViewportChange]:
        """Move one tile. Ignored until the player has a position."""
        if self.position is None:
            log_error("Cannot move: player position is not initialized yet")
            return None
        log_player(f"[Move] {direction.value}")
        return self.move_player(step_position(self.position, direction, self.settings.tile_degrees))

    async def start_tracking(self, sensor: Optional[PositionSensor]) -> bool:
        """Feed a live sensor into ``move_player``.

        Returns:
            True if tracking started, False if positioning is unsupported (the
            player position is left as it is and discrete movement still works)

        Raises:
            TrackingAlreadyActive: If a subscription is already running
        """
        try:
            self.tracker.start(sensor, self.move_player)
        except PositionUnsupported as exc:
            log_error(str(exc))
            return False
        return True

    def stop_tracking(self) -> None:
        """Raises TrackingNotActive if tracking was not started."""
        self.tracker.stop()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def click(self, coord: GridCoord) -> InteractionResult:
        return self.interactions.click(coord)

    def new_game(self) -> Optional[ViewportChange]:
        """Forget every modification and rebuild the visible cells from the oracle."""
        self.memory.reset()
        self.inventory.clear()
        self.inventory_memory.reset()
        self.win.reset()
        self.lifecycle.flush()
        self.render.inventory_changed(None)
        log_info("New game started")

        viewport = self.viewport
        if viewport is None:
            return None
        return self._reconcile(viewport)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        position = self.position
        return SessionSnapshot(
            player=position,
            player_cell=self.mapper.point_to_grid_coord(position) if position else None,
            viewport=self.viewport,
            held=self.held,
            won=self.won,
            live_cells=[cell.model_copy(deep=True) for cell in self.cells],
            saved_cells=len(self.memory),
            tracking=self.tracker.active,
        )

    def render_ascii(self) -> str:
        viewport = self.viewport
        if viewport is None:
            return "(no viewport)"
        position = self.position
        player = self.mapper.point_to_grid_coord(position) if position else None
        return render_ascii_viewport(viewport, self.cells, player=player)
