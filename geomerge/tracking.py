"""
Player position sources.

Two kinds of source feed the same "player moved" event:

- Discrete movement: one-tile steps in a compass direction (arrow buttons,
  terminal commands). Synchronous.
- Continuous tracking: a position sensor that reports fixes at its own cadence.
  The sensor is consumed by an asyncio task; each fix is handed to a callback
  between awaits, so it never interleaves with another event.

Exactly one continuous subscription may be active at a time.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import AsyncIterator, Callable, Iterable, Optional, Protocol

from .logging_utils import log_error, log_info
from .schemas import GeoPoint


# =============================
# Module-level Exceptions
# =============================


class GeomergeError(Exception):
    """Base class for errors raised by the geomerge engine."""


class TrackingAlreadyActive(GeomergeError):
    """Raised when continuous tracking is started while a subscription is active."""

    def __init__(self) -> None:
        super().__init__(
            "Continuous position tracking is already active.\n"
            "Stop the current subscription (stop_tracking) before starting another."
        )


class TrackingNotActive(GeomergeError):
    """Raised when stopping continuous tracking that was never started."""

    def __init__(self) -> None:
        super().__init__(
            "Continuous position tracking is not active; there is nothing to stop."
        )


class PositionUnsupported(GeomergeError):
    """Raised when no position sensor is available."""

    def __init__(self, reason: str = "no position sensor available") -> None:
        self.reason = reason
        super().__init__(
            f"Position tracking unsupported: {reason}\n"
            "Use discrete movement commands instead."
        )


# =============================
# Discrete movement
# =============================


class Direction(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> tuple[int, int]:
        """(dlat, dlng) in tiles."""
        return _DELTAS[self]

    @classmethod
    def parse(cls, text: str) -> "Direction":
        key = text.strip().lower()
        for direction in cls:
            if key in (direction.value, direction.value[0]):
                return direction
        raise ValueError(f"Unknown direction '{text}' (use north/south/east/west or n/s/e/w)")


_DELTAS = {
    Direction.NORTH: (1, 0),
    Direction.SOUTH: (-1, 0),
    Direction.EAST: (0, 1),
    Direction.WEST: (0, -1),
}


def step_position(point: GeoPoint, direction: Direction, tile_degrees: float) -> GeoPoint:
    dlat, dlng = direction.delta
    return point.offset(dlat * tile_degrees, dlng * tile_degrees)


# =============================
# Continuous tracking
# =============================


class PositionSensor(Protocol):
    """A live position source (GPS receiver, browser geolocation bridge, replay)."""

    available: bool

    def watch(self) -> AsyncIterator[GeoPoint]:
        ...


class ReplaySensor:
    """Replays a fixed sequence of fixes, optionally spaced by ``interval`` seconds."""

    def __init__(self, points: Iterable[GeoPoint], interval: float = 0.0, available: bool = True):
        self.points = list(points)
        self.interval = interval
        self.available = available

    async def watch(self) -> AsyncIterator[GeoPoint]:
        for point in self.points:
            if self.interval:
                await asyncio.sleep(self.interval)
            else:
                await asyncio.sleep(0)
            yield point


class PositionTracker:
    """Owns at most one continuous tracking subscription."""

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(
        self,
        sensor: Optional[PositionSensor],
        on_position: Callable[[GeoPoint], None],
    ) -> asyncio.Task[None]:
        """Subscribe ``on_position`` to ``sensor``. Must be called from a running loop.

        Raises:
            TrackingAlreadyActive: If a subscription is already running
            PositionUnsupported: If the sensor is missing or unavailable
        """
        if self.active:
            raise TrackingAlreadyActive()
        if sensor is None:
            raise PositionUnsupported()
        if not getattr(sensor, "available", True):
            raise PositionUnsupported("sensor reports it is unavailable")

        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._consume(sensor, on_position))
        log_info("[Tracking] Continuous position tracking started")
        return self._task

    def stop(self) -> None:
        """Cancel the active subscription.

        Raises:
            TrackingNotActive: If no subscription is running
        """
        if not self.active:
            self._task = None
            raise TrackingNotActive()
        assert self._task is not None
        self._task.cancel()
        self._task = None
        log_info("[Tracking] Continuous position tracking stopped")

    async def join(self) -> None:
        """Wait for the sensor to run out of fixes (or for cancellation)."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _consume(
        self, sensor: PositionSensor, on_position: Callable[[GeoPoint], None]
    ) -> None:
        fixes = sensor.watch().__aiter__()
        while True:
            try:
                point = await fixes.__anext__()
            except StopAsyncIteration:
                return
            except Exception as exc:
                # Sensor failure ends the subscription; the last known position stays
                log_error(f"[Tracking] Sorry, no position available: {exc}")
                return
            on_position(point)
