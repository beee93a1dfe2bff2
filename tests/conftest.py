"""Shared fixtures: sessions over a hand-placed set of caches.

Tests run near (0, 0) with 1e-4 degree tiles (about 11.1 m). The scripted
oracle places caches only where a test asks for them; every other coordinate
is empty.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import pytest

from geomerge.config import GameSettings
from geomerge.environment import CoordinateMapper
from geomerge.oracle import VALUE_SEED_SUFFIX
from geomerge.persistence import InMemoryStore, KeyValueStore
from geomerge.render import RecordingRenderSink
from geomerge.schemas import GeoPoint, GridCoord
from geomerge.session import GameSession

TILE = 1e-4

# Value draws for each spawn tier under the default SpawnPolicy
TIER_DRAWS = {1: 0.1, 2: 0.7, 4: 0.95}

ORIGIN = GeoPoint(lat=0.0, lng=0.0)


class FailingStore(InMemoryStore):
    """Store whose writes fail while ``failing`` is set, like a full disk."""

    failing = True

    def set_item(self, key: str, value: str) -> None:
        if self.failing:
            raise OSError("disk full")
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        if self.failing:
            raise OSError("disk full")
        super().remove_item(key)


def scripted_oracle(caches: Dict[GridCoord, int], tile: float = TILE) -> Callable[[str], float]:
    """Oracle that spawns exactly ``caches`` (coord -> initial token value)."""
    mapper = CoordinateMapper(tile)
    table: Dict[str, float] = {}
    for coord, value in caches.items():
        seed = mapper.seed_for(coord)
        table[seed] = 0.0
        table[seed + VALUE_SEED_SUFFIX] = TIER_DRAWS[value]
    return lambda seed: table.get(seed, 0.99)


@pytest.fixture(autouse=True)
def quiet_output(monkeypatch):
    monkeypatch.setenv("GEOMERGE_NO_COLOR", "1")
    monkeypatch.delenv("GEOMERGE_VERBOSE", raising=False)


@pytest.fixture
def settings() -> GameSettings:
    return GameSettings(
        tile_degrees=TILE,
        neighborhood_size=6,
        interactable_range=40.0,
        win_requirement=32,
    )


@pytest.fixture
def make_session(settings):
    """Factory: ``make_session({coord: value}, start=ORIGIN, store=None)``."""

    def _make(
        caches: Optional[Dict[GridCoord, int]] = None,
        *,
        start: Optional[GeoPoint] = ORIGIN,
        store: Optional[KeyValueStore] = None,
        follow_player: bool = True,
    ) -> GameSession:
        return GameSession(
            settings=settings,
            store=store if store is not None else InMemoryStore(),
            oracle=scripted_oracle(caches or {}),
            render=RecordingRenderSink(),
            follow_player=follow_player,
            start=start,
        )

    return _make
