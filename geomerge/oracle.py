"""
Deterministic spawn determination.

Whether a cell holds a cache, and which token it starts with, is a pure
function of the cell's coordinate and the spawn oracle. Any observer using the
same oracle sees the same world, and a never-modified cell that leaves the
viewport can be regenerated later with identical contents. Only cells a player
has changed ever need durable storage.

The oracle itself is pluggable: any callable mapping a seed string to a float
in ``[0, 1)``. ``luck`` is the default.
"""

from __future__ import annotations

import hashlib
from typing import Callable, Optional

from pydantic import BaseModel, Field, model_validator

from .environment.mapper import CoordinateMapper
from .schemas import CellData, GridCoord, Token

SpawnOracle = Callable[[str], float]

# Suffix for the second oracle draw; reusing the existence seed would always land
# in the lowest tier because existence already requires a draw below the spawn
# probability.
VALUE_SEED_SUFFIX = ":value"


def luck(seed: str) -> float:
    """Default oracle: first 8 bytes of SHA-256(seed) scaled into [0, 1)."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") / float(2**64)


class SpawnPolicy(BaseModel):
    """Tunable spawn probability and token-value tiers.

    A value draw below ``tier_one`` gives a 1, below ``tier_two`` a 2, and
    anything else a 4.
    """

    spawn_probability: float = Field(0.1, ge=0.0, le=1.0)
    tier_one: float = Field(0.6, ge=0.0, le=1.0)
    tier_two: float = Field(0.9, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_tiers(self) -> "SpawnPolicy":
        if self.tier_one > self.tier_two:
            raise ValueError(
                f"tier_one ({self.tier_one}) must not exceed tier_two ({self.tier_two})"
            )
        return self

    def token_for(self, draw: float) -> Token:
        if draw < self.tier_one:
            return Token(value=1)
        if draw < self.tier_two:
            return Token(value=2)
        return Token(value=4)


class CellSpawner:
    """Runs spawn determination for grid coordinates."""

    def __init__(
        self,
        mapper: CoordinateMapper,
        policy: Optional[SpawnPolicy] = None,
        oracle: Optional[SpawnOracle] = None,
    ):
        self.mapper = mapper
        self.policy = policy or SpawnPolicy()
        self.oracle: SpawnOracle = oracle or luck

    def has_cache(self, coord: GridCoord) -> bool:
        return self.oracle(self.mapper.seed_for(coord)) < self.policy.spawn_probability

    def initial_token(self, coord: GridCoord) -> Token:
        # Draws on the seed plus VALUE_SEED_SUFFIX, not the bare existence seed
        draw = self.oracle(self.mapper.seed_for(coord) + VALUE_SEED_SUFFIX)
        return self.policy.token_for(draw)

    def spawn(self, coord: GridCoord) -> Optional[CellData]:
        """Fresh, unmodified CellData for ``coord``, or None if no cache spawns here."""
        if not self.has_cache(coord):
            return None
        return CellData(token=self.initial_token(coord), grid_coord=coord, modified=False)


def spawn_cell(
    coord: GridCoord,
    *,
    mapper: Optional[CoordinateMapper] = None,
    policy: Optional[SpawnPolicy] = None,
    oracle: Optional[SpawnOracle] = None,
) -> Optional[CellData]:
    """Functional shortcut for one-off spawn checks (defaults from Config)."""
    return CellSpawner(mapper or CoordinateMapper(), policy, oracle).spawn(coord)
