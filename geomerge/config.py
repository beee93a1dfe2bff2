"""
Geomerge Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Grid geometry
    TILE_DEGREES: float = float(os.getenv("GEOMERGE_TILE_DEGREES", "1e-4"))
    NEIGHBORHOOD_SIZE: int = int(os.getenv("GEOMERGE_NEIGHBORHOOD_SIZE", "8"))

    # Spawning
    CACHE_SPAWN_PROBABILITY: float = float(
        os.getenv("GEOMERGE_CACHE_SPAWN_PROBABILITY", "0.1")
    )

    # Gameplay
    # Metres between the player and a cell center
    INTERACTABLE_RANGE: float = float(os.getenv("GEOMERGE_INTERACTABLE_RANGE", "40"))
    WIN_REQUIREMENT: int = int(os.getenv("GEOMERGE_WIN_REQUIREMENT", "32"))

    # Starting location (the classroom the game was designed around)
    START_LAT: float = float(os.getenv("GEOMERGE_START_LAT", "36.997936938057016"))
    START_LNG: float = float(os.getenv("GEOMERGE_START_LNG", "-122.05703507501151"))

    # Durable storage
    STORAGE_PATH: Path = Path(os.getenv("GEOMERGE_STORAGE_PATH", "geomerge_save.json"))
    STORAGE_KEY: str = os.getenv("GEOMERGE_STORAGE_KEY", "geomerge.cells")
    INVENTORY_KEY: str = os.getenv("GEOMERGE_INVENTORY_KEY", "geomerge.inventory")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are out of range."""
        if cls.TILE_DEGREES <= 0:
            raise ValueError("GEOMERGE_TILE_DEGREES must be positive")

        if cls.NEIGHBORHOOD_SIZE < 0:
            raise ValueError("GEOMERGE_NEIGHBORHOOD_SIZE cannot be negative")

        if not 0.0 <= cls.CACHE_SPAWN_PROBABILITY <= 1.0:
            raise ValueError(
                "GEOMERGE_CACHE_SPAWN_PROBABILITY must be between 0 and 1 "
                f"(got {cls.CACHE_SPAWN_PROBABILITY})"
            )

        if cls.INTERACTABLE_RANGE < 0:
            raise ValueError("GEOMERGE_INTERACTABLE_RANGE cannot be negative")

        if cls.WIN_REQUIREMENT < 1:
            raise ValueError("GEOMERGE_WIN_REQUIREMENT must be at least 1")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Geomerge Configuration:",
            f"  Tile size: {cls.TILE_DEGREES} deg",
            f"  Neighborhood: {cls.NEIGHBORHOOD_SIZE} tiles",
            f"  Spawn probability: {cls.CACHE_SPAWN_PROBABILITY}",
            f"  Interactable range: {cls.INTERACTABLE_RANGE} m",
            f"  Win requirement: {cls.WIN_REQUIREMENT}",
            f"  Storage: {cls.STORAGE_PATH} [{cls.STORAGE_KEY}]",
        ]
        return "\n".join(lines)


class GameSettings(BaseModel):
    """Validated per-session copy of the tunables.

    Sessions take a GameSettings instead of reading Config directly so that tests
    and multiple concurrent sessions can run with different values.
    """

    tile_degrees: float = Field(1e-4, gt=0, description="Cell edge length in degrees")
    neighborhood_size: int = Field(8, ge=0, description="Viewport radius in tiles around the player")
    cache_spawn_probability: float = Field(0.1, ge=0.0, le=1.0)
    interactable_range: float = Field(40.0, ge=0.0, description="Interaction radius in metres")
    win_requirement: int = Field(32, ge=1)
    storage_key: str = "geomerge.cells"
    inventory_key: str = "geomerge.inventory"

    @model_validator(mode="after")
    def _check_keys(self) -> "GameSettings":
        if self.storage_key == self.inventory_key:
            raise ValueError("storage_key and inventory_key must differ")
        return self

    @classmethod
    def from_config(cls) -> "GameSettings":
        """Build settings from the environment-driven Config."""
        Config.validate()
        return cls(
            tile_degrees=Config.TILE_DEGREES,
            neighborhood_size=Config.NEIGHBORHOOD_SIZE,
            cache_spawn_probability=Config.CACHE_SPAWN_PROBABILITY,
            interactable_range=Config.INTERACTABLE_RANGE,
            win_requirement=Config.WIN_REQUIREMENT,
            storage_key=Config.STORAGE_KEY,
            inventory_key=Config.INVENTORY_KEY,
        )
