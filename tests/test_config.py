"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from geomerge.config import Config, GameSettings


def test_defaults_validate():
    Config.validate()
    text = Config.display()
    assert "Geomerge Configuration" in text
    assert "Win requirement" in text


@pytest.mark.parametrize(
    "attribute, value",
    [
        ("TILE_DEGREES", 0.0),
        ("NEIGHBORHOOD_SIZE", -1),
        ("CACHE_SPAWN_PROBABILITY", 1.5),
        ("INTERACTABLE_RANGE", -5.0),
        ("WIN_REQUIREMENT", 0),
    ],
)
def test_validate_rejects_out_of_range_values(monkeypatch, attribute, value):
    monkeypatch.setattr(Config, attribute, value)
    with pytest.raises(ValueError):
        Config.validate()


def test_settings_from_config(monkeypatch):
    monkeypatch.setattr(Config, "WIN_REQUIREMENT", 64)
    monkeypatch.setattr(Config, "TILE_DEGREES", 2e-4)

    settings = GameSettings.from_config()
    assert settings.win_requirement == 64
    assert settings.tile_degrees == 2e-4


def test_settings_validation():
    with pytest.raises(ValidationError):
        GameSettings(tile_degrees=-1)
    with pytest.raises(ValidationError):
        GameSettings(cache_spawn_probability=2)
    with pytest.raises(ValidationError):
        GameSettings(storage_key="same", inventory_key="same")
