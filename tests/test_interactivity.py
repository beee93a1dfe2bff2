"""Tests for proximity gating."""

from geomerge.cache import CellStore
from geomerge.environment import CoordinateMapper
from geomerge.interactivity import InteractivityEngine, haversine_distance, planar_distance
from geomerge.render import RecordingRenderSink
from geomerge.schemas import CellData, GeoPoint, GridCoord, Token

from conftest import TILE


def make_engine(coords, interactable_range=40.0):
    store = CellStore()
    for coord in coords:
        store.add(CellData(token=Token(value=1), grid_coord=coord))
    render = RecordingRenderSink()
    engine = InteractivityEngine(store, CoordinateMapper(TILE), interactable_range, render)
    return engine, store, render


def test_haversine_distance_known_values():
    one_degree = haversine_distance(GeoPoint(lat=0, lng=0), GeoPoint(lat=1, lng=0))
    assert 111_100 < one_degree < 111_300
    assert haversine_distance(GeoPoint(lat=36.99, lng=-122.05), GeoPoint(lat=36.99, lng=-122.05)) == 0
    assert planar_distance(GeoPoint(lat=0, lng=0), GeoPoint(lat=3, lng=4)) == 5


def test_update_marks_cells_within_range():
    near, far = GridCoord(x=1, y=0), GridCoord(x=5, y=0)
    engine, store, render = make_engine([near, far])

    changed = engine.update(GeoPoint(lat=0.0, lng=0.0))

    assert changed == [near]
    assert store.get(near).is_interactive is True
    assert store.get(far).is_interactive is False
    assert render.interactive == {near: True}


def test_update_is_idempotent():
    near = GridCoord(x=1, y=0)
    engine, store, render = make_engine([near])
    position = GeoPoint(lat=0.0, lng=0.0)

    engine.update(position)
    events = len(render.events)

    assert engine.update(position) == []
    assert store.get(near).is_interactive is True
    assert len(render.events) == events


def test_moving_away_turns_cells_off():
    near = GridCoord(x=1, y=0)
    engine, store, _ = make_engine([near])
    engine.update(GeoPoint(lat=0.0, lng=0.0))

    assert engine.update(GeoPoint(lat=0.0, lng=10 * TILE)) == [near]
    assert store.get(near).is_interactive is False


def test_refresh_only_touches_given_cells():
    a, b = GridCoord(x=0, y=0), GridCoord(x=1, y=0)
    engine, store, _ = make_engine([a])
    engine.update(GeoPoint(lat=0.0, lng=0.0))

    store.add(CellData(token=Token(value=2), grid_coord=b))
    assert engine.refresh([b, GridCoord(x=99, y=99)]) == [b]
    assert store.get(b).is_interactive is True


def test_nothing_is_interactive_without_a_position():
    engine, store, _ = make_engine([GridCoord(x=0, y=0)])
    assert engine.in_range(GridCoord(x=0, y=0)) is False
    assert engine.refresh([GridCoord(x=0, y=0)]) == []
