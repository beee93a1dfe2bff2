"""Tests for discrete movement and continuous position tracking."""

import asyncio

import pytest

from geomerge.schemas import GeoPoint, GridCoord
from geomerge.tracking import (
    Direction,
    PositionTracker,
    PositionUnsupported,
    ReplaySensor,
    TrackingAlreadyActive,
    TrackingNotActive,
    step_position,
)

from conftest import TILE

NEAR_EAST = GridCoord(x=3, y=0)


class FailingSensor:
    """Reports one fix, then the receiver drops out."""

    available = True

    def __init__(self, first: GeoPoint):
        self.first = first

    async def watch(self):
        yield self.first
        await asyncio.sleep(0)
        raise RuntimeError("receiver lost")


def test_direction_parsing_and_steps():
    assert Direction.parse("N") is Direction.NORTH
    assert Direction.parse(" west ") is Direction.WEST
    with pytest.raises(ValueError):
        Direction.parse("up")

    start = GeoPoint(lat=1.0, lng=1.0)
    assert step_position(start, Direction.NORTH, 0.5) == GeoPoint(lat=1.5, lng=1.0)
    assert step_position(start, Direction.WEST, 0.5) == GeoPoint(lat=1.0, lng=0.5)


def test_tracker_requires_a_sensor():
    tracker = PositionTracker()
    with pytest.raises(PositionUnsupported):
        tracker.start(None, lambda point: None)
    assert tracker.active is False


@pytest.mark.asyncio
async def test_tracking_feeds_player_moves(make_session):
    session = make_session({NEAR_EAST: 2}, start=None)
    fixes = [GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=0.0, lng=2 * TILE)]

    assert await session.start_tracking(ReplaySensor(fixes)) is True
    assert session.tracker.active is True
    await session.tracker.join()

    assert session.position == fixes[-1]
    assert session.cell(NEAR_EAST).is_interactive is True
    assert session.tracker.active is False
    assert [event for event in session.render.events if event[0] == "player"] == [
        ("player", fixes[0]),
        ("player", fixes[1]),
    ]


@pytest.mark.asyncio
async def test_second_subscription_is_rejected(make_session):
    session = make_session({}, start=None)
    sensor = ReplaySensor([GeoPoint(lat=0.0, lng=0.0)], interval=10)

    assert await session.start_tracking(sensor) is True
    with pytest.raises(TrackingAlreadyActive):
        await session.start_tracking(sensor)

    session.stop_tracking()
    await asyncio.sleep(0)
    assert session.tracker.active is False
    assert session.position is None


@pytest.mark.asyncio
async def test_stop_without_subscription_is_rejected(make_session):
    session = make_session({})
    with pytest.raises(TrackingNotActive):
        session.stop_tracking()

    assert await session.start_tracking(ReplaySensor([])) is True
    await session.tracker.join()
    # The sensor ran dry, so the subscription already ended
    with pytest.raises(TrackingNotActive):
        session.stop_tracking()


@pytest.mark.asyncio
async def test_unsupported_sensor_leaves_position_unset(make_session, capsys):
    session = make_session({}, start=None)

    assert await session.start_tracking(None) is False
    assert await session.start_tracking(ReplaySensor([GeoPoint(lat=1, lng=1)], available=False)) is False
    assert session.position is None
    assert session.tracker.active is False
    assert "unsupported" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_sensor_failure_keeps_last_position(make_session, capsys):
    session = make_session({}, start=None)
    fix = GeoPoint(lat=0.0, lng=TILE)

    await session.start_tracking(FailingSensor(fix))
    await session.tracker.join()

    assert session.position == fix
    assert session.tracker.active is False
    assert "receiver lost" in capsys.readouterr().out

    # A new subscription can start after the failure
    assert await session.start_tracking(ReplaySensor([GeoPoint(lat=0.0, lng=0.0)])) is True
    await session.tracker.join()
    assert session.position == GeoPoint(lat=0.0, lng=0.0)
