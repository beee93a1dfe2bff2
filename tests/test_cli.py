"""Tests for the terminal front-end."""

import json

import pytest

from geomerge.cli import Command, main, parse_command, run_command, status_line
from geomerge.schemas import GridCoord, Token
from geomerge.tracking import Direction

NEAR = GridCoord(x=1, y=0)


def scripted_input(lines):
    pending = list(lines)

    def _input(prompt: str) -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return _input


def test_parse_command_variants():
    assert parse_command("n").direction is Direction.NORTH
    assert parse_command("East").direction is Direction.EAST
    assert parse_command("c 3 -4") == Command("click", coord=GridCoord(x=3, y=-4))
    assert parse_command("here").name == "here"
    assert parse_command("reset").name == "reset"
    assert parse_command("q").name == "quit"
    assert parse_command("?").name == "help"


@pytest.mark.parametrize("line", ["", "c 1", "c a b", "jump"])
def test_parse_command_rejects_bad_input(line):
    with pytest.raises(ValueError):
        parse_command(line)


def test_run_command_applies_to_session(make_session):
    session = make_session({NEAR: 2})
    output = []

    assert run_command(session, parse_command("c 1 0"), output.append) is True
    assert session.held == Token(value=2)

    assert run_command(session, parse_command("c 5 5"), output.append) is True
    assert "Nothing happens" in output[-1]

    assert run_command(session, parse_command("e"), output.append) is True
    assert session.mapper.point_to_grid_coord(session.position) == NEAR
    assert run_command(session, parse_command("here"), output.append) is True
    assert session.held is None

    assert "Holding: -" in status_line(session)
    assert run_command(session, parse_command("q"), output.append) is False


def test_main_plays_and_saves(tmp_path, capsys):
    save = tmp_path / "save.json"
    code = main(
        ["--storage", str(save), "--fresh", "--lat", "0", "--lng", "0", "--radius", "2"],
        input_fn=scripted_input(["e", "bogus", "", "c 1 0", "reset", "q"]),
    )

    assert code == 0
    assert save.exists()
    saved = json.loads(save.read_text("utf-8"))
    assert json.loads(saved["geomerge.cells"]) == []
    out = capsys.readouterr().out
    assert "Unknown direction 'bogus'" in out
    assert "Holding:" in out


def test_main_stops_at_end_of_input(tmp_path):
    assert main(["--storage", str(tmp_path / "s.json"), "--lat", "0", "--lng", "0"], input_fn=scripted_input([])) == 0
