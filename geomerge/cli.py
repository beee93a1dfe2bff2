"""
Terminal front-end.

Plays the game in a terminal: the viewport follows the player, cells are drawn
with ``render_ascii_viewport`` and progress is saved to a JSON file between runs.

Run: python -m geomerge [--storage save.json] [--fresh]
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Callable, List, Optional

from .config import Config, GameSettings
from .logging_utils import Color, colored, log_error, log_info
from .persistence import JsonFileStore
from .render import token_label
from .schemas import GeoPoint, GridCoord
from .session import GameSession
from .tracking import Direction

HELP_TEXT = """Commands:
  n / s / e / w        move one tile north / south / east / west
  c X Y                click the cell at grid coordinate (X, Y)
  here                 click the cell under the player
  reset                start a new game (forgets all saved cells)
  help                 show this help
  q                    quit"""


@dataclass
class Command:
    name: str
    direction: Optional[Direction] = None
    coord: Optional[GridCoord] = None


def parse_command(line: str) -> Command:
    """Parse one line of player input.

    Raises:
        ValueError: If the line is not a recognised command
    """
    parts = line.strip().lower().split()
    if not parts:
        raise ValueError("Empty command")

    head, args = parts[0], parts[1:]
    if head in ("q", "quit", "exit"):
        return Command("quit")
    if head in ("h", "help", "?"):
        return Command("help")
    if head in ("reset", "new"):
        return Command("reset")
    if head == "here":
        return Command("here")
    if head in ("c", "click"):
        if len(args) != 2:
            raise ValueError("Usage: c X Y")
        try:
            return Command("click", coord=GridCoord(x=int(args[0]), y=int(args[1])))
        except ValueError:
            raise ValueError(f"Grid coordinates must be integers (got {args[0]!r}, {args[1]!r})") from None
    return Command("move", direction=Direction.parse(head))


def run_command(session: GameSession, command: Command, out: Callable[[str], None] = print) -> bool:
    """Apply a command to the session. Returns False when the player quits."""
    if command.name == "quit":
        return False
    if command.name == "help":
        out(HELP_TEXT)
    elif command.name == "reset":
        session.new_game()
    elif command.name == "move" and command.direction is not None:
        session.step(command.direction)
    elif command.name in ("click", "here"):
        coord = command.coord
        if coord is None:
            if session.position is None:
                log_error("Player position is not initialized yet")
                return True
            coord = session.mapper.point_to_grid_coord(session.position)
        result = session.click(coord)
        if not result.applied:
            out(colored(f"Nothing happens at {coord}: {result.reason}", Color.YELLOW))
    return True


def status_line(session: GameSession) -> str:
    snapshot = session.snapshot()
    held = token_label(snapshot.held)
    cell = snapshot.player_cell or "?"
    goal = session.settings.win_requirement
    suffix = "  ** WON **" if snapshot.won else ""
    return f"Player {cell}  Holding: {held}  Goal: {goal}  Saved cells: {snapshot.saved_cells}{suffix}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geomerge",
        description="Collect and merge tokens scattered over a geographic grid.",
    )
    parser.add_argument("--storage", default=str(Config.STORAGE_PATH), help="Save file path")
    parser.add_argument("--fresh", action="store_true", help="Start a new game, discarding the save")
    parser.add_argument("--lat", type=float, default=Config.START_LAT, help="Starting latitude")
    parser.add_argument("--lng", type=float, default=Config.START_LNG, help="Starting longitude")
    parser.add_argument(
        "--radius",
        type=int,
        default=None,
        help="Viewport radius in tiles (defaults to GEOMERGE_NEIGHBORHOOD_SIZE)",
    )
    return parser


def main(argv: Optional[List[str]] = None, input_fn: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = GameSettings.from_config()
    except ValueError as exc:
        log_error(f"Invalid configuration: {exc}")
        return 2
    if args.radius is not None:
        settings = settings.model_copy(update={"neighborhood_size": max(args.radius, 0)})

    session = GameSession(settings=settings, store=JsonFileStore(args.storage))
    if args.fresh:
        session.new_game()
    session.move_player(GeoPoint(lat=args.lat, lng=args.lng))

    log_info(Config.display())
    print(HELP_TEXT)
    while True:
        print()
        print(session.render_ascii())
        print(status_line(session))
        try:
            line = input_fn("> ")
        except EOFError:
            break
        if not line.strip():
            continue
        try:
            command = parse_command(line)
        except ValueError as exc:
            log_error(str(exc))
            continue
        if not run_command(session, command):
            break
    return 0
