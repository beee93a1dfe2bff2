"""
Durable storage for player-modified cells.

This module provides the abstract KeyValueStore interface (the durable store the
game saves into, with browser local-storage semantics: flat string keys, string
values) and the PersistentMemory codec that keeps modified cells in it.

Core principle: only cells a player has changed are stored. Unmodified cells are
regenerated from the spawn oracle, so an empty store is always a valid save.

Two included store implementations:
1. InMemoryStore - Dict-based storage, data lost on exit (testing, prototyping)
2. JsonFileStore - One JSON object on disk, survives restarts (terminal game)

Durable format (one string under ``storage_key``):
    [{"token": {"value": 4} | null, "gridCoord": {"x": 1, "y": 2}, "modified": true}, ...]

Usage pattern:
    memory = PersistentMemory(JsonFileStore("save.json"))
    memory.load()
    memory.upsert(cell_data)      # after every interaction
    memory.get(GridCoord(x=1, y=2))
    memory.reset()                # new game
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from .logging_utils import log_deterministic, log_error
from .schemas import CellData, GridCoord, Token

_CELL_LIST = TypeAdapter(List[CellData])


class KeyValueStore(ABC):
    """Abstract flat string key-value store.

    Implementations must treat a missing key as ``None`` rather than raising so
    a first launch looks exactly like an empty save.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under ``key``.

        Returns:
            Stored string, or None if the key was never written
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        Raises:
            OSError: If the backing medium cannot be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``. Safe to call for keys that were never written."""
        pass


class InMemoryStore(KeyValueStore):
    """In-memory store using a Python dict (no files).

    Data is lost when the process exits. Perfect for unit tests and for
    sessions that should not touch the filesystem.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStore(KeyValueStore):
    """File-based store: every key lives in one pretty-printed JSON object.

    The whole file is rewritten on each ``set_item``; saves are small (one entry
    per modified cell) so this stays cheap. An unreadable or malformed file is
    reported and treated as empty instead of stopping the game.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text("utf-8"))
        except (OSError, ValueError) as exc:
            # ValueError covers bad JSON and bytes that are not UTF-8
            log_error(f"Could not read save file {self.path}: {exc}; starting empty")
            return {}
        if not isinstance(payload, dict):
            log_error(f"Save file {self.path} is not a JSON object; starting empty")
            return {}
        return payload

    def _write(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, indent=2), "utf-8")


def encode_cells(cells: List[CellData]) -> str:
    """Serialize cells to the durable JSON format."""
    return _CELL_LIST.dump_json(cells, by_alias=True).decode("utf-8")


def decode_cells(payload: str) -> List[CellData]:
    """Parse the durable JSON format.

    Raises:
        ValidationError: If the payload is not valid JSON or does not match the format
    """
    return _CELL_LIST.validate_json(payload)


class PersistentMemory:
    """Durable mapping from GridCoord to modified CellData.

    Records are indexed by ``GridCoord.key()`` so lookup and upsert are O(1);
    the whole set is written back to the store after each change, mirroring
    the single-key save layout.

    Performance characteristics:
    - get: O(1) dict lookup
    - upsert/reset: O(1) update plus O(n) serialization of the saved set
    - Memory: O(modified cells), never O(visited cells)
    """

    def __init__(self, store: KeyValueStore, key: str = "geomerge.cells"):
        self.store = store
        self.key = key
        self._records: Dict[str, CellData] = {}

    def load(self) -> List[CellData]:
        """Read the saved set from the store.

        A missing payload yields an empty memory. A corrupt payload is logged and
        also yields an empty memory; the corrupt value is left in the store
        until the next write replaces it.
        """
        self._records = {}
        payload = self.store.get_item(self.key)
        if payload is None:
            return []

        try:
            cells = decode_cells(payload)
        except ValidationError as exc:
            log_error(
                f"Discarding unreadable cell memory under '{self.key}' "
                f"({exc.error_count()} validation errors)"
            )
            return []

        for cell in cells:
            # Later duplicates win; the index keeps one record per coordinate
            self._records[cell.grid_coord.key()] = cell
        log_deterministic(f"[Memory] Loaded {len(self._records)} modified cells")
        return self.cells()

    def cells(self) -> List[CellData]:
        return [cell.model_copy(deep=True) for cell in self._records.values()]

    def get(self, coord: GridCoord) -> Optional[CellData]:
        """Copy of the stored record for ``coord``, or None."""
        record = self._records.get(coord.key())
        return record.model_copy(deep=True) if record is not None else None

    def __contains__(self, coord: GridCoord) -> bool:
        return coord.key() in self._records

    def __len__(self) -> int:
        return len(self._records)

    def upsert(self, data: CellData) -> bool:
        """Insert or replace the record for ``data.grid_coord`` and save.

        Returns:
            False if the store rejected the write. The record is kept in memory
            and goes out with the next successful save.
        """
        self._records[data.grid_coord.key()] = data.model_copy(deep=True)
        return self._save()

    def reset(self) -> bool:
        """Forget every modified cell (new game)."""
        self._records = {}
        return self._save()

    def _save(self) -> bool:
        """Write the full set back; a failed write is logged and retried by the next save."""
        try:
            self.store.set_item(self.key, encode_cells(list(self._records.values())))
        except OSError as exc:
            log_error(f"Could not save cell memory under '{self.key}': {exc}")
            return False
        return True


class InventoryMemory:
    """Durable single-token slot so a restarted session keeps the held token."""

    _ADAPTER = TypeAdapter(Optional[Token])

    def __init__(self, store: KeyValueStore, key: str = "geomerge.inventory"):
        self.store = store
        self.key = key

    def load(self) -> Optional[Token]:
        payload = self.store.get_item(self.key)
        if payload is None:
            return None
        try:
            return self._ADAPTER.validate_json(payload)
        except ValidationError:
            log_error(f"Discarding unreadable inventory under '{self.key}'")
            return None

    def save(self, token: Optional[Token]) -> bool:
        try:
            self.store.set_item(self.key, self._ADAPTER.dump_json(token).decode("utf-8"))
        except OSError as exc:
            log_error(f"Could not save inventory under '{self.key}': {exc}")
            return False
        return True

    def reset(self) -> None:
        try:
            self.store.remove_item(self.key)
        except OSError as exc:
            log_error(f"Could not clear inventory under '{self.key}': {exc}")
