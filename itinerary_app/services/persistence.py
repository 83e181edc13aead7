"""
Local storage for the trip store.

Mirrors the browser storage API (string keys, string values) so the whole
application state can be written as one JSON snapshot under a fixed key.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ..models.trip import AppState

logger = logging.getLogger(__name__)

STORAGE_KEY = "i-got-this-itinerary-data"


class MemoryStorage:
    """In-memory key/value storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value

    def remove_item(self, key: str):
        self._items.pop(key, None)


class LocalStorage:
    """File-backed key/value storage, one file per key."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str):
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str):
        self._path(key).unlink(missing_ok=True)


def save_state(storage, state: AppState):
    """Overwrite the persisted snapshot with ``state``."""
    storage.set_item(STORAGE_KEY, json.dumps(state.to_json_dict()))


def load_state(storage) -> AppState:
    """
    Read the persisted snapshot.

    A missing snapshot yields the empty state. A corrupt one is logged and
    also yields the empty state; the caller never sees the failure.
    """
    try:
        raw = storage.get_item(STORAGE_KEY)
        if raw is None:
            return AppState()
        state = AppState.model_validate(json.loads(raw))
    except (ValueError, ValidationError, OSError) as e:
        logger.error(f"Failed to load saved data: {e}")
        return AppState()

    if state.active_trip is not None and not state.has_trip(state.active_trip):
        logger.warning(f"Saved active trip {state.active_trip} no longer exists")
        state = state.model_copy(update={"active_trip": None})
    return state
