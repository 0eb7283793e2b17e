"""
scribeview.store - Key-path document store.

Records live under slash-separated key paths such as
``users/{userId}/transcriptions/{id}``. The whole document is kept in one
JSON file that is replaced atomically on every write, so a partial update
never leaves the file half written.
"""

from __future__ import annotations

import copy
import json
import tempfile
from pathlib import Path
from typing import Any

from scribeview.exceptions import StoreError
from scribeview.logging import get_logger
from scribeview.models import Transcription

logger = get_logger(__name__)


def transcription_path(user_id: str, transcription_id: str) -> str:
    """Key path of a user's transcription record."""
    for part in (user_id, transcription_id):
        if not part or "/" in part:
            raise StoreError(f"Invalid key segment: {part!r}")
    return f"users/{user_id}/transcriptions/{transcription_id}"


def _split(path: str) -> list[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise StoreError("Empty key path")
    return parts


class DocumentStore:
    """JSON-file backed key-value document store."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Store {self.path} does not contain an object")
        return data

    def _save(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                delete=False,
                suffix=".tmp",
            ) as tmp:
                tmp_path = Path(tmp.name)
                try:
                    json.dump(data, tmp, indent=2, ensure_ascii=False)
                except Exception:
                    tmp_path.unlink(missing_ok=True)
                    raise
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Cannot write store {self.path}: {e}") from e

    def get(self, path: str) -> Any | None:
        """Return a deep copy of the value at ``path``, or None."""
        node: Any = self._load()
        for part in _split(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def exists(self, path: str) -> bool:
        return self.get(path) is not None

    def set(self, path: str, value: Any) -> None:
        """Replace the value at ``path``, creating parents as needed."""
        data = self._load()
        *parents, leaf = _split(path)
        node = data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = value
        self._save(data)

    def update(self, path: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into the object at ``path`` in a single write."""
        data = self._load()
        *parents, leaf = _split(path)
        node = data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        current = node.get(leaf)
        if not isinstance(current, dict):
            current = {}
        current.update(fields)
        node[leaf] = current
        self._save(data)
        logger.debug("Updated %s (%s)", path, ", ".join(sorted(fields)))

    def children(self, path: str) -> dict[str, Any]:
        """Return the mapping stored at ``path`` (empty if missing)."""
        value = self.get(path)
        return value if isinstance(value, dict) else {}


def add_transcription(store: DocumentStore, user_id: str, transcription: Transcription) -> str:
    """Create a transcription record. Returns its key path."""
    path = transcription_path(user_id, transcription.id)
    if store.exists(path):
        raise StoreError(f"Transcription already exists: {transcription.id}")
    store.set(path, transcription.model_dump(by_alias=True))
    return path


def load_transcription(
    store: DocumentStore, user_id: str, transcription_id: str
) -> Transcription | None:
    """Load a user's transcription, or None if it does not exist."""
    data = store.get(transcription_path(user_id, transcription_id))
    if data is None:
        return None
    data.setdefault("id", transcription_id)
    return Transcription.model_validate(data)


def list_transcriptions(store: DocumentStore, user_id: str) -> list[Transcription]:
    """All transcriptions owned by ``user_id``, ordered by id."""
    records = store.children(f"users/{user_id}/transcriptions")
    result = []
    for transcription_id in sorted(records):
        data = records[transcription_id]
        if isinstance(data, dict):
            data.setdefault("id", transcription_id)
            result.append(Transcription.model_validate(data))
    return result
