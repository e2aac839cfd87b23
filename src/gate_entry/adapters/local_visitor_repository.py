"""Key-value backed visitor repository used when no backend is configured."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from gate_entry.domain.errors import RepositoryError
from gate_entry.domain.visitors import RecordShape
from gate_entry.services.visitors import VisitorRepository

logger = logging.getLogger(__name__)

VISITORS_KEY = "sge_visitors"


class KeyValueStore(Protocol):
    """String key-value storage, shaped like browser local storage."""

    def get(self, key: str) -> str | None:
        """Return the stored string for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a string under a key."""


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store persisted as a single JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored string for a key, if present."""
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a string under a key and flush the file."""
        entries = self._load()
        entries[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(entries), encoding="utf-8")

    def _load(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise RepositoryError(f"Local store {self.path} is unreadable") from exc
        if not isinstance(data, dict):
            raise RepositoryError(f"Local store {self.path} does not hold a JSON object")
        return data


@dataclass
class LocalVisitorRepository(VisitorRepository):
    """Visitors kept as an ordered JSON list under one store key.

    Records are stored in domain shape; no field mapping is applied.
    """

    store: KeyValueStore
    key: str = VISITORS_KEY

    record_shape = RecordShape.DOMAIN

    def create(self, record: dict[str, object]) -> dict[str, object]:
        """Append a visitor and return it."""
        visitors = self._load()
        stored = dict(record)
        stored.setdefault("id", str(uuid4()))
        visitors.append(stored)
        self._save(visitors)
        return dict(stored)

    def get_by_id(self, visitor_id: str) -> dict[str, object] | None:
        """Return the visitor for an id, if present."""
        for visitor in self._load():
            if visitor.get("id") == visitor_id:
                return visitor
        return None

    def update(
        self, visitor_id: str, changes: dict[str, object]
    ) -> dict[str, object] | None:
        """Merge changes into a visitor and return it."""
        visitors = self._load()
        for index, visitor in enumerate(visitors):
            if visitor.get("id") == visitor_id:
                visitors[index] = {**visitor, **changes}
                self._save(visitors)
                return dict(visitors[index])
        return None

    def list_visitors(
        self, society_id: str | None = None, resident_id: str | None = None
    ) -> list[dict[str, object]]:
        """Return visitors in insertion order, optionally filtered."""
        return [
            visitor
            for visitor in self._load()
            if (society_id is None or visitor.get("societyId") == society_id)
            and (resident_id is None or visitor.get("residentId") == resident_id)
        ]

    def _load(self) -> list[dict[str, object]]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise RepositoryError(f"Stored visitors under {self.key} are corrupt") from exc
        if not isinstance(data, list):
            logger.warning("Ignoring non-list value stored under %s", self.key)
            return []
        return [item for item in data if isinstance(item, dict)]

    def _save(self, visitors: list[dict[str, object]]) -> None:
        self.store.set(self.key, json.dumps(visitors))
