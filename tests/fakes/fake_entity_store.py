"""Fake in-memory entity store for service and tool tests."""

import time
from typing import Any, Callable

from app.core.exceptions import ConflictError
from app.core.schemas_entities import EntityProfile, HistoryRecord


class FakeEntityStore:
    """In-memory EntityStoreBackend with the same revision semantics as Supabase."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all stores to initial state."""
        self.profiles: dict[str, dict[str, Any]] = {}
        self.history: list[dict[str, Any]] = []
        self.calls: list[tuple[str, str]] = []
        # Hooks for simulating slow/failing/concurrent stores
        self.delay_seconds: float = 0.0
        self.fail_with: Exception | None = None
        self.before_update: Callable[[str], None] | None = None

    def _enter(self, op: str, entity_id: str) -> None:
        self.calls.append((op, entity_id))
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.fail_with is not None:
            raise self.fail_with

    # Seeding helpers
    def seed(self, profile: EntityProfile) -> EntityProfile:
        """Store a profile directly, as revision 1 unless already persisted."""
        if profile.revision == 0:
            profile = profile.model_copy(update={"revision": 1})
        self.profiles[profile.id] = profile.to_row()
        return profile

    def add_history(self, **record: Any) -> None:
        self.history.append(record)

    def calls_for(self, op: str) -> list[str]:
        return [entity_id for name, entity_id in self.calls if name == op]

    # Backend protocol
    def get(self, entity_id: str) -> EntityProfile | None:
        self._enter("get", entity_id)
        row = self.profiles.get(entity_id)
        return EntityProfile(**row) if row else None

    def insert(self, profile: EntityProfile) -> EntityProfile:
        self._enter("insert", profile.id)
        if profile.id in self.profiles:
            raise ConflictError(profile.id, expected_revision=0)
        self.profiles[profile.id] = profile.to_row()
        return EntityProfile(**self.profiles[profile.id])

    def update(self, entity_id: str, profile: EntityProfile, expected_revision: int) -> EntityProfile:
        self._enter("update", entity_id)
        if self.before_update is not None:
            self.before_update(entity_id)
        row = self.profiles.get(entity_id)
        if row is None or row.get("revision") != expected_revision:
            raise ConflictError(entity_id, expected_revision=expected_revision)
        self.profiles[entity_id] = profile.to_row()
        return EntityProfile(**self.profiles[entity_id])

    def query_history(self, entity_id: str) -> list[HistoryRecord]:
        self._enter("query_history", entity_id)
        rows = [HistoryRecord(**r) for r in self.history if r["entity_id"] == entity_id]
        return sorted(rows, key=lambda r: r.timestamp, reverse=True)
