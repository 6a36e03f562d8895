"""Thread-safe TTL cache for entity profiles.

Policy: write-through. The ProfileStore puts every profile it successfully
reads or writes and invalidates on a lost write race, so a cached entry is
never older than the TTL or the last local write.
"""

from __future__ import annotations

import threading
from time import monotonic
from typing import Callable, Protocol

from app.core.schemas_entities import EntityProfile


class ProfileCache(Protocol):
    """Explicit cache interface injected into the ProfileStore."""

    def get(self, entity_id: str) -> EntityProfile | None:
        ...

    def put(self, profile: EntityProfile) -> None:
        ...

    def invalidate(self, entity_id: str) -> None:
        ...

    def clear(self) -> None:
        ...


class TTLProfileCache:
    """In-process profile cache with per-entry expiry. ``ttl_seconds=0`` disables it."""

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[EntityProfile, float]] = {}

    def get(self, entity_id: str) -> EntityProfile | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(entity_id)
            if entry is None:
                return None
            profile, stored_at = entry
            if now - stored_at >= self.ttl_seconds:
                del self._entries[entity_id]
                return None
            # Copies keep callers from mutating the cached instance
            return profile.model_copy(deep=True)

    def put(self, profile: EntityProfile) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[profile.id] = (profile.model_copy(deep=True), self._clock())

    def invalidate(self, entity_id: str) -> None:
        with self._lock:
            self._entries.pop(entity_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
