"""ProfileStore: profile cache in front of the persistent entity store.

All backing store calls run on a small worker pool so each one can be held to
a deadline. A call that misses its deadline or raises is reported as a
``PersistenceError``; a lost revision race surfaces as ``ConflictError``.
"""

from __future__ import annotations

import concurrent.futures
from typing import Callable, Protocol, TypeVar

from app.core.exceptions import ConflictError, EntityServiceError, NotFoundError, PersistenceError
from app.core.logging import get_logger
from app.core.profile_cache import ProfileCache, TTLProfileCache
from app.core.schemas_entities import EntityProfile, HistoryRecord

logger = get_logger(__name__)

T = TypeVar("T")

_executor = concurrent.futures.ThreadPoolExecutor(max_workers=8, thread_name_prefix="entity-store")


class EntityStoreBackend(Protocol):
    """Operations consumed from the persistent store."""

    def get(self, entity_id: str) -> EntityProfile | None:
        ...

    def insert(self, profile: EntityProfile) -> EntityProfile:
        ...

    def update(self, entity_id: str, profile: EntityProfile, expected_revision: int) -> EntityProfile:
        ...

    def query_history(self, entity_id: str) -> list[HistoryRecord]:
        ...


class ProfileStore:
    """Cache-aware façade over an ``EntityStoreBackend``."""

    def __init__(
        self,
        backend: EntityStoreBackend,
        cache: ProfileCache | None = None,
        timeout_seconds: float = 10.0,
    ):
        self.backend = backend
        self.cache = cache if cache is not None else TTLProfileCache()
        self.timeout_seconds = timeout_seconds

    def _call(self, operation: str, entity_id: str, fn: Callable[[], T], timeout: float | None) -> T:
        deadline = timeout if timeout is not None else self.timeout_seconds
        future = _executor.submit(fn)
        try:
            return future.result(timeout=deadline)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            logger.error(f"Store {operation} for {entity_id} exceeded {deadline}s deadline")
            raise PersistenceError(f"Store {operation} timed out after {deadline}s") from e
        except EntityServiceError:
            raise
        except Exception as e:
            logger.error(f"Store {operation} failed for {entity_id}: {e}", exc_info=True)
            raise PersistenceError(f"Store {operation} failed: {e}") from e

    def cached(self, entity_id: str) -> EntityProfile | None:
        """Return the cached profile without touching the store."""
        return self.cache.get(entity_id)

    def get(self, entity_id: str, timeout: float | None = None) -> EntityProfile | None:
        """Read a profile from the store (never from the cache) and refresh the cache."""
        profile = self._call("get", entity_id, lambda: self.backend.get(entity_id), timeout)
        if profile is not None:
            self.cache.put(profile)
        return profile

    def require(self, entity_id: str, timeout: float | None = None) -> EntityProfile:
        """Read a profile from the store, raising NotFoundError if absent."""
        profile = self.get(entity_id, timeout=timeout)
        if profile is None:
            raise NotFoundError(entity_id)
        return profile

    def upsert(self, profile: EntityProfile, exists: bool, timeout: float | None = None) -> EntityProfile:
        """
        Persist a profile: insert it when the read found no row, otherwise
        update it conditionally on the revision it was read at.

        ``exists`` must come from the store read, not from ``revision``:
        rows written by other services may sit at revision 0.

        Raises:
            ConflictError: If another writer got there first
        """
        if not exists:
            new = profile.model_copy(update={"revision": profile.revision + 1})
            return self._write("insert", profile.id, lambda: self.backend.insert(new), timeout)
        return self.update(profile.id, profile, timeout=timeout)

    def update(self, entity_id: str, profile: EntityProfile, timeout: float | None = None) -> EntityProfile:
        """Conditionally overwrite a stored profile, bumping its revision."""
        expected = profile.revision
        new = profile.model_copy(update={"revision": expected + 1})
        return self._write(
            "update",
            entity_id,
            lambda: self.backend.update(entity_id, new, expected),
            timeout,
        )

    def _write(
        self,
        operation: str,
        entity_id: str,
        fn: Callable[[], EntityProfile],
        timeout: float | None,
    ) -> EntityProfile:
        try:
            saved = self._call(operation, entity_id, fn, timeout)
        except ConflictError:
            self.cache.invalidate(entity_id)
            logger.warning(f"Revision conflict on {operation} for {entity_id}")
            raise
        self.cache.put(saved)
        return saved

    def query_history(self, entity_id: str, timeout: float | None = None) -> list[HistoryRecord]:
        """Read history records for an entity, newest first."""
        return self._call(
            "query_history",
            entity_id,
            lambda: self.backend.query_history(entity_id),
            timeout,
        )
