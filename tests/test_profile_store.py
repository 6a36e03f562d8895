"""Tests for the profile cache and the cache-aware ProfileStore façade."""

import pytest

from app.core.enrichment import build_profile
from app.core.exceptions import ConflictError, NotFoundError, PersistenceError
from app.core.profile_cache import TTLProfileCache
from app.core.profile_store import ProfileStore
from tests.fakes.fake_entity_store import FakeEntityStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


# =============================================================================
# TTLProfileCache
# =============================================================================


class TestTTLProfileCache:
    def test_put_get_invalidate(self):
        cache = TTLProfileCache(ttl_seconds=60)
        profile = build_profile("Acme Corp")

        cache.put(profile)
        assert cache.get("acme_corp") == profile

        cache.invalidate("acme_corp")
        assert cache.get("acme_corp") is None

    def test_entries_expire(self):
        clock = FakeClock()
        cache = TTLProfileCache(ttl_seconds=60, clock=clock)
        cache.put(build_profile("Acme Corp"))

        clock.now += 59
        assert cache.get("acme_corp") is not None

        clock.now += 1
        assert cache.get("acme_corp") is None
        assert len(cache) == 0

    def test_zero_ttl_disables_cache(self):
        cache = TTLProfileCache(ttl_seconds=0)
        cache.put(build_profile("Acme Corp"))
        assert cache.get("acme_corp") is None

    def test_returned_profile_is_a_copy(self):
        cache = TTLProfileCache(ttl_seconds=60)
        cache.put(build_profile("Acme Corp"))

        cache.get("acme_corp").aliases.append("mutated")

        assert "mutated" not in cache.get("acme_corp").aliases

    def test_clear(self):
        cache = TTLProfileCache(ttl_seconds=60)
        cache.put(build_profile("Acme Corp"))
        cache.put(build_profile("Globex"))
        cache.clear()
        assert len(cache) == 0


# =============================================================================
# ProfileStore
# =============================================================================


@pytest.fixture
def backend():
    return FakeEntityStore()


@pytest.fixture
def store(backend):
    return ProfileStore(backend, cache=TTLProfileCache(ttl_seconds=60), timeout_seconds=2.0)


class TestProfileStore:
    def test_upsert_new_profile_inserts_revision_one(self, store, backend):
        saved = store.upsert(build_profile("Acme Corp"), exists=False)
        assert saved.revision == 1
        assert backend.profiles["acme_corp"]["revision"] == 1
        assert store.cached("acme_corp") == saved

    def test_upsert_existing_profile_updates_conditionally(self, store, backend):
        stored = backend.seed(build_profile("Acme Corp"))
        saved = store.upsert(stored, exists=True)
        assert saved.revision == 2
        assert backend.calls_for("update") == ["acme_corp"]

    def test_upsert_existing_row_at_revision_zero_updates(self, store, backend):
        backend.profiles["acme_corp"] = build_profile("Acme Corp").to_row()
        existing = store.get("acme_corp")

        saved = store.upsert(existing, exists=True)

        assert saved.revision == 1
        assert backend.calls_for("insert") == []

    def test_numeric_metadata_from_other_writers_is_readable(self, store, backend):
        row = build_profile("Acme Corp").model_copy(update={"revision": 1}).to_row()
        row["metadata"].update({"founded": 1998, "employees": 5000})
        backend.profiles["acme_corp"] = row

        profile = store.require("acme_corp")

        assert profile.metadata.founded == "1998"
        assert profile.metadata.employees == "5000"

    def test_stale_revision_conflicts_and_invalidates_cache(self, store, backend):
        stale = backend.seed(build_profile("Acme Corp"))
        store.cache.put(stale)
        backend.profiles["acme_corp"]["revision"] = 5

        with pytest.raises(ConflictError):
            store.update("acme_corp", stale)

        assert store.cached("acme_corp") is None

    def test_get_missing_returns_none(self, store):
        assert store.get("nobody") is None

    def test_require_missing_raises(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.require("nobody")
        assert exc_info.value.kind == "not_found"

    def test_store_error_becomes_persistence_error(self, store, backend):
        backend.fail_with = RuntimeError("connection reset")
        with pytest.raises(PersistenceError) as exc_info:
            store.get("acme_corp")
        assert "connection reset" in exc_info.value.message

    def test_deadline_exceeded_becomes_persistence_error(self, store, backend):
        backend.delay_seconds = 0.5
        with pytest.raises(PersistenceError) as exc_info:
            store.get("acme_corp", timeout=0.05)
        assert "timed out" in exc_info.value.message

    def test_history_passthrough(self, store, backend):
        backend.add_history(
            entity_id="acme_corp",
            timestamp="2026-01-02T00:00:00Z",
            change_type="leadership",
        )
        history = store.query_history("acme_corp")
        assert [h.change_type for h in history] == ["leadership"]
