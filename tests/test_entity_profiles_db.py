"""Tests for entity profile database operations with mocked Supabase."""

from unittest.mock import MagicMock, patch

import pytest

from app.core.enrichment import build_profile
from app.core.exceptions import ConflictError


@pytest.fixture
def mock_supabase():
    """Fixture to mock Supabase client."""
    with patch("app.db.entity_profiles.get_supabase") as mock_get_supabase:
        mock_client = MagicMock()
        mock_get_supabase.return_value = mock_client
        yield mock_client


@pytest.fixture
def store(mock_supabase):
    from app.db.entity_profiles import SupabaseEntityStore

    return SupabaseEntityStore(profiles_table="organizations", history_table="entity_history")


def _row(name="Acme Corp", revision=1):
    return build_profile(name).model_copy(update={"revision": revision}).to_row()


class TestGet:
    def test_found(self, store, mock_supabase):
        chain = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value = MagicMock(data=[_row()])

        profile = store.get("acme_corp")

        assert profile.id == "acme_corp"
        assert profile.revision == 1
        mock_supabase.table.assert_called_with("organizations")
        mock_supabase.table.return_value.select.return_value.eq.assert_called_with("id", "acme_corp")

    def test_missing(self, store, mock_supabase):
        chain = mock_supabase.table.return_value.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value = MagicMock(data=[])

        assert store.get("nobody") is None


class TestInsert:
    def test_insert_row(self, store, mock_supabase):
        row = _row()
        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[row])

        saved = store.insert(build_profile("Acme Corp").model_copy(update={"revision": 1}))

        assert saved.id == "acme_corp"
        inserted = mock_supabase.table.return_value.insert.call_args[0][0]
        assert inserted["id"] == "acme_corp"
        assert inserted["revision"] == 1

    def test_duplicate_key_is_conflict(self, store, mock_supabase):
        error = Exception("duplicate key value violates unique constraint")
        error.code = "23505"
        mock_supabase.table.return_value.insert.return_value.execute.side_effect = error

        with pytest.raises(ConflictError):
            store.insert(build_profile("Acme Corp"))

    def test_other_errors_propagate(self, store, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.side_effect = RuntimeError("network down")

        with pytest.raises(RuntimeError):
            store.insert(build_profile("Acme Corp"))


class TestUpdate:
    def test_conditional_on_revision(self, store, mock_supabase):
        chain = mock_supabase.table.return_value.update.return_value.eq.return_value.eq.return_value
        chain.execute.return_value = MagicMock(data=[_row(revision=3)])

        saved = store.update("acme_corp", build_profile("Acme Corp").model_copy(update={"revision": 3}), 2)

        assert saved.revision == 3
        mock_supabase.table.return_value.update.return_value.eq.assert_called_with("id", "acme_corp")
        mock_supabase.table.return_value.update.return_value.eq.return_value.eq.assert_called_with("revision", 2)

    def test_no_matching_row_is_conflict(self, store, mock_supabase):
        chain = mock_supabase.table.return_value.update.return_value.eq.return_value.eq.return_value
        chain.execute.return_value = MagicMock(data=[])

        with pytest.raises(ConflictError) as exc_info:
            store.update("acme_corp", build_profile("Acme Corp"), 2)

        assert exc_info.value.expected_revision == 2


class TestQueryHistory:
    def test_newest_first(self, store, mock_supabase):
        chain = mock_supabase.table.return_value.select.return_value.eq.return_value.order.return_value
        chain.execute.return_value = MagicMock(
            data=[
                {
                    "entity_id": "acme_corp",
                    "timestamp": "2026-05-30T00:00:00+00:00",
                    "change_type": "acquisition",
                    "significance": "high",
                    "description": "Acquired Initech",
                }
            ]
        )

        history = store.query_history("acme_corp")

        assert [h.change_type for h in history] == ["acquisition"]
        mock_supabase.table.assert_called_with("entity_history")
        mock_supabase.table.return_value.select.return_value.eq.return_value.order.assert_called_with(
            "timestamp", desc=True
        )
