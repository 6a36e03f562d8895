"""Database operations for entity profiles and entity history."""

from typing import Any

from app.core.config import get_settings
from app.core.exceptions import ConflictError
from app.core.logging import get_logger
from app.core.schemas_entities import EntityProfile, HistoryRecord
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

# Postgres unique_violation
_DUPLICATE_KEY_CODE = "23505"


def _is_duplicate_key(error: Exception) -> bool:
    return getattr(error, "code", None) == _DUPLICATE_KEY_CODE or _DUPLICATE_KEY_CODE in str(error)


class SupabaseEntityStore:
    """Keyed profile storage over a Supabase (PostgREST) table.

    Profiles are stored one row per entity with JSON columns and an integer
    ``revision``. Writes are conditional on that revision, so two writers
    that read the same revision cannot both succeed.
    """

    def __init__(
        self,
        client: Any | None = None,
        profiles_table: str | None = None,
        history_table: str | None = None,
    ):
        settings = get_settings()
        self._client = client
        self.profiles_table = profiles_table or settings.ENTITY_PROFILES_TABLE
        self.history_table = history_table or settings.ENTITY_HISTORY_TABLE

    @property
    def client(self) -> Any:
        return self._client if self._client is not None else get_supabase()

    def get(self, entity_id: str) -> EntityProfile | None:
        """Get a profile by id, or None if it does not exist."""
        result = (
            self.client.table(self.profiles_table)
            .select("*")
            .eq("id", entity_id)
            .limit(1)
            .execute()
        )
        if result.data:
            return EntityProfile(**result.data[0])
        return None

    def insert(self, profile: EntityProfile) -> EntityProfile:
        """
        Create a profile row.

        Raises:
            ConflictError: If a row with the same id already exists
        """
        row = profile.to_row()
        try:
            result = self.client.table(self.profiles_table).insert(row).execute()
        except Exception as e:
            if _is_duplicate_key(e):
                raise ConflictError(profile.id, expected_revision=0) from e
            raise

        return EntityProfile(**result.data[0]) if result.data else profile

    def update(self, entity_id: str, profile: EntityProfile, expected_revision: int) -> EntityProfile:
        """
        Overwrite a profile row if its stored revision still matches.

        Raises:
            ConflictError: If no row matched id + expected_revision
        """
        row = profile.to_row()
        result = (
            self.client.table(self.profiles_table)
            .update(row)
            .eq("id", entity_id)
            .eq("revision", expected_revision)
            .execute()
        )
        if not result.data:
            raise ConflictError(entity_id, expected_revision=expected_revision)
        return EntityProfile(**result.data[0])

    def query_history(self, entity_id: str) -> list[HistoryRecord]:
        """List history records for an entity, newest first."""
        result = (
            self.client.table(self.history_table)
            .select("*")
            .eq("entity_id", entity_id)
            .order("timestamp", desc=True)
            .execute()
        )
        return [HistoryRecord(**row) for row in result.data or []]
