"""Supabase client for the entity profile and history tables."""

from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get the shared Supabase client (cached singleton).

    PostgREST requests use the store deadline as their HTTP timeout, so a
    hung connection fails on its own instead of only being abandoned by the
    caller.

    Raises:
        RuntimeError: If client initialization fails
    """
    settings = get_settings()
    try:
        client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            options=ClientOptions(postgrest_client_timeout=settings.ENTITY_STORE_TIMEOUT_SECONDS),
        )
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e

    logger.info(f"Supabase client ready for tables {settings.ENTITY_PROFILES_TABLE}, {settings.ENTITY_HISTORY_TABLE}")
    return client
