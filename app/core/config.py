"""Configuration management for the Entity Intelligence Service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # Environment
    ENTITY_ENV: str = Field(default="dev", description="Environment: dev, staging, prod, test")

    # Backing store tables
    ENTITY_PROFILES_TABLE: str = Field(
        default="organizations", description="Table holding entity profiles"
    )
    ENTITY_HISTORY_TABLE: str = Field(
        default="entity_history", description="Append-only entity change history table"
    )

    # Store and cache behaviour
    ENTITY_STORE_TIMEOUT_SECONDS: float = Field(
        default=10.0, description="Deadline applied to every backing store call"
    )
    ENTITY_CACHE_TTL_SECONDS: float = Field(
        default=300.0, description="Profile cache TTL (0 disables caching)"
    )
    ENTITY_CONFLICT_RETRIES: int = Field(
        default=2, description="Retries for read-modify-write after a revision conflict"
    )

    # Network mapping
    ENTITY_NETWORK_DEFAULT_DEPTH: int = Field(
        default=2, description="Default traversal depth for network mapping"
    )

    # Seed for placeholder confidences and probabilities (unset = nondeterministic)
    ENTITY_RANDOM_SEED: int | None = Field(
        default=None, description="Seed for the confidence/probability random source"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
