"""Promptu settings, read from the environment and an optional .env file."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_DATABASE_HOSTS = frozenset({"localhost", "127.0.0.1", "0.0.0.0", "::1"})


def is_local_database(database_url: str) -> bool:
    """
    True for SQLite files and databases on the loopback interface.

    Unparseable URLs and URLs without a host count as remote.
    """
    try:
        parsed = urlparse(database_url)
        host = (parsed.hostname or "").lower()
    except ValueError:
        return False
    if parsed.scheme.startswith("sqlite"):
        return True
    return host in LOCAL_DATABASE_HOSTS


class Settings(BaseSettings):
    """
    Runtime configuration.

    Field names are used in code; the environment variable for each field is its
    ``validation_alias``. Either name is accepted when constructing directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    auth0_domain: str = Field(default="", validation_alias="AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", validation_alias="AUTH0_AUDIENCE")
    # Every request acts as a fixed local user; refused unless the database is local
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    app_url: str = Field(default="http://localhost:3000", validation_alias="APP_URL")
    # Comma-separated; see cors_origins
    cors_origins_str: str = Field(default="http://localhost:3000", validation_alias="CORS_ORIGINS")

    redis_url: str = Field(default="redis://localhost:6379", validation_alias="REDIS_URL")
    redis_enabled: bool = Field(default=True, validation_alias="REDIS_ENABLED")
    redis_pool_size: int = Field(default=20, validation_alias="REDIS_POOL_SIZE")

    # Notifications are skipped for an empty URL
    discord_webhook_content_url: str = Field(
        default="", validation_alias="DISCORD_WEBHOOK_CONTENT_URL",
    )
    discord_webhook_registrations_url: str = Field(
        default="", validation_alias="DISCORD_WEBHOOK_REGISTRATIONS_URL",
    )

    view_dedup_window_seconds: int = Field(
        default=3600, validation_alias="VIEW_DEDUP_WINDOW_SECONDS",
    )
    view_dedup_max_local_entries: int = Field(
        default=1000, validation_alias="VIEW_DEDUP_MAX_LOCAL_ENTRIES",
    )
    stats_cache_ttl_seconds: int = Field(default=300, validation_alias="STATS_CACHE_TTL_SECONDS")
    trending_cache_ttl_seconds: int = Field(
        default=180, validation_alias="TRENDING_CACHE_TTL_SECONDS",
    )

    @model_validator(mode="after")
    def refuse_dev_mode_on_remote_database(self) -> "Settings":
        """DEV_MODE skips authentication, so it may only run against a local database."""
        if self.dev_mode and not is_local_database(self.database_url):
            raise ValueError(
                "DEV_MODE cannot be enabled with a non-local database. "
                "Disable DEV_MODE or point DATABASE_URL at a local database.",
            )
        return self

    @property
    def is_sqlite(self) -> bool:
        """True when DATABASE_URL points at SQLite."""
        return self.database_url.startswith("sqlite")

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins, blanks dropped."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def auth0_issuer(self) -> str:
        """Expected ``iss`` claim."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Where Auth0 publishes its signing keys."""
        return f"https://{self.auth0_domain}/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Settings, read once per process."""
    return Settings()
