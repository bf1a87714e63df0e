"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Development mode - bypasses the Google sign-in gate for local development
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    # Google sign-in
    google_client_id: str = Field(default="", validation_alias="GOOGLE_CLIENT_ID")
    # Comma-separated list of email domains allowed past the gate
    allowed_email_domains_str: str = Field(
        default="voiceflow.com",
        validation_alias="ALLOWED_EMAIL_DOMAINS",
    )

    # GitHub publishing target
    github_token: str = Field(default="", validation_alias="GITHUB_TOKEN")
    github_owner: str = Field(default="", validation_alias="GITHUB_OWNER")
    github_repo: str = Field(default="", validation_alias="GITHUB_REPO")
    github_branch: str | None = Field(default=None, validation_alias="GITHUB_BRANCH")
    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_API_URL",
    )
    github_timeout: float = Field(default=10.0, validation_alias="GITHUB_TIMEOUT")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    # Static LLM model catalog; None uses the catalog bundled with the package
    model_catalog_path: str | None = Field(default=None, validation_alias="MODEL_CATALOG_PATH")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so we must ensure it's only
        used with local development databases to prevent accidental production exposure.
        SQLite databases are always local.
        """
        if not self.dev_mode or self.is_sqlite:
            return self

        try:
            parsed = urlparse(self.database_url)
            hostname = parsed.hostname or ""
        except ValueError:
            hostname = ""

        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        return _split_csv(self.cors_origins_str)

    @property
    def allowed_email_domains(self) -> list[str]:
        """Parse comma-separated email domains into a list."""
        return _split_csv(self.allowed_email_domains_str)

    @property
    def github_configured(self) -> bool:
        """Whether enough GitHub settings are present to publish prompts."""
        return bool(self.github_token and self.github_owner and self.github_repo)


def _split_csv(value: str) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
