"""
Configuration settings for caseweb.

This module provides a settings class for the gateway, with support for loading
configuration from TOML files and environment variables.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class DatabaseDriver(str, Enum):
    """Supported database drivers."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class StorageBackendKind(str, Enum):
    """Supported object storage backends."""

    SUPABASE = "supabase"
    LOCAL = "local"


class Settings(BaseSettings):
    """Main settings class for caseweb.

    Values are read from environment variables prefixed with ``CASEWEB_`` and
    from ``settings.toml`` / ``settings.custom.toml`` in the working directory.
    """

    model_config = SettingsConfigDict(
        toml_file=["settings.toml", "settings.custom.toml"], env_prefix="CASEWEB_", extra="ignore"
    )

    # Server settings
    port: int = 8000
    host: str = "127.0.0.1"
    root_url: str = "/"
    debug: bool = False

    # Case store settings
    database_driver: DatabaseDriver = DatabaseDriver.SQLITE
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "caseweb"
    database_username: str = "postgres"
    database_password: str = "postgres"
    database_pool_size: int = 10

    # Object storage settings
    storage_backend: StorageBackendKind = StorageBackendKind.SUPABASE
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""
    storage_bucket: str = "cbct-scans"
    storage_root: str = str(Path.home() / "caseweb/storage")
    storage_timeout: float = 30.0
    storage_list_page_size: int = 1000

    # CORS settings
    cors_origins: list[str] = ["*"]

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str | None = None
    log_rotation: str = "20 MB"
    log_retention: str = "1 week"
    log_format: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources for settings.

        Priority order: explicit init arguments, environment variables, then TOML config files
        """
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls)

    @property
    def async_database_url(self) -> str:
        """Get the SQLAlchemy URL of the case store with its async driver."""
        if self.database_driver == DatabaseDriver.SQLITE:
            return f"sqlite+aiosqlite:///{self.database_name}.db"
        return (
            f"postgresql+asyncpg://{self.database_username}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    def get_log_dir(self) -> Path:
        """Get the log directory path.

        Returns:
            Path to the log directory. Uses log_dir if specified,
            otherwise ``logs`` under the current working directory.
        """
        if self.log_dir:
            return Path(self.log_dir)
        return Path.cwd() / "logs"


@lru_cache
def get_settings() -> Settings:
    """Get the settings instance, with caching.

    Returns:
        Cached Settings instance
    """
    return Settings()


settings = get_settings()
