"""Typed runtime settings with dotenv support and startup validation."""

import re
from decimal import Decimal
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SLOT_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for API runtime, snapshot storage and bootstrap.

    Environment variable names map directly to field names in uppercase.
    Example: `ledger_slot_name` reads from `LEDGER_SLOT_NAME`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root logging level name.
        store_backend: Snapshot store backend (`file` or `database`).
        ledger_directory: Directory holding slot files for the file backend.
        ledger_slot_name: Slot shared by every session.
        database_url: SQLAlchemy DSN for the database backend.
        bootstrap_seed: Optional random seed for reproducible bootstrap snapshots.
        bootstrap_random_stock_count: Number of generated stocks added at bootstrap.
        bootstrap_balance_min: Lower bound of starting account balances.
        bootstrap_balance_max: Upper bound of starting account balances.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    store_backend: Literal["file", "database"] = Field(default="file")
    ledger_directory: str = Field(default=".")
    ledger_slot_name: str = Field(default="defaultDB")
    database_url: str = Field(default="sqlite:///ledger.db")
    bootstrap_seed: int | None = Field(default=None)
    bootstrap_random_stock_count: int = Field(default=5, ge=0, le=100)
    bootstrap_balance_min: Decimal = Field(default=Decimal("20"), ge=0)
    bootstrap_balance_max: Decimal = Field(default=Decimal("30"), ge=0)

    @field_validator("ledger_directory", "database_url")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("ledger_slot_name")
    @classmethod
    def _validate_slot_name(cls, value: str) -> str:
        stripped_value = value.strip()
        if not _SLOT_NAME_PATTERN.fullmatch(stripped_value):
            raise ValueError("ledger_slot_name must contain only letters, digits, '_' or '-'")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return normalized_value

    @field_validator("bootstrap_balance_max")
    @classmethod
    def _validate_balance_bounds(cls, value: Decimal, info) -> Decimal:
        balance_min = Decimal(str(info.data.get("bootstrap_balance_min", Decimal("20"))))
        if value < balance_min:
            raise ValueError("bootstrap_balance_max must be greater than or equal to bootstrap_balance_min")
        return value


class DatabaseUrlSettings(BaseSettings):
    """Minimal settings model used by migration tooling.

    Attributes:
        database_url: SQLAlchemy DSN for schema migrations.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    database_url: str = Field(default="sqlite:///ledger.db")


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error


def config_load_database_url() -> str:
    """Load and validate only the database URL setting.

    Returns:
        str: Non-empty database URL for migration and db tooling.

    Raises:
        SettingsLoadError: Raised when database URL cannot be loaded.
    """

    try:
        database_settings = DatabaseUrlSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Database URL configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error

    database_url = str(database_settings.database_url).strip()
    if not database_url:
        raise SettingsLoadError("Database URL configuration validation failed. DATABASE_URL must not be blank.")
    return database_url
