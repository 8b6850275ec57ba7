"""
Centralized configuration management for the GrowUp CX dashboard.

Settings are read from the environment with pydantic-settings, one section per
concern, and cached for the lifetime of the process.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.pool import StaticPool

from ..domain.catalog import PROGRAM_IDS
from .exceptions import ConfigurationError

MEMORY_SQLITE = ":memory:"


class DatabaseConfig(BaseSettings):
    """
    Database configuration settings.

    Example:
        >>> DatabaseConfig(backend="sqlite", sqlite_path="./growup.db").get_connection_url()
        'sqlite:///./growup.db'
    """

    backend: Literal["sqlite", "mysql"] = Field("sqlite", description="Database backend type")

    sqlite_path: str | None = Field("./growup.db", description="SQLite database file path")

    mysql_host: str | None = Field("localhost", description="MySQL host")
    mysql_port: int | None = Field(3306, ge=1, le=65535, description="MySQL port")
    mysql_user: str | None = Field("root", description="MySQL username")
    mysql_password: str | None = Field("", description="MySQL password")
    mysql_database: str | None = Field("growup", description="MySQL database name")
    mysql_charset: str = Field("utf8mb4", description="MySQL character set")

    pool_pre_ping: bool = Field(True, description="Enable connection pool pre-ping")
    pool_recycle: int = Field(3600, ge=60, description="Connection pool recycle time (seconds)")
    echo: bool = Field(False, description="Enable SQL query logging")

    model_config = SettingsConfigDict(env_prefix="DB_", case_sensitive=False)

    @field_validator("sqlite_path")
    @classmethod
    def validate_sqlite_path(cls, v: str | None) -> str | None:
        """Ensure the SQLite directory exists and the file carries a suffix."""
        if not v or v == MEMORY_SQLITE:
            return v
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.suffix:
            v = str(path.with_suffix(".db"))
        return v

    @model_validator(mode="after")
    def validate_mysql_config(self) -> DatabaseConfig:
        if self.backend == "mysql":
            missing = [
                name
                for name in ("mysql_host", "mysql_user", "mysql_database")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"MySQL backend requires: {', '.join(missing)}")
        return self

    def get_connection_url(self) -> str:
        if self.backend == "sqlite":
            return f"sqlite:///{self.sqlite_path}"
        password_part = f":{self.mysql_password}" if self.mysql_password else ""
        return (
            f"mysql+pymysql://{self.mysql_user}{password_part}@{self.mysql_host}:"
            f"{self.mysql_port}/{self.mysql_database}?charset={self.mysql_charset}"
        )

    def get_engine_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"echo": self.echo, "pool_pre_ping": self.pool_pre_ping}
        if self.backend == "sqlite":
            # FastAPI serves sync routes from a thread pool
            options["connect_args"] = {"check_same_thread": False}
            if self.sqlite_path == MEMORY_SQLITE:
                options["poolclass"] = StaticPool
        else:
            options["pool_recycle"] = self.pool_recycle
        return options


class LoggingConfig(BaseSettings):
    """Logging levels, output format and file destination."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Minimum logging level"
    )
    file_path: str | None = Field("./logs/growup.log", description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, ge=1024, description="Max log file size in bytes")
    backup_count: int = Field(5, ge=1, description="Number of backup log files")
    structured: bool = Field(True, description="Use structured JSON logging")
    console_enabled: bool = Field(True, description="Enable console output")

    model_config = SettingsConfigDict(env_prefix="LOG_", case_sensitive=False)

    def as_setup_kwargs(self) -> dict[str, Any]:
        """Arguments for ``growup.infrastructure.logging.setup_logging``."""
        return {
            "level": self.level,
            "log_file": self.file_path,
            "structured": self.structured,
            "enable_console": self.console_enabled,
            "max_bytes": self.max_bytes,
            "backup_count": self.backup_count,
        }


class ApplicationConfig(BaseSettings):
    """
    Main application configuration.

    Example:
        >>> config = get_settings()
        >>> config.app.diagnosis_mode
        'axis'
    """

    environment: Literal["development", "testing", "production"] = Field(
        "development", description="Application environment"
    )
    debug: bool = Field(False, description="Enable debug mode")
    version: str = Field("0.1.0", description="Application version")
    title: str = Field("GrowUp CX - Jornada do Mentorado", description="API title")

    default_program_id: str = Field("prog-start", description="Program pre-selected in the wizard")
    diagnosis_mode: Literal["axis", "question"] = Field(
        "axis", description="One score per axis (slider) or one free-text answer per question"
    )
    enable_data_export: bool = Field(True, description="Enable JSON/XLSX export endpoints")
    wizard_idle_timeout: int = Field(
        3600, ge=60, description="Seconds before an untouched diagnosis wizard is dropped"
    )

    model_config = SettingsConfigDict(env_prefix="APP_", case_sensitive=False)

    @field_validator("default_program_id")
    @classmethod
    def validate_default_program(cls, v: str) -> str:
        if v not in PROGRAM_IDS:
            raise ValueError(f"Unknown program id '{v}'. Expected one of {sorted(PROGRAM_IDS)}")
        return v

    @model_validator(mode="after")
    def debug_implies_development(self) -> ApplicationConfig:
        if self.debug and self.environment == "production":
            raise ValueError("Debug mode cannot be enabled in production")
        return self


class Settings:
    """
    Lazily constructed container for every configuration section.

    Example:
        >>> settings = get_settings()
        >>> settings.database.get_connection_url()
        'sqlite:///./growup.db'
    """

    def __init__(self):
        self._app: ApplicationConfig | None = None
        self._database: DatabaseConfig | None = None
        self._logging: LoggingConfig | None = None

    @property
    def app(self) -> ApplicationConfig:
        if self._app is None:
            self._app = ApplicationConfig()
        return self._app

    @property
    def database(self) -> DatabaseConfig:
        if self._database is None:
            self._database = DatabaseConfig()
        return self._database

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            if os.getenv("LOG_LEVEL"):
                self._logging = LoggingConfig()
            else:
                level = "DEBUG" if self.app.debug else "INFO"
                if self.app.environment == "production":
                    level = "WARNING"
                self._logging = LoggingConfig(level=level)
        return self._logging

    def is_development(self) -> bool:
        return self.app.environment == "development"

    def is_production(self) -> bool:
        return self.app.environment == "production"

    def is_testing(self) -> bool:
        return self.app.environment == "testing"

    def get_environment_info(self) -> dict[str, Any]:
        return {
            "environment": self.app.environment,
            "version": self.app.version,
            "debug": self.app.debug,
            "database_backend": self.database.backend,
            "logging_level": self.logging.level,
            "diagnosis_mode": self.app.diagnosis_mode,
            "features": {"data_export": self.app.enable_data_export},
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def load_settings_from_file(file_path: str) -> Settings:
    """
    Load settings from a JSON file of ``{"section": {"key": value}}`` entries.

    Each entry is exported as ``SECTION_KEY`` before the settings cache is rebuilt,
    so the file uses the same prefixes as the environment (``app``, ``db``, ``log``).

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not JSON
        ConfigurationError: If a value in the file fails validation
    """
    config_path = Path(file_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

    config_data = json.loads(config_path.read_text(encoding="utf-8"))
    for section, values in config_data.items():
        if isinstance(values, dict):
            for key, value in values.items():
                os.environ[f"{section.upper()}_{key.upper()}"] = str(value)

    get_settings.cache_clear()
    settings = get_settings()
    for section in ("app", "database", "logging"):
        try:
            getattr(settings, section)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid {section} settings in {file_path}: {e}", config_key=section
            ) from e
    return settings


def override_settings(**kwargs: Any) -> Settings:
    """
    Override settings through environment variables, e.g. in tests.

    Example:
        >>> override_settings(app_environment="testing", db_sqlite_path=":memory:")
    """
    for key, value in kwargs.items():
        os.environ[key.upper()] = str(value)

    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    get_settings.cache_clear()
