"""Configuration management for the spreadsheet viewer.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SV_ prefix, or via a .env file in the project root.

Environment Variables:
    SV_MAX_FILE_SIZE_MB: Maximum upload size in MB (default: 10)
    SV_MAX_ROWS: Optional cap on rows read per sheet
    SV_MAX_COLUMNS: Optional cap on columns read per sheet
    SV_LAYOUT_HEADER_ROW_INDEX: Grid row holding column titles (default: 0)
    SV_LAYOUT_LABEL_COLUMN_INDEX: Grid column holding row labels (default: 1)
    SV_LAYOUT_DATA_START_COLUMN_INDEX: First data column (default: 2)
    SV_ANCHOR_RANGE_AT_ORIGIN: Start occupied ranges at A1 (default: true)
    SV_SESSION_TTL_MINUTES: Idle time before a view session expires (default: 60)
    SV_SESSION_COOKIE_NAME: Cookie carrying the session ID (default: sv_session)
    SV_LOG_LEVEL: Logging level (default: INFO)
    SV_DEBUG: Enable debug mode (default: false)
    SV_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SV_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SV_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spreadsheet_viewer.workbook_document import SheetLayout


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        SV_LOG_LEVEL=DEBUG
        SV_LAYOUT_DATA_START_COLUMN_INDEX=1
    """

    model_config = SettingsConfigDict(
        env_prefix="SV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Upload Settings
    # =========================================================================

    max_file_size_mb: int = 10
    """Maximum upload size in megabytes."""

    max_rows: int | None = None
    """Optional cap on the number of rows read from each sheet."""

    max_columns: int | None = None
    """Optional cap on the number of columns read from each sheet."""

    # =========================================================================
    # Sheet Layout Settings
    # =========================================================================

    layout_header_row_index: int = 0
    """Dense grid row that holds the column titles."""

    layout_label_column_index: int = 1
    """Dense grid column that holds each row's label."""

    layout_data_start_column_index: int = 2
    """First dense grid column holding data."""

    anchor_range_at_origin: bool = True
    """Extend each sheet's occupied range to start at cell A1."""

    # =========================================================================
    # Session Settings
    # =========================================================================

    session_ttl_minutes: int = 60
    """Idle minutes before a view session is discarded."""

    session_cookie_name: str = "sv_session"
    """Name of the cookie that carries the view session ID."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging and error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 200:
            raise ValueError(f"max_file_size_mb must be between 1 and 200, got {v}")
        return v

    @field_validator("max_rows", "max_columns")
    @classmethod
    def validate_read_caps(cls, v: int | None) -> int | None:
        """Validate optional read caps are positive."""
        if v is not None and v < 1:
            raise ValueError(f"Read caps must be at least 1, got {v}")
        return v

    @field_validator(
        "layout_header_row_index",
        "layout_label_column_index",
        "layout_data_start_column_index",
    )
    @classmethod
    def validate_layout_index(cls, v: int) -> int:
        """Validate layout indices are non-negative."""
        if v < 0:
            raise ValueError(f"Layout indices must be non-negative, got {v}")
        return v

    @field_validator("session_ttl_minutes")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        """Validate session TTL is positive."""
        if v < 1:
            raise ValueError(f"session_ttl_minutes must be at least 1, got {v}")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def session_ttl_seconds(self) -> int:
        """Get session TTL in seconds."""
        return self.session_ttl_minutes * 60

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    @property
    def sheet_layout(self) -> SheetLayout:
        """Get the configured layout descriptor."""
        return SheetLayout(
            header_row_index=self.layout_header_row_index,
            label_column_index=self.layout_label_column_index,
            data_start_column_index=self.layout_data_start_column_index,
        )

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for diagnostics."""
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "max_rows": self.max_rows,
            "max_columns": self.max_columns,
            "layout_header_row_index": self.layout_header_row_index,
            "layout_label_column_index": self.layout_label_column_index,
            "layout_data_start_column_index": self.layout_data_start_column_index,
            "anchor_range_at_origin": self.anchor_range_at_origin,
            "session_ttl_minutes": self.session_ttl_minutes,
            "session_cookie_name": self.session_cookie_name,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Logs warnings for configurations that work but are likely mistakes.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.layout_label_column_index >= s.layout_data_start_column_index:
        logger.warning(
            "Label column is not left of the data columns "
            f"(label={s.layout_label_column_index}, "
            f"data_start={s.layout_data_start_column_index}). "
            "Row labels may be repeated inside the data."
        )

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"max_file_size_mb={s.max_file_size_mb}, "
        f"session_ttl_minutes={s.session_ttl_minutes}"
    )


settings = Settings()
