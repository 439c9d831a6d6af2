"""
Pydantic settings for configuring the provider from the environment.
"""

from typing import Literal, Optional, Set

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):
    """
    Provider configuration read from GRAPH_HTTP_* variables.

    Reads from:
    1. Environment variables (GRAPH_HTTP_*)
    2. .env file
    3. Defaults

    Example .env file:
        GRAPH_HTTP_MAX_REDIRECTS=5
        GRAPH_HTTP_REDIRECT_STATUS_CODES=[301, 302, 307, 308]
        GRAPH_HTTP_TIMEOUT_CONNECT=5
        GRAPH_HTTP_TIMEOUT_READ=100
        GRAPH_HTTP_LOG_LEVEL=DEBUG
        GRAPH_HTTP_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix='GRAPH_HTTP_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Redirects
    max_redirects: int = Field(default=5, ge=0, le=50)
    redirect_status_codes: Set[int] = Field(default_factory=lambda: {301, 302, 303, 307, 308})

    # Timeouts
    timeout_connect: float = Field(default=5.0, gt=0)
    timeout_read: float = Field(default=100.0, gt=0)
    timeout_write: Optional[float] = Field(default=None, gt=0)
    timeout_pool: Optional[float] = Field(default=None, gt=0)

    # Transport
    verify_ssl: bool = Field(default=True)
    max_connections: int = Field(default=100, ge=1)
    max_keepalive_connections: int = Field(default=20, ge=0)

    # Logging (log_enabled=False = provider без логгера)
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = Field(default=None, validate_default=True)
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)

    @field_validator('redirect_status_codes')
    @classmethod
    def validate_redirect_codes(cls, v: Set[int]) -> Set[int]:
        """Only 3xx statuses can be treated as redirects."""
        bad = sorted(code for code in v if not 300 <= code < 400)
        if bad:
            raise ValueError(f"redirect status codes must be 3xx, got {bad}")
        return v

    @field_validator('log_file_path')
    @classmethod
    def validate_file_path(cls, v: Optional[str], info) -> Optional[str]:
        """file_path is required when file logging is on."""
        if info.data.get('log_enable_file') and not v:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return v
