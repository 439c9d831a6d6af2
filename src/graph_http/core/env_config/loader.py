"""
Build ProviderConfig from environment variables and .env files.
"""

from typing import Optional

from ..config import ProviderConfig, RedirectConfig, TimeoutConfig
from ..logging.config import LoggingConfig, LogFormat, LogLevel
from .validator import ProviderSettings


def load_from_env(env_file: Optional[str] = None, **overrides) -> ProviderConfig:
    """
    Load ProviderConfig from GRAPH_HTTP_* variables.

    Priority (highest to lowest):
    1. **overrides - explicit keyword arguments (ProviderSettings field names)
    2. Environment variables
    3. .env file
    4. Defaults

    Args:
        env_file: .env path (None = ".env" in the working directory)
        **overrides: Field values that win over the environment

    Returns:
        ProviderConfig instance

    Raises:
        pydantic.ValidationError: invalid values

    Example:
        >>> config = load_from_env(max_redirects=3)
        >>> config.redirect.max_redirects
        3
    """
    settings_kwargs = dict(overrides)
    if env_file is not None:
        settings_kwargs['_env_file'] = env_file
    settings = ProviderSettings(**settings_kwargs)

    logging_config = None
    if settings.log_enabled:
        logging_config = LoggingConfig(
            level=LogLevel(settings.log_level),
            format=LogFormat(settings.log_format),
            enable_console=settings.log_enable_console,
            enable_file=settings.log_enable_file,
            file_path=settings.log_file_path,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count,
        )

    return ProviderConfig(
        timeout=TimeoutConfig(
            connect=settings.timeout_connect,
            read=settings.timeout_read,
            write=settings.timeout_write,
            pool=settings.timeout_pool,
        ),
        redirect=RedirectConfig(
            max_redirects=settings.max_redirects,
            redirect_status_codes=frozenset(settings.redirect_status_codes),
        ),
        verify_ssl=settings.verify_ssl,
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_keepalive_connections,
        logging=logging_config,
    )
