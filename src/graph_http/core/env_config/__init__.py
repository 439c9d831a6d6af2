"""
Environment-based configuration.

Example:
    >>> from graph_http.core.env_config import load_from_env
    >>> config = load_from_env(env_file=".env.production")
"""

from .loader import load_from_env
from .validator import ProviderSettings

__all__ = [
    "load_from_env",
    "ProviderSettings",
]
