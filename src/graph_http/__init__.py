"""graph-http-core - send pipeline for generated service SDK requests."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.http_provider import SimpleHTTPProvider
from .core.transport import CompletionOption, HTTPXTransport, Transport
from .core.cancellation import CancellationToken
from .core.config import ProviderConfig, RedirectConfig, TimeoutConfig
from .core.constants import ErrorCode, FeatureFlag, Headers
from .core.exceptions import (
    ConfigurationError,
    ErrorPayload,
    ServiceFailure,
    classify_status,
)
from .core.env_config import load_from_env
from .core.logging import LoggingConfig
from .serializer import JSONSerializer, Serializer

# Users can configure logging themselves using logging.getLogger('graph_http')
logging.getLogger('graph_http').addHandler(logging.NullHandler())

try:
    __version__ = version("graph-http-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__license__ = "MIT"

__all__ = [
    # Provider
    "SimpleHTTPProvider",
    "CompletionOption",
    "CancellationToken",

    # Transport
    "HTTPXTransport",
    "Transport",

    # Serializer
    "JSONSerializer",
    "Serializer",

    # Config
    "ProviderConfig",
    "RedirectConfig",
    "TimeoutConfig",
    "LoggingConfig",
    "load_from_env",

    # Errors
    "ServiceFailure",
    "ErrorPayload",
    "ErrorCode",
    "ConfigurationError",
    "classify_status",

    # Constants
    "FeatureFlag",
    "Headers",

    # Version
    "__version__",
]
