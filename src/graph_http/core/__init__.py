"""Core send pipeline модули."""

from .config import (
    TimeoutConfig,
    RedirectConfig,
    ProviderConfig,
)
from .constants import (
    ErrorCode,
    ErrorMessages,
    FeatureFlag,
    Headers,
    format_feature_flag,
)
from .exceptions import (
    ErrorPayload,
    ServiceFailure,
    ConfigurationError,
    STATUS_CODE_MAP,
    classify_status,
    classify_transport_exception,
)
from .cancellation import CancellationToken, run_cancellable
from .transport import CompletionOption, HTTPXTransport, Transport
from .http_provider import SimpleHTTPProvider

__all__ = [
    # Config
    "TimeoutConfig",
    "RedirectConfig",
    "ProviderConfig",
    # Constants
    "ErrorCode",
    "ErrorMessages",
    "FeatureFlag",
    "Headers",
    "format_feature_flag",
    # Errors
    "ErrorPayload",
    "ServiceFailure",
    "ConfigurationError",
    "STATUS_CODE_MAP",
    "classify_status",
    "classify_transport_exception",
    # Transport
    "CancellationToken",
    "run_cancellable",
    "CompletionOption",
    "HTTPXTransport",
    "Transport",
    # Provider
    "SimpleHTTPProvider",
]
