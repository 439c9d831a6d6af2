"""
Константы send pipeline: имена заголовков, коды ошибок, сообщения.
"""

from enum import Enum, IntFlag

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HEADERS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class Headers:
    """Well-known header names."""

    FEATURE_FLAG = "FeatureFlag"
    THROW_SITE = "X-ThrowSite"
    LOCATION = "Location"
    HOST = "Host"
    REQUEST_ID = "request-id"
    CLIENT_REQUEST_ID = "client-request-id"
    AUTHORIZATION = "Authorization"
    BEARER = "Bearer"


class FeatureFlag(IntFlag):
    """
    Битовая маска компонентов, участвующих в запросе.

    Отправляется в заголовке FeatureFlag для телеметрии на стороне сервиса.
    """

    NONE = 0
    REDIRECT_HANDLER = 0x00000001
    RETRY_HANDLER = 0x00000002
    AUTH_HANDLER = 0x00000004
    DEFAULT_HTTP_PROVIDER = 0x00000008
    LOGGING_HANDLER = 0x00000010
    SERVICE_DISCOVERY_HANDLER = 0x00000020
    COMPRESSION_HANDLER = 0x00000040
    CONNECTION_POOL_MANAGER = 0x00000080
    LONG_RUNNING_OPERATION_HANDLER = 0x00000100


def format_feature_flag(flags: FeatureFlag) -> str:
    """Render flags as the 8-digit hex header value."""
    return f"{int(flags):08x}"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ERROR CODES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ErrorCode(str, Enum):
    """
    Классификация ошибок.

    Значения - строки, т.к. сервис может вернуть в теле ошибки
    произвольный код, которого нет в этом списке.
    """

    ACCESS_DENIED = "accessDenied"
    ACTIVITY_LIMIT_REACHED = "activityLimitReached"
    GENERAL_EXCEPTION = "generalException"
    INVALID_RANGE = "invalidRange"
    INVALID_REQUEST = "invalidRequest"
    ITEM_NOT_FOUND = "itemNotFound"
    NAME_ALREADY_EXISTS = "nameAlreadyExists"
    NOT_ALLOWED = "notAllowed"
    NOT_SUPPORTED = "notSupported"
    QUOTA_LIMIT_REACHED = "quotaLimitReached"
    RESOURCE_LOCKED = "resourceLocked"
    RESOURCE_MODIFIED = "resourceModified"
    SERVICE_NOT_AVAILABLE = "serviceNotAvailable"
    TIMEOUT = "timeout"
    TOO_MANY_REDIRECTS = "tooManyRedirects"
    UNAUTHENTICATED = "unauthenticated"

    def __str__(self) -> str:
        return self.value


class ErrorMessages:
    """User-facing failure messages."""

    PROVIDER_DISPOSED = "The provider has been disposed and can no longer be used."
    UNEXPECTED_EXCEPTION_ON_SEND = "An error occurred sending the request."
    REQUEST_TIMED_OUT = "The request timed out."
    LOCATION_HEADER_NOT_SET_ON_REDIRECT = "Redirect response is missing a valid location header."
    TOO_MANY_REDIRECTS_FORMAT = "More than {0} redirects were followed."


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# DEFAULTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

DEFAULT_MAX_REDIRECTS = 5
DEFAULT_REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})
