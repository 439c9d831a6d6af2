"""
Система конфигурации send pipeline.

Все конфиги immutable (frozen dataclasses) - один экземпляр провайдера
обслуживает параллельные вызовы.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union, TYPE_CHECKING

from .constants import DEFAULT_MAX_REDIRECTS, DEFAULT_REDIRECT_STATUS_CODES, FeatureFlag
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .logging import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов транспорта.

    Сам pipeline таймаутов не придумывает - они передаются в httpx.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)
        write: Таймаут записи тела запроса (сек)
        pool: Ожидание свободного соединения из пула (сек)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
        >>> TimeoutConfig(connect=3, read=100, pool=10)
    """
    connect: float = 5.0
    read: float = 100.0
    write: Optional[float] = None
    pool: Optional[float] = None

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ConfigurationError("connect timeout must be positive")
        if self.read <= 0:
            raise ConfigurationError("read timeout must be positive")
        if self.write is not None and self.write <= 0:
            raise ConfigurationError("write timeout must be positive")
        if self.pool is not None and self.pool <= 0:
            raise ConfigurationError("pool timeout must be positive")

    def as_tuple(self) -> Tuple[float, float]:
        """Вернуть как (connect, read)."""
        return (self.connect, self.read)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REDIRECT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(frozen=True)
class RedirectConfig:
    """
    Конфигурация ручной обработки редиректов.

    Args:
        max_redirects: Сколько редиректов можно пройти за один вызов
        redirect_status_codes: Статусы, которые считаются редиректом

    Examples:
        >>> RedirectConfig(max_redirects=10)
        >>> RedirectConfig(redirect_status_codes=frozenset({302, 307}))
    """
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    redirect_status_codes: FrozenSet[int] = DEFAULT_REDIRECT_STATUS_CODES

    def __post_init__(self):
        """Валидация."""
        if self.max_redirects < 0:
            raise ConfigurationError("max_redirects must be non-negative")

        codes = frozenset(self.redirect_status_codes)
        for code in codes:
            if not 300 <= code < 400:
                raise ConfigurationError(f"redirect status code must be 3xx, got {code}")
        object.__setattr__(self, 'redirect_status_codes', codes)

    def is_redirect(self, status_code: int) -> bool:
        return status_code in self.redirect_status_codes


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _freeze_dict(d: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    """
    Convert dict to immutable MappingProxyType.

    Example:
        >>> frozen = _freeze_dict({"SdkVersion": "graph-python/1.0"})
        >>> frozen["X-New"] = "value"  # Raises TypeError
    """
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class ProviderConfig:
    """
    Главная конфигурация SimpleHTTPProvider и HTTPXTransport.

    Args:
        headers: Заголовки по умолчанию для транспорта
        timeout: Конфигурация таймаутов
        redirect: Конфигурация редиректов
        verify_ssl: Проверять SSL сертификаты
        max_connections: Максимум соединений в пуле httpx
        max_keepalive_connections: Максимум keep-alive соединений
        feature_flags: Значение заголовка FeatureFlag
        logging: Конфигурация логирования (None = без логов)

    Examples:
        >>> config = ProviderConfig()
        >>> config = ProviderConfig.create(max_redirects=10, timeout=60)
    """
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    redirect: RedirectConfig = field(default_factory=RedirectConfig)
    verify_ssl: bool = True
    max_connections: int = 100
    max_keepalive_connections: int = 20
    feature_flags: FeatureFlag = FeatureFlag.DEFAULT_HTTP_PROVIDER
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Freeze headers and validate pool limits."""
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))

        if self.max_connections <= 0:
            raise ConfigurationError("max_connections must be positive")
        if self.max_keepalive_connections < 0:
            raise ConfigurationError("max_keepalive_connections must be non-negative")

    @classmethod
    def create(
        cls,
        timeout: Union[float, Tuple[float, float], TimeoutConfig] = 100,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        redirect_status_codes: Optional[Iterable[int]] = None,
        headers: Optional[Dict[str, str]] = None,
        verify_ssl: bool = True,
        logging: Optional['LoggingConfig'] = None,
        **kwargs
    ) -> 'ProviderConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            timeout: Таймаут (число = read, (connect, read) или TimeoutConfig)
            max_redirects: Лимит редиректов
            redirect_status_codes: Статусы-редиректы (None = 301/302/303/307/308)
            headers: Заголовки
            verify_ssl: Проверять SSL
            logging: Конфигурация логирования

        Returns:
            ProviderConfig instance

        Examples:
            >>> config = ProviderConfig.create(timeout=(5, 60), max_redirects=3)
        """
        redirect_kwargs = {'max_redirects': max_redirects}
        if redirect_status_codes is not None:
            redirect_kwargs['redirect_status_codes'] = frozenset(redirect_status_codes)

        return cls(
            headers=headers or {},
            timeout=_to_timeout_config(timeout),
            redirect=RedirectConfig(**redirect_kwargs),
            verify_ssl=verify_ssl,
            logging=logging,
            **kwargs
        )

    def with_timeout(self, timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> 'ProviderConfig':
        """Создать новый конфиг с изменённым timeout."""
        return replace(self, timeout=_to_timeout_config(timeout))

    def with_max_redirects(self, max_redirects: int) -> 'ProviderConfig':
        """Создать новый конфиг с другим лимитом редиректов."""
        return replace(self, redirect=replace(self.redirect, max_redirects=max_redirects))

    def with_headers(self, headers: Dict[str, str]) -> 'ProviderConfig':
        """
        Создать новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"SdkVersion": "graph-python/1.0"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=_freeze_dict(merged))


def _to_timeout_config(timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> TimeoutConfig:
    if isinstance(timeout, TimeoutConfig):
        return timeout
    if isinstance(timeout, tuple):
        return TimeoutConfig(connect=timeout[0], read=timeout[1])
    return TimeoutConfig(read=timeout)
