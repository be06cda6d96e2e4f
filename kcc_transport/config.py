"""Client configuration.

All tunables live in one :class:`KCCConfig` value which is built once at
startup (usually through :meth:`KCCConfig.from_env`) and handed to the
client. Nothing in this package reads the environment on import.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

from . import __version__

_LOGGER = logging.getLogger(__name__)

DEFAULT_URI = "http://127.0.0.1:236"
DEFAULT_CLIENT_APP_NAME = "kcc-transport"

_TRUE_VALUES = frozenset({"on", "true", "yes", "1"})
_FALSE_VALUES = frozenset({"off", "false", "no", "0"})

# Environment variable per configuration field.
ENV_VARIABLES: dict[str, str] = {
    "uri": "KOPANO_SERVER_DEFAULT_URI",
    "http_timeout": "KCC_HTTP_TIMEOUT",
    "http_max_idle_conns": "KCC_HTTP_MAX_IDLE_CONNS",
    "http_max_idle_conns_per_host": "KCC_HTTP_MAX_IDLE_CONNS_PER_HOST",
    "http_idle_conn_timeout": "KCC_HTTP_IDLE_CONN_TIMEOUT",
    "http_dial_timeout": "KCC_HTTP_DIAL_TIMEOUT",
    "http_keepalive": "KCC_HTTP_KEEPALIVE",
    "http_insecure_skip_verify": "KCC_HTTP_INSECURE_SKIP_VERIFY",
    "socket_timeout": "KCC_SOCKET_TIMEOUT",
    "session_refresh_interval": "KCC_SESSION_REFRESH_INTERVAL",
    "debug": "KCC_DEBUG",
}


@dataclass(frozen=True)
class KCCConfig:
    """Configuration for clients, transports and sessions.

    Attributes:
        uri: Server URI used when a client is created without one. Supports
            http://, https:// and file:// (Unix socket path).
        http_timeout: Overall HTTP request timeout (seconds)
        http_max_idle_conns: Connection pool size across all hosts
        http_max_idle_conns_per_host: Connection pool size per host
        http_idle_conn_timeout: Seconds a pooled connection may stay idle
        http_dial_timeout: TCP connect timeout (seconds)
        http_keepalive: TCP keep-alive probe interval (seconds)
        http_insecure_skip_verify: Disable TLS certificate and hostname
            validation. Only meant for test and debug setups.
        socket_timeout: Read and write deadline for Unix socket requests
        session_refresh_interval: Interval of the session keep-alive refresh
        debug: Log request and transport details at debug level
        client_app_name: Client application name sent at logon
        client_app_version: Client application version sent at logon
    """

    uri: str = DEFAULT_URI
    http_timeout: float = 10.0
    http_max_idle_conns: int = 100
    http_max_idle_conns_per_host: int = 100
    http_idle_conn_timeout: float = 90.0
    http_dial_timeout: float = 30.0
    http_keepalive: float = 120.0
    http_insecure_skip_verify: bool = False
    socket_timeout: float = 30.0
    session_refresh_interval: float = 300.0
    debug: bool = False
    client_app_name: str = DEFAULT_CLIENT_APP_NAME
    client_app_version: str = __version__

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> KCCConfig:
        """Build a configuration from environment variables.

        Unset variables keep their defaults. Values which cannot be parsed
        are logged and ignored.
        """
        if environ is None:
            environ = os.environ

        overrides: dict[str, Any] = {}
        for field in fields(cls):
            name = ENV_VARIABLES.get(field.name)
            if name is None:
                continue
            raw = environ.get(name)
            if not raw:
                continue
            value = _parse_value(field.default, raw)
            if value is None:
                _LOGGER.warning("Ignoring invalid value %r for %s", raw, name)
                continue
            overrides[field.name] = value

        return replace(cls(), **overrides)


def _parse_value(default: Any, raw: str) -> Any:
    """Parse raw according to the type of default, None when invalid."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        return None
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return None
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError:
            return None
    return raw
