"""HTTP(S) transport for Kopano core SOAP endpoints."""

from __future__ import annotations

import logging
import socket
import ssl
from collections.abc import Callable
from typing import Any
from urllib.parse import urlsplit

import aiohttp

from ..config import KCCConfig
from ..errors import (
    KCCConnectionError,
    KCCResponseError,
    KCCTimeout,
    KCCUsageError,
)
from ..protocol import SOAP_CONTENT_TYPE, soap_envelope
from ..tls import load_x509_key_pair, new_client_ssl_context
from .base import USER_AGENT, KCCTransport

_LOGGER = logging.getLogger(__name__)


def _keepalive_socket_factory(interval: float) -> Callable[[Any], socket.socket]:
    """Create a connector socket factory enabling TCP keep-alive probes."""
    seconds = max(1, int(interval))

    def factory(addr_info: Any) -> socket.socket:
        family, type_, proto, _, _ = addr_info
        sock = socket.socket(family=family, type=type_, proto=proto)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
        if hasattr(socket, "TCP_KEEPIDLE"):
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, seconds)
        if hasattr(socket, "TCP_KEEPINTVL"):
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, seconds)
        return sock

    return factory


class KCCHttpTransport(KCCTransport):
    """SOAP over HTTP(S) using a shared, pooled aiohttp session."""

    def __init__(
        self,
        uri: str,
        *,
        config: KCCConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._uri = uri
        self._config = config or KCCConfig()
        self._session = session
        self._owns_session = session is None
        self._secure = urlsplit(uri).scheme == "https"
        self._ssl_context: ssl.SSLContext | None = None
        if self._secure:
            self._ssl_context = new_client_ssl_context(
                insecure_skip_verify=self._config.http_insecure_skip_verify
            )

    def __str__(self) -> str:
        return f"KCCHttpTransport({self._uri})"

    @property
    def uri(self) -> str:
        """Server endpoint URI."""
        return self._uri

    @property
    def secure(self) -> bool:
        return self._secure

    @property
    def ssl_context(self) -> ssl.SSLContext | None:
        """TLS configuration applied to requests, None for http:// URIs."""
        return self._ssl_context

    def set_ssl_context(self, context: ssl.SSLContext) -> None:
        if not self._secure:
            super().set_ssl_context(context)
        self._ssl_context = context

    def set_x509_key_pair(self, cert_file: str, key_file: str) -> None:
        """Load a client certificate into the transport's TLS configuration."""
        if self._ssl_context is None:
            raise KCCUsageError(
                f"{self} does not use TLS, a https:// uri is required for TLS client auth"
            )
        load_x509_key_pair(cert_file, key_file, self._ssl_context)
        _LOGGER.info("[%s] Using TLS client certificate for server auth", self)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            cfg = self._config
            connector = aiohttp.TCPConnector(
                limit=cfg.http_max_idle_conns,
                limit_per_host=cfg.http_max_idle_conns_per_host,
                keepalive_timeout=cfg.http_idle_conn_timeout,
                socket_factory=_keepalive_socket_factory(cfg.http_keepalive),
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(
                    total=cfg.http_timeout,
                    sock_connect=cfg.http_dial_timeout,
                ),
                trust_env=True,
            )
            if cfg.debug:
                _LOGGER.debug(
                    "[%s] HTTP client: timeout=%ss dial=%ss keepalive=%ss "
                    "pool=%d/%d idle=%ss",
                    self,
                    cfg.http_timeout,
                    cfg.http_dial_timeout,
                    cfg.http_keepalive,
                    cfg.http_max_idle_conns,
                    cfg.http_max_idle_conns_per_host,
                    cfg.http_idle_conn_timeout,
                )
        return self._session

    async def send(self, payload: str, *, timeout: float | None = None) -> bytes:
        session = self._get_session()
        body = soap_envelope(payload)
        headers = {
            "Content-Type": SOAP_CONTENT_TYPE,
            "User-Agent": USER_AGENT,
        }
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(
                total=timeout,
                sock_connect=self._config.http_dial_timeout,
            )
        if self._ssl_context is not None:
            kwargs["ssl"] = self._ssl_context

        if self._config.debug:
            _LOGGER.debug("[%s] SOAP request: %d bytes", self, len(body))

        try:
            async with session.post(
                self._uri,
                data=body,
                headers=headers,
                **kwargs,
            ) as resp:
                if resp.status != 200:
                    raise KCCResponseError(
                        resp.status, f"Unexpected http response status: {resp.status}"
                    )
                data: bytes = await resp.read()
        except TimeoutError as err:
            raise KCCTimeout("SOAP request timed out") from err
        except aiohttp.ClientError as err:
            raise KCCConnectionError(f"SOAP request failed: {err}") from err

        if self._config.debug:
            _LOGGER.debug("[%s] SOAP response: %d bytes", self, len(data))
        return data

    async def close(self) -> None:
        """Close the HTTP session unless it was provided by the caller."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
