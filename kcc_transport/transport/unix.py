"""Unix domain socket transport.

The server accepts the bare SOAP envelope on its local socket and answers
with regular HTTP/1.x response framing. Every request dials a fresh
connection which is closed once the response has been read.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import KCCConfig
from ..errors import (
    KCCConnectionError,
    KCCResponseError,
    KCCTimeout,
)
from ..protocol import soap_envelope
from .base import KCCTransport

_LOGGER = logging.getLogger(__name__)

MAX_HEADER_LINES = 100


class KCCSocketTransport(KCCTransport):
    """SOAP over a local Unix domain socket."""

    def __init__(self, path: str, *, config: KCCConfig | None = None) -> None:
        self._path = path
        self._config = config or KCCConfig()
        self._timeout = self._config.socket_timeout

    def __str__(self) -> str:
        return f"KCCSocketTransport({self._path})"

    @property
    def path(self) -> str:
        """Filesystem path of the server socket."""
        return self._path

    async def send(self, payload: str, *, timeout: float | None = None) -> bytes:
        try:
            async with asyncio.timeout(timeout):
                return await self._round_trip(payload)
        except TimeoutError as err:
            raise KCCTimeout("SOAP request over unix socket timed out") from err

    async def _round_trip(self, payload: str) -> bytes:
        try:
            async with asyncio.timeout(self._timeout):
                reader, writer = await asyncio.open_unix_connection(self._path)
        except TimeoutError:
            # TimeoutError is an OSError, keep it for send().
            raise
        except OSError as err:
            raise KCCConnectionError(f"Failed to open unix socket: {err}") from err

        try:
            body = soap_envelope(payload)
            if self._config.debug:
                _LOGGER.debug("[%s] SOAP request: %d bytes", self, len(body))
            try:
                async with asyncio.timeout(self._timeout):
                    writer.write(body)
                    await writer.drain()
            except TimeoutError:
                raise
            except OSError as err:
                raise KCCConnectionError(
                    f"Unexpected unix socket write error: {err}"
                ) from err

            try:
                async with asyncio.timeout(self._timeout):
                    status, data = await read_http_response(reader)
            except TimeoutError:
                raise
            except OSError as err:
                raise KCCConnectionError(
                    f"Failed to read from unix socket: {err}"
                ) from err
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as err:
                _LOGGER.debug("[%s] Error closing unix socket: %s", self, err)

        if status != 200:
            raise KCCResponseError(status, f"Unexpected http response status: {status}")
        if self._config.debug:
            _LOGGER.debug("[%s] SOAP response: %d bytes", self, len(data))
        return data


async def read_http_response(reader: asyncio.StreamReader) -> tuple[int, bytes]:
    """Read one HTTP/1.x response, returning its status code and body.

    The body is delimited by chunked transfer encoding, Content-Length or
    the end of the stream, in that order of precedence.

    Raises:
        KCCResponseError: The response framing is malformed or truncated.
    """
    status_line = await _readline(reader, 0)
    if not status_line:
        raise KCCResponseError(0, "Empty response from unix socket")
    parts = status_line.decode("latin-1").rstrip("\r\n").split(" ", 2)
    if len(parts) < 2 or not parts[0].startswith("HTTP/"):
        raise KCCResponseError(0, f"Malformed HTTP status line: {status_line!r}")
    try:
        status = int(parts[1])
    except ValueError as err:
        raise KCCResponseError(0, f"Malformed HTTP status code: {parts[1]!r}") from err

    headers: dict[str, str] = {}
    for _ in range(MAX_HEADER_LINES):
        line = await _readline(reader, status)
        if not line:
            raise KCCResponseError(status, "Unexpected end of HTTP headers")
        if line in (b"\r\n", b"\n"):
            break
        name, sep, value = line.decode("latin-1").partition(":")
        if not sep:
            raise KCCResponseError(status, f"Malformed HTTP header line: {line!r}")
        headers[name.strip().lower()] = value.strip()
    else:
        raise KCCResponseError(status, "Too many HTTP header lines")

    try:
        if "chunked" in headers.get("transfer-encoding", "").lower():
            body = await _read_chunked(reader, status)
        elif "content-length" in headers:
            try:
                length = int(headers["content-length"])
            except ValueError as err:
                raise KCCResponseError(
                    status, f"Malformed Content-Length: {headers['content-length']!r}"
                ) from err
            body = await reader.readexactly(length)
        else:
            body = await reader.read()
    except asyncio.IncompleteReadError as err:
        raise KCCResponseError(status, "Truncated HTTP response body") from err

    return status, body


async def _read_chunked(reader: asyncio.StreamReader, status: int) -> bytes:
    chunks: list[bytes] = []
    while True:
        size_line = await _readline(reader, status)
        if not size_line:
            raise KCCResponseError(status, "Unexpected end of chunked body")
        size_text = size_line.split(b";", 1)[0].strip()
        try:
            size = int(size_text, 16)
        except ValueError as err:
            raise KCCResponseError(status, f"Malformed chunk size: {size_text!r}") from err
        if size == 0:
            # Trailer section ends with an empty line.
            line = await _readline(reader, status)
            while line not in (b"\r\n", b"\n", b""):
                line = await _readline(reader, status)
            return b"".join(chunks)
        chunks.append(await reader.readexactly(size))
        await _readline(reader, status)


async def _readline(reader: asyncio.StreamReader, status: int) -> bytes:
    try:
        return await reader.readline()
    except (ValueError, asyncio.LimitOverrunError) as err:
        raise KCCResponseError(status, "HTTP response line too long") from err
