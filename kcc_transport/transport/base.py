"""Transport interface.

A transport carries one enveloped SOAP request to the server and returns
the raw response document. Decoding is shared by all transports.
"""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from types import TracebackType
from typing import TypeVar

from .. import __version__
from ..errors import KCCUsageError
from ..protocol import parse_soap_response

T = TypeVar("T")

USER_AGENT = f"kcc-transport/{__version__}"


class KCCTransport(ABC):
    """Minimal contract for a SOAP transport."""

    @abstractmethod
    async def send(self, payload: str, *, timeout: float | None = None) -> bytes:
        """Send payload wrapped in the SOAP envelope, return the response body.

        Args:
            payload: Request fragment for one remote procedure.
            timeout: Optional deadline for the whole round trip (seconds).

        Raises:
            KCCTimeout: The deadline elapsed.
            KCCConnectionError: The server could not be reached.
            KCCResponseError: Non-success status or broken response framing.
        """

    async def do_request(
        self,
        payload: str,
        response_type: type[T],
        *,
        timeout: float | None = None,
    ) -> T:
        """Send payload and decode the SOAP Body into response_type."""
        data = await self.send(payload, timeout=timeout)
        return parse_soap_response(data, response_type)

    @property
    def secure(self) -> bool:
        """Whether the transport uses TLS and accepts client certificates."""
        return False

    def set_ssl_context(self, context: ssl.SSLContext) -> None:
        """Replace the TLS configuration used for subsequent requests."""
        raise KCCUsageError(
            f"{self} does not use TLS, a https:// uri is required for TLS client auth"
        )

    async def close(self) -> None:
        """Release resources held by the transport."""

    async def __aenter__(self) -> KCCTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
