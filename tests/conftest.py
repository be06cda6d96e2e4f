"""Pytest configuration and fixtures for kcc_transport tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from kcc_transport import KCC, KCCConfig
from kcc_transport.errors import KCCConnectionError
from kcc_transport.protocol import soap_envelope
from kcc_transport.transport import KCCTransport

SERVER_GUID = "b0b12a2c3d3c4b5a9a8b7c6d5e4f3a2b"


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(status: int = 200, read_data: bytes | None = None) -> AsyncMock:
    """Create a mock aiohttp response usable as ``async with session.post(...)``.

    Args:
        status: HTTP status code
        read_data: Data to return from read() call
    """
    response = AsyncMock()
    response.status = status
    if read_data is not None:
        response.read.return_value = read_data
    response.__aenter__.return_value = response
    response.__aexit__.return_value = None
    return response


# -----------------------------------------------------------------------------
# SOAP response documents
# -----------------------------------------------------------------------------


def soap_response(operation: str, content: str = "") -> bytes:
    """Wrap content in a ``<ns:{operation}Response>`` SOAP document."""
    return soap_envelope(f"<ns:{operation}Response>{content}</ns:{operation}Response>")


def logon_response(
    session_id: int = 0x1234, er: int = 0, server_guid: str = SERVER_GUID
) -> bytes:
    """Create a logon response document."""
    return soap_response(
        "logon",
        f"<er>{er}</er><ulSessionId>{session_id}</ulSessionId>"
        f"<sServerGuid>{server_guid}</sServerGuid>",
    )


def er_response(operation: str, er: int = 0) -> bytes:
    """Create a response document carrying only an error code."""
    return soap_response(operation, f"<er>{er}</er>")


def resolve_username_response(
    user_id: int = 2, er: int = 0, user_entry_id: str = "AAAA"
) -> bytes:
    """Create a resolveUsername response document."""
    return soap_response(
        "resolveUsername",
        f"<er>{er}</er><ulUserId>{user_id}</ulUserId><sUserId>{user_entry_id}</sUserId>",
    )


# -----------------------------------------------------------------------------
# Fake transport
# -----------------------------------------------------------------------------


class FakeTransport(KCCTransport):
    """In-memory transport answering with canned documents per operation.

    Queued results are consumed first, then the default for the operation is
    used. A queued exception is raised instead of answering.
    """

    def __init__(self) -> None:
        self.queued: dict[str, list[bytes | BaseException]] = {}
        self.defaults: dict[str, bytes | BaseException] = {}
        self.requests: list[tuple[str, str]] = []
        self.closed = False

    def __str__(self) -> str:
        return "FakeTransport"

    def queue(self, operation: str, *results: bytes | BaseException) -> None:
        self.queued.setdefault(operation, []).extend(results)

    def calls(self, operation: str) -> int:
        return sum(1 for name, _ in self.requests if name == operation)

    def payloads(self, operation: str) -> list[str]:
        return [payload for name, payload in self.requests if name == operation]

    async def send(self, payload: str, *, timeout: float | None = None) -> bytes:
        operation = payload[len("<ns:") : payload.index(">")]
        self.requests.append((operation, payload))

        pending = self.queued.get(operation)
        if pending:
            result = pending.pop(0)
        elif operation in self.defaults:
            result = self.defaults[operation]
        else:
            raise KCCConnectionError(f"No fake response for {operation}")

        if isinstance(result, BaseException):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Create a fake transport answering logon, logoff and refresh."""
    transport = FakeTransport()
    transport.defaults["logon"] = logon_response()
    transport.defaults["logoff"] = er_response("logoff")
    transport.defaults["resolveUsername"] = resolve_username_response()
    return transport


@pytest.fixture
def kcc_client(fake_transport: FakeTransport) -> KCC:
    """Create a client using the fake transport."""
    return KCC(
        "http://kopano.test:236",
        config=KCCConfig(session_refresh_interval=300.0),
        transport=fake_transport,
    )
