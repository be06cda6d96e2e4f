"""Client error types for Kopano core server interactions."""

from __future__ import annotations

from .codes import format_error


class KCCClientError(Exception):
    """Base error for Kopano client failures."""


class KCCTimeout(KCCClientError):
    """Timeout while communicating with the server."""


class KCCConnectionError(KCCClientError):
    """Network connection to the server failed."""


class KCCResponseError(KCCClientError):
    """HTTP response error from the server."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class KCCDecodeError(KCCClientError):
    """SOAP response could not be decoded."""


class KCCUsageError(KCCClientError):
    """Invalid combination of arguments or missing configuration."""


class KCCTLSError(KCCClientError):
    """TLS client certificate could not be loaded."""


class KCCProtocolError(KCCClientError):
    """Non-success error code returned by the server."""

    def __init__(self, code: int, message: str | None = None) -> None:
        text = format_error(code)
        super().__init__(f"{message}: {text}" if message else text)
        self.code = code


class KCCLogonFailed(KCCProtocolError):
    """Server refused the provided credentials."""


class KCCSessionEnded(KCCProtocolError):
    """Session is no longer valid on the server or was destroyed locally."""


class KCCEntryIDError(KCCClientError, ValueError):
    """Address book entry ID could not be decoded."""


class KCCUnsupportedVersion(KCCEntryIDError):
    """Address book entry ID uses an unknown layout version."""

    def __init__(self, version: int) -> None:
        super().__init__(f"ABEID unsupported version {version}")
        self.version = version
