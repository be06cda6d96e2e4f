"""Kopano core SOAP client."""

from __future__ import annotations

import logging
import ssl
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any

from .config import KCCConfig
from .errors import KCCUsageError
from .flags import DEFAULT_CLIENT_CAPABILITIES, MAPI_UNRESOLVED, SSOType
from .models import (
    ABResolveNamesResponse,
    GetUserResponse,
    LogoffResponse,
    LogonResponse,
    PropValue,
    ResolveUserResponse,
)
from .protocol import build_request
from .transport import KCCTransport, new_soap_transport

_LOGGER = logging.getLogger(__name__)

# Client protocol version announced at logon.
CLIENT_VERSION = "8.7.0"


class KCC:
    """Client for a Kopano core server.

    Holds the server URI, the transport and the client identification sent
    at logon. A single instance is safe to share between any number of
    concurrent requests and sessions.

    Usage:
        async with KCC("https://kopano.example:237", config=KCCConfig.from_env()) as c:
            resp = await c.logon("user1", "pass")
    """

    def __init__(
        self,
        uri: str | None = None,
        *,
        config: KCCConfig | None = None,
        transport: KCCTransport | None = None,
        capabilities: int = DEFAULT_CLIENT_CAPABILITIES,
    ) -> None:
        self.config = config or KCCConfig()
        self.uri = uri or self.config.uri
        self.capabilities = capabilities
        self._owns_transport = transport is None
        self.transport = transport or new_soap_transport(self.uri, self.config)

        self._client_app_name = self.config.client_app_name
        self._client_app_version = self.config.client_app_version
        self._client_app_set = False

    def __str__(self) -> str:
        return f"KCC({self.uri})"

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def client_app_name(self) -> str:
        return self._client_app_name

    @property
    def client_app_version(self) -> str:
        return self._client_app_version

    def set_client_app(self, name: str, version: str) -> None:
        """Set the application identification sent at logon.

        Raises:
            KCCUsageError: If the identification was already set.
        """
        if self._client_app_set:
            raise KCCUsageError("Client app identification can only be set once")
        self._client_app_name = name
        self._client_app_version = version
        self._client_app_set = True

    def set_ssl_context(self, context: ssl.SSLContext) -> None:
        """Replace the TLS configuration of the transport."""
        self.transport.set_ssl_context(context)

    def set_x509_key_pair(self, cert_file: str, key_file: str) -> None:
        """Use the PEM certificate and key pair for TLS client auth.

        Raises:
            KCCUsageError: If the transport does not use TLS.
            KCCTLSError: If the pair cannot be loaded.
        """
        set_pair = getattr(self.transport, "set_x509_key_pair", None)
        if set_pair is None or not self.transport.secure:
            raise KCCUsageError(
                f"{self} cannot use TLS client auth, a https:// uri is required"
            )
        set_pair(cert_file, key_file)

    # -------------------------------------------------------------------------
    # Protocol operations
    # -------------------------------------------------------------------------

    async def logon(
        self,
        username: str,
        password: str,
        logon_flags: int = 0,
        *,
        timeout: float | None = None,
    ) -> LogonResponse:
        """Create a session on the server using the provided credentials."""
        payload = build_request(
            "logon",
            [
                ("szUsername", username),
                ("szPassword", password),
                ("szImpersonateUser", None),
                ("ulCapabilities", self.capabilities),
                ("ulFlags", logon_flags),
                ("szClientApp", self._client_app_name),
                ("szClientAppVersion", self._client_app_version),
                ("clientVersion", CLIENT_VERSION),
            ],
        )
        _LOGGER.debug("[%s] logon %s", self, username)
        return await self.transport.do_request(payload, LogonResponse, timeout=timeout)

    async def sso_logon(
        self,
        sso_type: SSOType | str,
        username: str,
        sso_input: bytes,
        session_id: int = 0,
        logon_flags: int = 0,
        *,
        timeout: float | None = None,
    ) -> LogonResponse:
        """Create or continue a session with single sign on.

        The sso_input is prefixed with the mechanism tag of sso_type before it
        is sent. Logon flags have no slot in this request, passing any is a
        usage error and nothing is sent.
        """
        if logon_flags:
            raise KCCUsageError("Logon flags are not supported for SSO logon")
        prefix = SSOType(sso_type).value.encode("ascii")
        payload = build_request(
            "ssoLogon",
            [
                ("szUsername", username),
                ("lpInput", prefix + sso_input),
                ("szImpersonateUser", None),
                ("ulCapabilities", self.capabilities),
                ("szClientApp", self._client_app_name),
                ("szClientAppVersion", self._client_app_version),
                ("clientVersion", CLIENT_VERSION),
                ("ulSessionId", session_id),
            ],
        )
        _LOGGER.debug("[%s] ssoLogon %s (%s)", self, username, SSOType(sso_type).name)
        return await self.transport.do_request(payload, LogonResponse, timeout=timeout)

    async def logoff(
        self, session_id: int, *, timeout: float | None = None
    ) -> LogoffResponse:
        """Terminate the session on the server."""
        payload = build_request("logoff", [("ulSessionId", session_id)])
        return await self.transport.do_request(payload, LogoffResponse, timeout=timeout)

    async def resolve_username(
        self, username: str, session_id: int, *, timeout: float | None = None
    ) -> ResolveUserResponse:
        """Look up the user ID of username."""
        payload = build_request(
            "resolveUsername",
            [("lpszUsername", username), ("ulSessionId", session_id)],
        )
        return await self.transport.do_request(
            payload, ResolveUserResponse, timeout=timeout
        )

    async def get_user(
        self, user_entry_id: str, session_id: int, *, timeout: float | None = None
    ) -> GetUserResponse:
        """Fetch the detail meta data of the user with the given entry ID."""
        payload = build_request(
            "getUser",
            [("sUserId", user_entry_id), ("ulSessionId", session_id)],
        )
        return await self.transport.do_request(payload, GetUserResponse, timeout=timeout)

    async def resolve_names(
        self,
        props: Sequence[int],
        rows: Sequence[Mapping[int, Any]],
        session_id: int,
        *,
        row_flags: int = MAPI_UNRESOLVED,
        flags: int = 0,
        timeout: float | None = None,
    ) -> ABResolveNamesResponse:
        """Resolve address book entries.

        Args:
            props: Property tags to return for every resolved row.
            rows: One mapping of property tag to value per name to resolve,
                usually ``{PR_DISPLAY_NAME: name}``.
            session_id: Session to use.
            row_flags: Initial resolve state sent for every row.
            flags: Request flags.
        """
        row_set = [
            [PropValue(prop_tag=tag, value=value) for tag, value in row.items()]
            for row in rows
        ]
        payload = build_request(
            "abResolveNames",
            [
                ("ulSessionId", session_id),
                ("lpaPropTag", list(props)),
                ("lpsRowSet", row_set),
                ("lpaFlags", [row_flags] * len(row_set)),
                ("ulFlags", flags),
            ],
        )
        return await self.transport.do_request(
            payload, ABResolveNamesResponse, timeout=timeout
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        """Close the transport if it was created by this client."""
        if self._owns_transport:
            await self.transport.close()

    async def __aenter__(self) -> KCC:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
