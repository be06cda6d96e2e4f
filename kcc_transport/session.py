"""Kopano core server sessions.

A :class:`KCCSession` wraps a server session ID obtained through logon and
keeps it alive by refreshing it periodically in a background task until it
is destroyed. States are strictly Initializing -> Active -> Destroyed; a
destroyed session never becomes active again, create a new one instead.

Destruction happens through :meth:`KCCSession.destroy`, through a failed
refresh, or when the optional ``shutdown`` event given at creation is set.
All three paths may race, only the first one has any effect.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from types import TracebackType

from .client import KCC
from .codes import KCError
from .errors import (
    KCCClientError,
    KCCDecodeError,
    KCCProtocolError,
    KCCSessionEnded,
)
from .flags import SSOType
from .models import LogonResponse

_LOGGER = logging.getLogger(__name__)

# Username resolved by the refresh request. It always exists on the server.
REFRESH_USERNAME = "SYSTEM"


class KCCSession:
    """Session on a Kopano core server which is refreshed until destroyed.

    Usage:
        session = await KCCSession.create(client, "user1", "pass")
        resp = await client.get_user(entry_id, session.id)
        await session.destroy()
    """

    def __init__(
        self,
        client: KCC,
        session_id: int,
        server_guid: str,
        *,
        refresh_interval: float | None = None,
        shutdown: asyncio.Event | None = None,
    ) -> None:
        """Initialize an active session from an existing logon.

        Prefer :meth:`create`, which performs the logon and validates the
        result. The refresh task starts with :meth:`start`.

        Args:
            client: Client used for refresh and logoff requests
            session_id: Server assigned session ID
            server_guid: Server GUID returned at logon
            refresh_interval: Refresh interval (seconds), defaults to the
                client's configured session_refresh_interval
            shutdown: Governing event, the session ends when it is set
        """
        self._client = client
        self._id = session_id
        self._server_guid = server_guid
        if refresh_interval is None:
            refresh_interval = client.config.session_refresh_interval
        self._refresh_interval = refresh_interval
        self._shutdown = shutdown

        # Liveness flag, readers may live on other threads.
        self._lock = threading.Lock()
        self._active = True
        self._closed = asyncio.Event()
        self._refresh_task: asyncio.Task[None] | None = None

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    async def create(
        cls,
        client: KCC,
        username: str,
        password: str,
        *,
        logon_flags: int = 0,
        refresh_interval: float | None = None,
        shutdown: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> KCCSession:
        """Log on and return the new, automatically refreshed session.

        Raises:
            KCCLogonFailed: The server rejected the credentials.
            KCCProtocolError: The server returned another error code.
            KCCDecodeError: The logon result carries no usable session.
            KCCClientError: Transport failures are propagated unchanged.
        """
        resp = await client.logon(username, password, logon_flags, timeout=timeout)
        return cls._from_logon(
            client, resp, refresh_interval=refresh_interval, shutdown=shutdown
        )

    @classmethod
    async def create_sso(
        cls,
        client: KCC,
        sso_type: SSOType | str,
        username: str,
        sso_input: bytes,
        *,
        session_id: int = 0,
        refresh_interval: float | None = None,
        shutdown: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> KCCSession:
        """Log on through single sign on and return the new session."""
        resp = await client.sso_logon(
            sso_type, username, sso_input, session_id, timeout=timeout
        )
        return cls._from_logon(
            client, resp, refresh_interval=refresh_interval, shutdown=shutdown
        )

    @classmethod
    def _from_logon(
        cls,
        client: KCC,
        resp: LogonResponse,
        *,
        refresh_interval: float | None,
        shutdown: asyncio.Event | None,
    ) -> KCCSession:
        resp.raise_for_error()
        if resp.session_id == 0:
            raise KCCDecodeError("Create session logon returned invalid session ID")
        if not resp.server_guid:
            raise KCCDecodeError("Create session logon returned invalid server GUID")

        session = cls(
            client,
            resp.session_id,
            resp.server_guid,
            refresh_interval=refresh_interval,
            shutdown=shutdown,
        )
        session.start()
        _LOGGER.info("[%s] Session created on %s", session, client)
        return session

    def start(self) -> None:
        """Start the background refresh task."""
        if self._refresh_task is not None or not self.is_active:
            return
        self._refresh_task = asyncio.create_task(
            self._refresh_loop(), name=f"{self} refresh"
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        return f"KCCSession({self._id})"

    @property
    def id(self) -> int:
        """Server assigned session ID."""
        return self._id

    @property
    def server_guid(self) -> str:
        return self._server_guid

    @property
    def client(self) -> KCC:
        return self._client

    @property
    def is_active(self) -> bool:
        """True until the session is destroyed or a refresh failed."""
        with self._lock:
            return self._active

    @property
    def closed(self) -> asyncio.Event:
        """Lifetime event of the session, set once it is destroyed."""
        return self._closed

    def ensure_active(self) -> None:
        """Raise KCCSessionEnded if the session was destroyed."""
        if not self.is_active:
            raise KCCSessionEnded(
                KCError.KCERR_END_OF_SESSION, f"{self} is destroyed"
            )

    async def destroy(self, *, logoff: bool = True, timeout: float | None = None) -> None:
        """Stop refreshing and log the session off at the server.

        Only the first call has any effect, later or concurrent calls return
        immediately.

        Args:
            logoff: Send a logoff request. Skip it when the server already
                reported the session as ended.
            timeout: Deadline for the logoff request (seconds).

        Raises:
            KCCProtocolError: The logoff request returned an error code.
            KCCClientError: The logoff request failed.
        """
        with self._lock:
            if not self._active:
                return
            self._active = False

        self._closed.set()
        task = self._refresh_task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        _LOGGER.info("[%s] Session destroyed", self)

        if not logoff:
            return
        resp = await self._client.logoff(self._id, timeout=timeout)
        if not resp.ok:
            raise KCCProtocolError(resp.er, "Logoff session logoff error")

    async def wait_closed(self) -> None:
        """Wait until the session is destroyed and its refresh task ended."""
        await self._closed.wait()
        task = self._refresh_task
        if task is not None and task is not asyncio.current_task():
            await asyncio.wait([task])

    async def __aenter__(self) -> KCCSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.destroy()

    # -------------------------------------------------------------------------
    # Internal: Refresh
    # -------------------------------------------------------------------------

    async def _refresh_loop(self) -> None:
        """Refresh loop - resolve a user at every interval until destroyed."""
        try:
            while await self._wait_tick():
                try:
                    await self._refresh()
                except KCCClientError as err:
                    _LOGGER.warning(
                        "[%s] Refresh failed, destroying session: %s", self, err
                    )
                    try:
                        await self.destroy()
                    except KCCClientError as logoff_err:
                        _LOGGER.error(
                            "[%s] Logoff after failed refresh failed: %s",
                            self,
                            logoff_err,
                        )
                    return
        except asyncio.CancelledError:
            _LOGGER.debug("[%s] Refresh cancelled", self)

    async def _wait_tick(self) -> bool:
        """Sleep one interval. Return False once destroyed or shut down."""
        waiters = [asyncio.ensure_future(self._closed.wait())]
        if self._shutdown is not None:
            waiters.append(asyncio.ensure_future(self._shutdown.wait()))
        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self._refresh_interval,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for waiter in waiters:
                waiter.cancel()

        if self._shutdown is not None and self._shutdown.is_set():
            _LOGGER.debug("[%s] Shutdown requested", self)
            await self.destroy(logoff=False)
            return False
        return not done

    async def _refresh(self) -> None:
        if not self.is_active:
            return
        resp = await self._client.resolve_username(REFRESH_USERNAME, self._id)
        if not resp.ok:
            raise KCCProtocolError(resp.er, "Refresh session resolveUsername error")
        _LOGGER.debug("[%s] Refreshed", self)
