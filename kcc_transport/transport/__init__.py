"""Transport layer for Kopano core SOAP requests.

Components:
- base: KCCTransport contract shared by all transports
- http: HTTP(S) transport using a pooled aiohttp session
- unix: Unix domain socket transport with HTTP response framing
"""

from __future__ import annotations

from urllib.parse import urlsplit

from ..config import KCCConfig
from ..errors import KCCUsageError
from .base import USER_AGENT, KCCTransport
from .http import KCCHttpTransport
from .unix import KCCSocketTransport, read_http_response


def new_soap_transport(uri: str, config: KCCConfig | None = None) -> KCCTransport:
    """Create the transport matching the scheme of uri.

    http:// and https:// use :class:`KCCHttpTransport`, file:// connects to
    the Unix socket at the URI path.

    Raises:
        KCCUsageError: If the scheme is not supported.
    """
    scheme = urlsplit(uri).scheme
    if scheme in ("http", "https"):
        return KCCHttpTransport(uri, config=config)
    if scheme == "file":
        return KCCSocketTransport(urlsplit(uri).path, config=config)
    raise KCCUsageError(f"Invalid scheme {scheme!r} for SOAP client")


__all__ = [
    "USER_AGENT",
    "KCCHttpTransport",
    "KCCSocketTransport",
    "KCCTransport",
    "new_soap_transport",
    "read_http_response",
]
