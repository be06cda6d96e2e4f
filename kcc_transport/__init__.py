"""Kopano core SOAP client transport package."""

__version__ = "0.1.0"

from .abeid import ABEID, new_abeid_v1  # noqa: E402
from .client import KCC  # noqa: E402
from .codes import KCSUCCESS, KCError, error_text, format_error  # noqa: E402
from .config import KCCConfig  # noqa: E402
from .errors import (  # noqa: E402
    KCCClientError,
    KCCConnectionError,
    KCCDecodeError,
    KCCEntryIDError,
    KCCLogonFailed,
    KCCProtocolError,
    KCCResponseError,
    KCCSessionEnded,
    KCCTimeout,
    KCCTLSError,
    KCCUnsupportedVersion,
    KCCUsageError,
)
from .flags import SSOType  # noqa: E402
from .guid import MUIDECSAB, define_guid  # noqa: E402
from .session import KCCSession  # noqa: E402
from .tls import load_x509_key_pair  # noqa: E402
from .transport import (  # noqa: E402
    KCCHttpTransport,
    KCCSocketTransport,
    KCCTransport,
    new_soap_transport,
)

__all__ = [
    "ABEID",
    "KCC",
    "KCCClientError",
    "KCCConfig",
    "KCCConnectionError",
    "KCCDecodeError",
    "KCCEntryIDError",
    "KCCHttpTransport",
    "KCCLogonFailed",
    "KCCProtocolError",
    "KCCResponseError",
    "KCCSession",
    "KCCSessionEnded",
    "KCCSocketTransport",
    "KCCTLSError",
    "KCCTimeout",
    "KCCTransport",
    "KCCUnsupportedVersion",
    "KCCUsageError",
    "KCError",
    "KCSUCCESS",
    "MUIDECSAB",
    "SSOType",
    "__version__",
    "define_guid",
    "error_text",
    "format_error",
    "load_x509_key_pair",
    "new_abeid_v1",
    "new_soap_transport",
]
