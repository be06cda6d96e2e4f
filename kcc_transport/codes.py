"""Kopano core protocol error codes.

Codes follow common/include/kopano/kcodes.h: success is zero, errors and
warnings carry the high bit and count up from one in declaration order.
"""

from __future__ import annotations

from enum import IntEnum

_ERROR_BIT = 1 << 31


class KCError(IntEnum):
    """Protocol error codes as returned in the ``er`` field of responses."""

    KCERR_NONE = 0
    KCERR_UNKNOWN = _ERROR_BIT | 1
    KCERR_NOT_FOUND = _ERROR_BIT | 2
    KCERR_NO_ACCESS = _ERROR_BIT | 3
    KCERR_NETWORK_ERROR = _ERROR_BIT | 4
    KCERR_SERVER_NOT_RESPONDING = _ERROR_BIT | 5
    KCERR_INVALID_TYPE = _ERROR_BIT | 6
    KCERR_DATABASE_ERROR = _ERROR_BIT | 7
    KCERR_COLLISION = _ERROR_BIT | 8
    KCERR_LOGON_FAILED = _ERROR_BIT | 9
    KCERR_HAS_MESSAGES = _ERROR_BIT | 10
    KCERR_HAS_FOLDERS = _ERROR_BIT | 11
    KCERR_HAS_RECIPIENTS = _ERROR_BIT | 12
    KCERR_HAS_ATTACHMENTS = _ERROR_BIT | 13
    KCERR_NOT_ENOUGH_MEMORY = _ERROR_BIT | 14
    KCERR_TOO_COMPLEX = _ERROR_BIT | 15
    KCERR_END_OF_SESSION = _ERROR_BIT | 16
    KCWARN_CALL_KEEPALIVE = _ERROR_BIT | 17
    KCERR_UNABLE_TO_ABORT = _ERROR_BIT | 18
    KCERR_NOT_IN_QUEUE = _ERROR_BIT | 19
    KCERR_INVALID_PARAMETER = _ERROR_BIT | 20
    KCWARN_PARTIAL_COMPLETION = _ERROR_BIT | 21
    KCERR_INVALID_ENTRYID = _ERROR_BIT | 22
    KCERR_BAD_VALUE = _ERROR_BIT | 23
    KCERR_NO_SUPPORT = _ERROR_BIT | 24
    KCERR_TOO_BIG = _ERROR_BIT | 25
    KCWARN_POSITION_CHANGED = _ERROR_BIT | 26
    KCERR_FOLDER_CYCLE = _ERROR_BIT | 27
    KCERR_STORE_FULL = _ERROR_BIT | 28
    KCERR_PLUGIN_ERROR = _ERROR_BIT | 29
    KCERR_UNKNOWN_OBJECT = _ERROR_BIT | 30
    KCERR_NOT_IMPLEMENTED = _ERROR_BIT | 31
    KCERR_DATABASE_NOT_FOUND = _ERROR_BIT | 32
    KCERR_INVALID_VERSION = _ERROR_BIT | 33
    KCERR_UNKNOWN_DATABASE = _ERROR_BIT | 34
    KCERR_NOT_INITIALIZED = _ERROR_BIT | 35
    KCERR_CALL_FAILED = _ERROR_BIT | 36
    KCERR_SSO_CONTINUE = _ERROR_BIT | 37
    KCERR_TIMEOUT = _ERROR_BIT | 38
    KCERR_INVALID_BOOKMARK = _ERROR_BIT | 39
    KCERR_UNABLE_TO_COMPLETE = _ERROR_BIT | 40
    KCERR_UNKNOWN_INSTANCE_ID = _ERROR_BIT | 41
    KCERR_IGNORE_ME = _ERROR_BIT | 42
    KCERR_BUSY = _ERROR_BIT | 43
    KCERR_OBJECT_DELETED = _ERROR_BIT | 44
    KCERR_USER_CANCEL = _ERROR_BIT | 45
    KCERR_UNKNOWN_FLAGS = _ERROR_BIT | 46
    KCERR_SUBMITTED = _ERROR_BIT | 47


KCSUCCESS = KCError.KCERR_NONE

_ERROR_TEXT: dict[int, str] = {
    KCError.KCERR_UNKNOWN: "Unknown",
    KCError.KCERR_NOT_FOUND: "Not Found",
    KCError.KCERR_NO_ACCESS: "No Access",
    KCError.KCERR_NETWORK_ERROR: "Network Error",
    KCError.KCERR_SERVER_NOT_RESPONDING: "Server Not Responding",
    KCError.KCERR_INVALID_TYPE: "Invalid Type",
    KCError.KCERR_DATABASE_ERROR: "Database Error",
    KCError.KCERR_LOGON_FAILED: "Logon Failed",
    KCError.KCERR_NOT_ENOUGH_MEMORY: "Not Enough Memory",
    KCError.KCERR_END_OF_SESSION: "End Of Session",
    KCError.KCERR_INVALID_PARAMETER: "Invalid Parameter",
    KCError.KCERR_INVALID_ENTRYID: "Invalid EntryID",
    KCError.KCERR_NO_SUPPORT: "No Support",
    KCError.KCERR_NOT_IMPLEMENTED: "Not Implemented",
    KCError.KCERR_SSO_CONTINUE: "SSO Continue",
    KCError.KCERR_TIMEOUT: "Timeout",
}


def error_text(code: int) -> str:
    """Return a text for the error code, or the empty string if unknown."""
    return _ERROR_TEXT.get(code, "")


def format_error(code: int) -> str:
    """Render an error code as ``"<text> (KC:0x<hex>)"``."""
    return f"{error_text(code)} (KC:0x{int(code):x})"


def is_session_ended(code: int) -> bool:
    """Return True if the code means the session is gone on the server."""
    return code == KCError.KCERR_END_OF_SESSION
