"""Tests for error codes and the error hierarchy."""

from __future__ import annotations

import pytest

from kcc_transport.codes import (
    KCSUCCESS,
    KCError,
    error_text,
    format_error,
    is_session_ended,
)
from kcc_transport.errors import (
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
from kcc_transport.models import LogoffResponse


class TestCodes:
    """Tests for KCError values and texts."""

    def test_values(self):
        """Test codes carry the high bit and count up from one."""
        assert KCSUCCESS == 0
        assert KCError.KCERR_UNKNOWN == 0x80000001
        assert KCError.KCERR_LOGON_FAILED == 0x80000009
        assert KCError.KCERR_END_OF_SESSION == 0x80000010
        assert KCError.KCERR_SUBMITTED == 0x8000002F

    def test_error_text(self):
        """Test known codes have a text and unknown codes an empty one."""
        assert error_text(KCError.KCERR_LOGON_FAILED) == "Logon Failed"
        assert error_text(0x12345) == ""

    def test_format_error(self):
        """Test codes render with text and hex value."""
        assert format_error(KCError.KCERR_NOT_FOUND) == "Not Found (KC:0x80000002)"
        assert format_error(0x7) == " (KC:0x7)"

    def test_is_session_ended(self):
        """Test only end of session counts as ended."""
        assert is_session_ended(KCError.KCERR_END_OF_SESSION)
        assert not is_session_ended(KCError.KCERR_LOGON_FAILED)


class TestHierarchy:
    """Tests for the client error classes."""

    @pytest.mark.parametrize(
        "error",
        [
            KCCTimeout("t"),
            KCCConnectionError("c"),
            KCCResponseError(500, "r"),
            KCCDecodeError("d"),
            KCCUsageError("u"),
            KCCTLSError("tls"),
            KCCProtocolError(KCError.KCERR_UNKNOWN),
            KCCLogonFailed(KCError.KCERR_LOGON_FAILED),
            KCCSessionEnded(KCError.KCERR_END_OF_SESSION),
            KCCEntryIDError("e"),
            KCCUnsupportedVersion(3),
        ],
    )
    def test_base_class(self, error: Exception):
        """Test every error derives from KCCClientError."""
        assert isinstance(error, KCCClientError)

    def test_protocol_error_text(self):
        """Test protocol errors carry code and text."""
        err = KCCLogonFailed(KCError.KCERR_LOGON_FAILED)
        assert isinstance(err, KCCProtocolError)
        assert err.code == KCError.KCERR_LOGON_FAILED
        assert str(err) == "Logon Failed (KC:0x80000009)"

    def test_entry_id_errors_are_value_errors(self):
        """Test entry ID errors can be caught as ValueError."""
        assert isinstance(KCCUnsupportedVersion(0), ValueError)


class TestRaiseForError:
    """Tests for KCResponse.raise_for_error()."""

    def test_success_does_not_raise(self):
        """Test successful responses pass."""
        LogoffResponse(er=0).raise_for_error()

    @pytest.mark.parametrize(
        ("code", "error_type"),
        [
            (KCError.KCERR_LOGON_FAILED, KCCLogonFailed),
            (KCError.KCERR_END_OF_SESSION, KCCSessionEnded),
            (KCError.KCERR_NO_ACCESS, KCCProtocolError),
            (0x80001234, KCCProtocolError),
        ],
    )
    def test_codes_map_to_errors(self, code: int, error_type: type[Exception]):
        """Test error codes map onto the matching error class."""
        with pytest.raises(error_type) as exc_info:
            LogoffResponse(er=code).raise_for_error()
        assert exc_info.value.code == code
