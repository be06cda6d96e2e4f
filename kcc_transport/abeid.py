"""Address book entry IDs (ABEID) as issued by the Kopano server.

Binary layout, all integers little endian::

    ab_flags  4 bytes
    guid      16 bytes
    version   uint32
    type      uint32   (version 1)
    id        uint32   (version 1)
    ex_id     base64 text of the external ID, optionally zero padded

Only version 1 entry IDs are supported.
"""

from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass, field

from .errors import KCCEntryIDError, KCCUnsupportedVersion

_HEADER = struct.Struct("<4s16sI")
_V1_DATA = struct.Struct("<II")

ABEID_VERSION_1 = 1


@dataclass(frozen=True)
class ABEID:
    """Decoded address book entry ID.

    Two entry IDs are equal when they refer to the same entry, that is when
    guid, type and external ID match. The numeric id and the flags are
    server local and do not take part in comparison or hashing.
    """

    guid: bytes
    type: int
    ex_id: bytes
    id: int = field(default=0, compare=False)
    ab_flags: bytes = field(default=b"\x00\x00\x00\x00", compare=False)
    version: int = field(default=ABEID_VERSION_1, compare=False)

    @classmethod
    def from_bytes(cls, value: bytes) -> ABEID:
        """Decode the binary representation.

        Raises:
            KCCUnsupportedVersion: If the version is not 1.
            KCCEntryIDError: If the value is truncated or the external ID is
                not valid base64.
        """
        if len(value) < _HEADER.size:
            raise KCCEntryIDError(f"ABEID too short: {len(value)} bytes")
        ab_flags, guid, version = _HEADER.unpack_from(value)
        if version != ABEID_VERSION_1:
            raise KCCUnsupportedVersion(version)

        offset = _HEADER.size
        if len(value) < offset + _V1_DATA.size:
            raise KCCEntryIDError(f"ABEID v1 data too short: {len(value)} bytes")
        type_, id_ = _V1_DATA.unpack_from(value, offset)

        raw_ex_id = value[offset + _V1_DATA.size :].rstrip(b"\x00")
        try:
            ex_id = base64.b64decode(raw_ex_id, validate=True)
        except binascii.Error as err:
            raise KCCEntryIDError(f"ABEID external ID is not base64: {err}") from err

        return cls(
            guid=guid,
            type=type_,
            ex_id=ex_id,
            id=id_,
            ab_flags=ab_flags,
            version=version,
        )

    @classmethod
    def from_hex(cls, value: str | bytes) -> ABEID:
        """Decode a hex encoded entry ID, in either case."""
        if isinstance(value, bytes):
            value = value.decode("ascii", errors="replace")
        try:
            raw = bytes.fromhex(value)
        except ValueError as err:
            raise KCCEntryIDError(f"ABEID is not hex: {err}") from err
        return cls.from_bytes(raw)

    @classmethod
    def from_base64(cls, value: str | bytes) -> ABEID:
        """Decode a standard base64 encoded entry ID, padding is optional."""
        if isinstance(value, str):
            value = value.encode("ascii", errors="replace")
        value += b"=" * (-len(value) % 4)
        try:
            raw = base64.b64decode(value, validate=True)
        except binascii.Error as err:
            raise KCCEntryIDError(f"ABEID is not base64: {err}") from err
        return cls.from_bytes(raw)

    def to_bytes(self) -> bytes:
        """Encode into the binary layout, without trailing padding."""
        return (
            _HEADER.pack(self.ab_flags, self.guid, self.version)
            + _V1_DATA.pack(self.type, self.id)
            + base64.b64encode(self.ex_id)
        )

    def hex(self) -> str:
        return self.to_bytes().hex()

    def base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    def __str__(self) -> str:
        return self.base64()


def new_abeid_v1(guid: bytes, type_: int, id_: int, ex_id: bytes) -> ABEID:
    """Create a version 1 entry ID with empty flags."""
    if len(guid) != 16:
        raise KCCEntryIDError(f"ABEID guid must be 16 bytes, got {len(guid)}")
    return ABEID(guid=guid, type=type_, ex_id=ex_id, id=id_)
