"""GUID helpers."""

from __future__ import annotations

import struct


def define_guid(l: int, w1: int, w2: int, b: bytes) -> bytes:
    """Return the 16 byte little endian representation of a GUID.

    Mirrors the DEFINE_GUID macro: a 32 bit and two 16 bit fields followed by
    8 raw bytes.
    """
    if len(b) != 8:
        raise ValueError(f"GUID tail must be 8 bytes, got {len(b)}")
    return struct.pack("<IHH8s", l, w1, w2, b)


# GUID of address book entry IDs created by the Kopano server.
MUIDECSAB = define_guid(
    0x50A921AC, 0xD340, 0x48EE, b"\xb3\x19\xfb\xa7\x53\x30\x44\x25"
)
