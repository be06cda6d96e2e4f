"""Flag, type and property tag constants understood by the client.

Only the values actually used by this package are defined. Capability and
logon flags mirror provider/include/kcore.hpp, MAPI values mirror
mapi4linux/include/mapidefs.h.
"""

from __future__ import annotations

from enum import Enum

# Capability flags advertised at logon.
KOPANO_CAP_LARGE_SESSIONID = 0x0010
KOPANO_CAP_MULTI_SERVER = 0x0040
KOPANO_CAP_ENHANCED_ICS = 0x0100
KOPANO_CAP_UNICODE = 0x0200

DEFAULT_CLIENT_CAPABILITIES = (
    KOPANO_CAP_UNICODE
    | KOPANO_CAP_LARGE_SESSIONID
    | KOPANO_CAP_MULTI_SERVER
    | KOPANO_CAP_ENHANCED_ICS
)

# Logon flags.
KOPANO_LOGON_NO_REGISTER_SESSION = 0x0002


class SSOType(str, Enum):
    """Single sign on mechanisms, valued by their wire prefix."""

    NTLM = "NTLM"
    KCOIDC = "KCOIDC"
    KRB5 = ""


# Object types.
MAPI_MAILUSER = 0x00000006

# Name resolution row flags.
MAPI_UNRESOLVED = 0x00000000
MAPI_AMBIGUOUS = 0x00000001
MAPI_RESOLVED = 0x00000002

# Property types.
PT_SHORT = 0x0002
PT_LONG = 0x0003
PT_FLOAT = 0x0004
PT_DOUBLE = 0x0005
PT_BOOLEAN = 0x000B
PT_I8 = 0x0014
PT_STRING8 = 0x001E
PT_UNICODE = 0x001F
PT_BINARY = 0x0102


def prop_tag(prop_type_value: int, prop_id_value: int) -> int:
    """Combine a property type and id into a property tag."""
    return ((prop_id_value & 0xFFFF) << 16) | (prop_type_value & 0xFFFF)


def prop_type(tag: int) -> int:
    """Return the property type part of a property tag."""
    return tag & 0xFFFF


def prop_id(tag: int) -> int:
    """Return the property id part of a property tag."""
    return (tag >> 16) & 0xFFFF


PR_ENTRYID = prop_tag(PT_BINARY, 0x0FFF)
PR_OBJECT_TYPE = prop_tag(PT_LONG, 0x0FFE)
PR_RECORD_KEY = prop_tag(PT_BINARY, 0x0FF9)
PR_INSTANCE_KEY = prop_tag(PT_BINARY, 0x0FF6)
PR_DISPLAY_NAME = prop_tag(PT_STRING8, 0x3001)
PR_ADDRTYPE = prop_tag(PT_STRING8, 0x3002)
PR_EMAIL_ADDRESS = prop_tag(PT_STRING8, 0x3003)
PR_SEARCH_KEY = prop_tag(PT_BINARY, 0x300B)
PR_SMTP_ADDRESS = prop_tag(PT_STRING8, 0x39FE)
