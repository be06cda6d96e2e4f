"""Typed SOAP response structures.

Field metadata carries the wire element name; the decoder in
:mod:`kcc_transport.protocol` fills these dataclasses from the response
element found inside the SOAP Body.
"""

from __future__ import annotations

import base64
import binascii
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any

from .codes import KCSUCCESS, KCError, is_session_ended
from .errors import (
    KCCDecodeError,
    KCCLogonFailed,
    KCCProtocolError,
    KCCSessionEnded,
)
from .flags import (
    PT_BINARY,
    PT_BOOLEAN,
    PT_DOUBLE,
    PT_FLOAT,
    PT_I8,
    PT_LONG,
    PT_SHORT,
    PT_STRING8,
    PT_UNICODE,
    prop_type,
)
from .protocol import build_element, local_name


def _wire(name: str, default: Any = None, **kwargs: Any) -> Any:
    if "default_factory" in kwargs:
        return field(metadata={"xml": name}, **kwargs)
    return field(default=default, metadata={"xml": name}, **kwargs)


@dataclass(frozen=True)
class KCResponse:
    """Base for responses carrying a protocol error code."""

    er: int = _wire("er", 0)

    @property
    def ok(self) -> bool:
        """Whether the server reported success."""
        return self.er == KCSUCCESS

    def raise_for_error(self) -> None:
        """Raise the matching KCCProtocolError subclass unless successful."""
        if self.ok:
            return
        if self.er == KCError.KCERR_LOGON_FAILED:
            raise KCCLogonFailed(self.er)
        if is_session_ended(self.er):
            raise KCCSessionEnded(self.er)
        raise KCCProtocolError(self.er)


@dataclass(frozen=True)
class LogonResponse(KCResponse):
    """Result of logon and ssoLogon requests."""

    session_id: int = _wire("ulSessionId", 0)
    server_guid: str = _wire("sServerGuid", "")
    output: bytes | None = _wire("lpOutput")


@dataclass(frozen=True)
class LogoffResponse(KCResponse):
    """Result of a logoff request."""


@dataclass(frozen=True)
class ResolveUserResponse(KCResponse):
    """Result of a resolveUsername request."""

    user_id: int = _wire("ulUserId", 0)
    user_entry_id: str = _wire("sUserId", "")


@dataclass(frozen=True)
class PropMapEntry:
    """Single valued entry of a user's property map."""

    prop_id: int = _wire("ulPropId", 0)
    value: str = _wire("lpszValue", "")


@dataclass(frozen=True)
class MVPropMapEntry:
    """Multi valued entry of a user's property map."""

    prop_id: int = _wire("ulPropId", 0)
    values: list[str] = _wire("sValues", default_factory=list)


@dataclass(frozen=True)
class User:
    """Meta data of a user as stored by the server."""

    id: int = _wire("ulUserId", 0)
    username: str = _wire("lpszUsername", "")
    mail_address: str = _wire("lpszMailAddress", "")
    full_name: str = _wire("lpszFullName", "")
    is_admin: int = _wire("ulIsAdmin", 0)
    is_non_active: int = _wire("ulIsNonActive", 0)
    user_entry_id: str = _wire("sUserId", "")
    prop_map: list[PropMapEntry] = _wire("lpsPropmap", default_factory=list)
    mv_prop_map: list[MVPropMapEntry] = _wire("lpsMVPropmap", default_factory=list)


@dataclass(frozen=True)
class GetUserResponse(KCResponse):
    """Result of a getUser request."""

    user: User | None = _wire("lpsUser")


# Wire union member per property type.
_PROP_VALUE_MEMBERS: dict[int, str] = {
    PT_SHORT: "i",
    PT_LONG: "ul",
    PT_FLOAT: "flt",
    PT_DOUBLE: "dbl",
    PT_BOOLEAN: "b",
    PT_I8: "li",
    PT_STRING8: "lpszA",
    PT_UNICODE: "lpszA",
    PT_BINARY: "bin",
}


@dataclass(frozen=True)
class PropValue:
    """Tagged property value.

    On the wire the value is a union: ``ulPropTag`` followed by exactly one
    member element whose name depends on the property type.
    """

    prop_tag: int
    value: Any = None

    def to_xml(self) -> str:
        member = _PROP_VALUE_MEMBERS.get(prop_type(self.prop_tag))
        if member is None:
            raise ValueError(f"Unsupported property type in tag 0x{self.prop_tag:08x}")
        return build_element("ulPropTag", self.prop_tag) + build_element(
            member, self.value
        )

    @classmethod
    def from_xml(cls, element: ET.Element) -> PropValue:
        tag: int | None = None
        value: Any = None
        for child in element:
            name = local_name(child.tag)
            text = child.text or ""
            try:
                if name == "ulPropTag":
                    tag = int(text)
                elif name in ("ul", "i", "li"):
                    value = int(text)
                elif name in ("dbl", "flt"):
                    value = float(text)
                elif name == "b":
                    value = text.strip() in ("true", "1")
                elif name == "lpszA":
                    value = text
                elif name == "bin":
                    value = base64.b64decode(text.strip(), validate=True)
            except (ValueError, binascii.Error) as err:
                raise KCCDecodeError(f"Invalid property value <{name}>") from err
        if tag is None:
            raise KCCDecodeError("Property value without ulPropTag")
        return cls(prop_tag=tag, value=value)


@dataclass(frozen=True)
class ABResolveNamesResponse(KCResponse):
    """Result of an abResolveNames request.

    ``row_set`` holds one row of property values per requested row and
    ``flags`` the matching MAPI_RESOLVED / MAPI_AMBIGUOUS / MAPI_UNRESOLVED
    state.
    """

    row_set: list[list[PropValue]] = _wire("sRowSet", default_factory=list)
    flags: list[int] = _wire("aFlags", default_factory=list)
