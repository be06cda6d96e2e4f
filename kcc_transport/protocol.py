"""SOAP envelope, request builder and response decoder for Kopano core.

Requests are small XML fragments named for the remote procedure, wrapped in
a fixed envelope. Responses are scanned for the first ``Body`` element and
the element nested inside it is decoded into a dataclass whose fields name
their wire elements through ``field(metadata={"xml": ...})``.
"""

from __future__ import annotations

import base64
import binascii
import types
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import fields, is_dataclass
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints
from xml.sax.saxutils import escape

from .errors import KCCDecodeError

T = TypeVar("T")

SOAP_CONTENT_TYPE = "text/xml; charset=utf-8"

SOAP_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/"'
    ' xmlns:SOAP-ENC="http://schemas.xmlsoap.org/soap/encoding/"'
    ' xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
    ' xmlns:xsd="http://www.w3.org/2001/XMLSchema"'
    ' xmlns:xop="http://www.w3.org/2004/08/xop/include"'
    ' xmlns:xmlmime="http://www.w3.org/2004/11/xmlmime"'
    ' xmlns:ns="urn:zarafa">'
    '<SOAP-ENV:Body SOAP-ENV:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">'
)
SOAP_FOOTER = "</SOAP-ENV:Body></SOAP-ENV:Envelope>"

_XSI_NIL = "{http://www.w3.org/2001/XMLSchema-instance}nil"


def soap_envelope(payload: str) -> bytes:
    """Wrap a request fragment in the SOAP envelope."""
    return (SOAP_HEADER + payload + SOAP_FOOTER).encode("utf-8")


def local_name(tag: str) -> str:
    """Strip the namespace from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


# -----------------------------------------------------------------------------
# Request building
# -----------------------------------------------------------------------------


def build_request(operation: str, params: Sequence[tuple[str, Any]]) -> str:
    """Build the ``<ns:operation>`` fragment for a remote procedure call.

    Parameters are rendered in the given order. Text is always escaped so
    user supplied values cannot alter the document structure.
    """
    body = "".join(build_element(name, value) for name, value in params)
    return f"<ns:{operation}>{body}</ns:{operation}>"


def build_element(name: str, value: Any) -> str:
    """Render a single parameter element.

    ``None`` renders an empty element, ``bytes`` are base64 encoded,
    sequences become ``<item>`` lists and objects providing ``to_xml()``
    embed their own fragment.
    """
    if value is None:
        return f"<{name}/>"
    return f"<{name}>{_element_content(value)}</{name}>"


def _element_content(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return escape(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if hasattr(value, "to_xml"):
        return value.to_xml()
    if isinstance(value, Sequence):
        return "".join(build_element("item", item) for item in value)
    raise TypeError(f"Unsupported request value type: {type(value).__name__}")


# -----------------------------------------------------------------------------
# Response parsing
# -----------------------------------------------------------------------------


class _BodyScanner:
    """Forward scan over pull parser events for the first SOAP Body."""

    def __init__(self) -> None:
        self._parser = ET.XMLPullParser(events=("start", "end"))
        self._body: ET.Element | None = None
        self._target: ET.Element | None = None

    def feed(self, data: bytes) -> ET.Element | None:
        self._parser.feed(data)
        return self._drain()

    def close(self) -> ET.Element | None:
        self._parser.close()
        return self._drain()

    def _drain(self) -> ET.Element | None:
        for event, element in self._parser.read_events():
            if event == "start":
                if self._body is None:
                    if local_name(element.tag) == "Body":
                        self._body = element
                elif self._target is None:
                    self._target = element
            elif element is self._target:
                return element
            elif element is self._body:
                raise KCCDecodeError("SOAP response body is empty")
        return None


def parse_soap_response(data: bytes, response_type: type[T]) -> T:
    """Find the SOAP ``Body`` and decode its first child into response_type.

    The scan is linear and stops at the first start element named ``Body``
    regardless of its namespace or position in the document. Content after
    the decoded element is never inspected.

    Raises:
        KCCDecodeError: If no Body (or no element inside it) is found, or
            the XML up to that point is malformed.
    """
    scanner = _BodyScanner()
    try:
        element = scanner.feed(data)
        if element is None:
            element = scanner.close()
    except ET.ParseError as err:
        raise KCCDecodeError(f"Malformed SOAP response: {err}") from err

    if element is None:
        raise KCCDecodeError("Failed to unmarshal SOAP response body")
    return decode_element(element, response_type)


def decode_element(element: ET.Element, cls: type[T]) -> T:
    """Decode element into cls.

    cls is either a dataclass, whose fields are matched against child
    elements by wire name, or a type providing a ``from_xml`` classmethod.
    Children without a matching field are ignored and missing children keep
    the field default.
    """
    from_xml = getattr(cls, "from_xml", None)
    if from_xml is not None:
        return from_xml(element)
    if not is_dataclass(cls):
        raise TypeError(f"Cannot decode into {cls!r}")

    children: dict[str, ET.Element] = {}
    for child in element:
        children.setdefault(local_name(child.tag), child)

    hints = get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        child = children.get(f.metadata.get("xml", f.name))
        if child is None:
            continue
        kwargs[f.name] = _decode_value(child, hints[f.name])
    return cls(**kwargs)


def _decode_value(element: ET.Element, tp: Any) -> Any:
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        if element.get(_XSI_NIL) == "true":
            return None
        tp = next(arg for arg in get_args(tp) if arg is not type(None))
        origin = get_origin(tp)

    if origin is list:
        (item_type,) = get_args(tp)
        return [_decode_value(child, item_type) for child in element]

    text = element.text or ""
    if tp is str:
        return text
    if tp is bool:
        return text.strip() in ("true", "1")
    if tp is int:
        try:
            return int(text.strip() or "0")
        except ValueError as err:
            raise KCCDecodeError(
                f"Invalid integer in <{local_name(element.tag)}>: {text!r}"
            ) from err
    if tp is float:
        try:
            return float(text.strip() or "0")
        except ValueError as err:
            raise KCCDecodeError(
                f"Invalid number in <{local_name(element.tag)}>: {text!r}"
            ) from err
    if tp is bytes:
        try:
            return base64.b64decode(text.strip(), validate=True)
        except binascii.Error as err:
            raise KCCDecodeError(
                f"Invalid base64 in <{local_name(element.tag)}>"
            ) from err
    return decode_element(element, tp)
