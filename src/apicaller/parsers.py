"""Response body parsers and request payload serializers.

JSON and XML bodies are normalized to the same nested structure: mappings for
objects/elements, lists for arrays/repeated elements and strings or numbers for
leaves. Parsers raise :class:`~apicaller.exceptions.ResponseParseError` whose
message is one of the human-readable categories below; the client turns it into
an ``{"error": message}`` descriptor.
"""

import json
import re
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, List, Mapping, Union
from xml.parsers.expat import errors as expat_errors

from .exceptions import InvalidPayload, ResponseParseError

MAX_DEPTH = 512

JSON_ERROR_DEPTH = "Maximum stack depth exceeded"
JSON_ERROR_STATE_MISMATCH = "Underflow or the modes mismatch"
JSON_ERROR_CTRL_CHAR = "Unexpected control character found"
JSON_ERROR_SYNTAX = "Syntax error, malformed JSON"
JSON_ERROR_UTF8 = "Malformed UTF-8 characters, possibly incorrectly encoded"
JSON_ERROR_UNKNOWN = "Unknown error on JSON file"

XML_ERROR_DEPTH = "Maximum stack depth exceeded"
XML_ERROR_STATE_MISMATCH = "Mismatched tag, closing tag does not match the open element"
XML_ERROR_ENCODING = "Encoding mismatch, document does not match its declared encoding"
XML_ERROR_CTRL_CHAR = "Unexpected control character found"
XML_ERROR_SYNTAX = "Syntax error, malformed XML"
XML_ERROR_UTF8 = "Malformed UTF-8 characters, possibly incorrectly encoded"
XML_ERROR_UNKNOWN = "Unknown error on XML document"

ATTRIBUTES_KEY = "@attributes"
TEXT_KEY = "0"

Body = Union[str, bytes]

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_ENCODING_DECLARATION = re.compile(rb"^\s*<\?xml[^>]*encoding=", re.IGNORECASE)
_XML_NAME = re.compile(r"[A-Za-z_][\w.-]*\Z")


def _code(name: str) -> int:
    return expat_errors.codes[getattr(expat_errors, name)]


_XML_ENCODING_CODES = {_code("XML_ERROR_UNKNOWN_ENCODING"), _code("XML_ERROR_INCORRECT_ENCODING")}
_XML_MISMATCH_CODES = {_code("XML_ERROR_TAG_MISMATCH")}
_XML_TOKEN_CODES = {_code("XML_ERROR_INVALID_TOKEN"), _code("XML_ERROR_BAD_CHAR_REF")}


def _nesting_depth(value: Any) -> int:
    """Depth of nested containers in a decoded value, computed without recursion."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        current, depth = stack.pop()
        if isinstance(current, dict):
            children = current.values()
        elif isinstance(current, list):
            children = current
        else:
            continue
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in children)
    return deepest


def _is_state_mismatch(exc: json.JSONDecodeError) -> bool:
    # A closing bracket where a separator was expected, e.g. ``[1}``
    if not exc.msg.startswith("Expecting ',' delimiter"):
        return False
    return exc.doc[exc.pos : exc.pos + 1] in ("]", "}")


def parse_json(body: Body) -> Any:
    """Decode a JSON body.

    Raises:
        ResponseParseError: with one of the ``JSON_ERROR_*`` messages
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            raise ResponseParseError(JSON_ERROR_UTF8) from None
    if not isinstance(body, str):
        raise ResponseParseError(JSON_ERROR_UNKNOWN)

    try:
        data = json.loads(body)
    except RecursionError:
        raise ResponseParseError(JSON_ERROR_DEPTH) from None
    except json.JSONDecodeError as exc:
        if exc.msg.startswith("Invalid control character"):
            raise ResponseParseError(JSON_ERROR_CTRL_CHAR) from None
        if _is_state_mismatch(exc):
            raise ResponseParseError(JSON_ERROR_STATE_MISMATCH) from None
        raise ResponseParseError(JSON_ERROR_SYNTAX) from None
    except ValueError:
        raise ResponseParseError(JSON_ERROR_UNKNOWN) from None

    if _nesting_depth(data) > MAX_DEPTH:
        raise ResponseParseError(JSON_ERROR_DEPTH)
    return data


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _element_value(element: ET.Element) -> Any:
    """Convert one element to a string or mapping.

    Text-only elements without attributes become their text, empty ones an
    empty mapping. Otherwise attributes go under ``@attributes``, children are
    keyed by tag (lists when repeated) and text of a childless element under
    ``"0"``.
    """
    children = list(element)
    text = element.text
    if not children and not element.attrib:
        return text if text is not None else {}

    value: Dict[str, Any] = {}
    if element.attrib:
        value[ATTRIBUTES_KEY] = {_local_name(k): v for k, v in element.attrib.items()}
    if not children:
        if text is not None and text.strip():
            value[TEXT_KEY] = text
        return value

    grouped: Dict[str, List[Any]] = {}
    for child in children:
        grouped.setdefault(_local_name(child.tag), []).append(_element_value(child))
    for key, items in grouped.items():
        value[key] = items[0] if len(items) == 1 else items
    return value


def element_to_mapping(root: ET.Element) -> Dict[str, Any]:
    """Normalize a parsed document to the mapping shape JSON bodies produce.

    The root element itself is the mapping; a text-only root becomes
    ``{"0": text}``.
    """
    value = _element_value(root)
    if isinstance(value, str):
        return {TEXT_KEY: value}
    return value


def _xml_error_message(body: Body, exc: ET.ParseError) -> str:
    code = getattr(exc, "code", None)
    if code in _XML_ENCODING_CODES:
        return XML_ERROR_ENCODING
    if code in _XML_MISMATCH_CODES:
        return XML_ERROR_STATE_MISMATCH
    if code in _XML_TOKEN_CODES:
        if isinstance(body, bytes):
            if not _ENCODING_DECLARATION.match(body):
                try:
                    body = body.decode("utf-8")
                except UnicodeDecodeError:
                    return XML_ERROR_UTF8
            else:
                body = body.decode("latin-1")
        if _CONTROL_CHARS.search(body):
            return XML_ERROR_CTRL_CHAR
        return XML_ERROR_SYNTAX
    if code is None:
        return XML_ERROR_UNKNOWN
    return XML_ERROR_SYNTAX


def parse_xml(body: Body) -> Dict[str, Any]:
    """Parse an XML body into the normalized mapping.

    The standard library parser does not fetch external entities or DTDs.

    Raises:
        ResponseParseError: with one of the ``XML_ERROR_*`` messages
    """
    if not isinstance(body, (str, bytes)):
        raise ResponseParseError(XML_ERROR_UNKNOWN)
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise ResponseParseError(_xml_error_message(body, exc)) from None
    except LookupError:
        # Declared encoding has no Python codec
        raise ResponseParseError(XML_ERROR_ENCODING) from None
    except RecursionError:
        raise ResponseParseError(XML_ERROR_DEPTH) from None

    depth = _element_depth(root)
    if depth > MAX_DEPTH:
        raise ResponseParseError(XML_ERROR_DEPTH)
    return element_to_mapping(root)


def _element_depth(root: ET.Element) -> int:
    deepest = 0
    stack = [(root, 1)]
    while stack:
        element, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in element)
    return deepest


PARSERS: Dict[str, Callable[[Body], Any]] = {
    "json": parse_json,
    "xml": parse_xml,
}


def serialize_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload)


def _xml_name(name: Any) -> str:
    """Return ``name`` as a tag or attribute name, rejecting what XML cannot express."""
    name = str(name)
    if not _XML_NAME.match(name):
        raise InvalidPayload(f"Invalid XML name: {name!r}")
    return name


def _fill_element(element: ET.Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            if key == ATTRIBUTES_KEY:
                element.attrib.update({_xml_name(k): _xml_text(v) for k, v in child.items()})
            elif key == TEXT_KEY:
                element.text = _xml_text(child)
            else:
                for item in child if isinstance(child, list) else [child]:
                    _fill_element(ET.SubElement(element, _xml_name(key)), item)
    elif value is not None:
        element.text = _xml_text(value)


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def serialize_xml(payload: Mapping[str, Any], root_tag: str = "request") -> str:
    """Serialize a mapping to an XML document, the inverse of :func:`element_to_mapping`.

    Lists become repeated elements, ``@attributes`` become attributes.

    Raises:
        InvalidPayload: If a key or ``root_tag`` is not a valid XML name
    """
    root = ET.Element(_xml_name(root_tag))
    _fill_element(root, payload)
    return ET.tostring(root, encoding="unicode")


SERIALIZERS: Dict[str, Callable[[Mapping[str, Any]], str]] = {
    "json": serialize_json,
    "xml": serialize_xml,
}
