"""XML helpers for the Beanstalk wire format.

Request bodies are single-root fragments such as::

    <permission>
      <user-id type="integer">12</user-id>
      <read type="boolean">true</read>
    </permission>

Responses use the same Rails-style conventions: ``type`` attributes for
non-string scalars, ``type="array"`` for collections and ``nil="true"``
for empty values.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET

from beanstalk_api.core.exceptions import ParseError

log = logging.getLogger(__name__)

# (tag, value) or (tag, value, type attribute)
XmlField = Union[Tuple[str, Any], Tuple[str, Any, Optional[str]]]


def to_xml_text(value: Any) -> str:
    """Render a Python scalar as element text. Booleans become true/false."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_xml(root: str, fields: Iterable[XmlField]) -> str:
    """Serialize fields into a single-root XML fragment.

    Fields whose value is None are skipped, so callers can pass every
    optional argument and only the supplied ones reach the body.

    Args:
        root: Name of the root element, e.g. ``"user"``.
        fields: ``(tag, value)`` or ``(tag, value, type)`` tuples, in order.

    Returns:
        The fragment as a string, without an XML declaration.
    """
    element = ET.Element(root)
    for field in fields:
        tag, value = field[0], field[1]
        type_attr = field[2] if len(field) > 2 else None
        if value is None:
            continue
        child = ET.SubElement(element, tag)
        child.text = to_xml_text(value)
        if type_attr:
            child.set("type", type_attr)
    return ET.tostring(element, encoding="unicode")


def _safe_fromstring(body: Union[str, bytes]) -> ET.Element:
    # bytes are decoded per the XML declaration, UTF-8 when it has none
    return SafeET.fromstring(body, forbid_dtd=True)


def _as_text(body: Union[str, bytes]) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def parse_xml(body: Union[str, bytes]) -> Optional[ET.Element]:
    """Parse a response body into an element tree.

    Document type declarations and entities are refused.

    Args:
        body: Raw response bytes, or already decoded text.

    Returns:
        Root element, or None when the body is empty.

    Raises:
        ParseError: If the body is not well-formed XML or declares a DTD.
    """
    if not body or not body.strip():
        return None
    try:
        return _safe_fromstring(body)
    except (SafeET.ParseError, DefusedXmlException) as e:
        raise ParseError(str(e), _as_text(body)) from e


def extract_errors(body: Union[str, bytes]) -> List[str]:
    """Return messages from an ``<errors><error>...</error></errors>`` body.

    Anything else, including malformed XML, yields an empty list.
    """
    if not body or not body.strip():
        return []
    try:
        root = _safe_fromstring(body)
    except (SafeET.ParseError, DefusedXmlException):
        log.debug("Error response body is not plain XML")
        return []

    if root.tag == "error":
        return [root.text.strip()] if root.text and root.text.strip() else []
    if root.tag != "errors":
        return []
    return [e.text.strip() for e in root.iter("error") if e.text and e.text.strip()]


def _parse_datetime(text: str) -> Union[datetime, str]:
    candidate = text[:-1] + "+00:00" if text.endswith("Z") else text
    candidate = candidate.replace(" ", "T", 1)
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return text


def _convert_scalar(text: Optional[str], type_attr: Optional[str]) -> Any:
    if text is None:
        return None if type_attr else ""

    if type_attr == "integer":
        try:
            return int(text.strip())
        except ValueError:
            return text
    if type_attr in ("float", "decimal"):
        try:
            return float(text.strip())
        except ValueError:
            return text
    if type_attr == "boolean":
        return text.strip().lower() in ("true", "1")
    if type_attr == "datetime":
        return _parse_datetime(text.strip())
    return text


def _merge_children(children: Sequence[ET.Element]) -> dict:
    result: dict = {}
    for child in children:
        value = element_to_python(child)
        if child.tag not in result:
            result[child.tag] = value
        elif isinstance(result[child.tag], list):
            result[child.tag].append(value)
        else:
            result[child.tag] = [result[child.tag], value]
    return result


def element_to_python(element: Optional[ET.Element]) -> Any:
    """Convert a Beanstalk response tree into plain Python data.

    - ``type="array"`` elements become lists of their converted children.
    - Elements with children become dicts keyed by child tag; repeated tags
      are collected into a list.
    - ``integer``, ``float``, ``boolean`` and ``datetime`` scalars are
      converted; untyped text stays a string.
    - ``nil="true"`` becomes None.

    Example:
        >>> root = ET.fromstring('<user><id type="integer">3</id></user>')
        >>> element_to_python(root)
        {'id': 3}
    """
    if element is None:
        return None
    if element.get("nil") == "true":
        return None

    type_attr = element.get("type")
    children = list(element)

    if type_attr == "array":
        return [element_to_python(child) for child in children]
    if children:
        return _merge_children(children)
    return _convert_scalar(element.text, type_attr)
