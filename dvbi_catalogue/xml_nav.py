"""
Namespace-aware navigation helpers over ElementTree documents.

The extraction code only ever asks a handful of questions of the document
(children by name, descendants by name, text, attributes, parent). The
"first element wins" conventions of the service list format are expressed as
named policies so callers state whether a field is required or optional.

Deutsch:
    Namespace-bewusste Navigation über ElementTree-Dokumente.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Union
from xml.etree import ElementTree as ET

log = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XML_LANG = f"{{{XML_NAMESPACE}}}lang"


class ServiceListError(Exception):
    """Raised when a service list document is invalid. / Wird bei ungültigen Servicelisten geworfen."""


class Document:
    """
    Parsed document with a parent map for upward navigation.

    Deutsch:
        Geparstes Dokument mit Eltern-Zuordnung für die Navigation nach oben.
    """

    def __init__(self, root: ET.Element):
        self.root = root
        self._parents: Dict[ET.Element, ET.Element] = {
            child: parent for parent in root.iter() for child in parent
        }

    @property
    def namespace(self) -> str:
        return namespace_of(self.root)

    def parent(self, element: ET.Element) -> Optional[ET.Element]:
        return self._parents.get(element)


def parse_document(payload: Union[str, bytes]) -> Document:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as exc:
        raise ServiceListError(f"malformed XML payload: {exc}") from exc
    return Document(root)


def local_name(element: ET.Element) -> str:
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def namespace_of(element: ET.Element) -> str:
    tag = element.tag
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def _matches(element: ET.Element, name: str, ns: Optional[str]) -> bool:
    if local_name(element) != name:
        return False
    return ns is None or namespace_of(element) == ns


def children(element: ET.Element, name: str, ns: Optional[str] = None) -> List[ET.Element]:
    return [child for child in element if _matches(child, name, ns)]


def descendants(element: ET.Element, name: str, ns: Optional[str] = None) -> Iterator[ET.Element]:
    for node in element.iter():
        if node is not element and _matches(node, name, ns):
            yield node


def text_of(element: Optional[ET.Element]) -> Optional[str]:
    if element is None or element.text is None:
        return None
    text = element.text.strip()
    return text or None


def first_of_optional(
    element: ET.Element,
    name: str,
    ns: Optional[str] = None,
    *,
    deep: bool = False,
) -> Optional[ET.Element]:
    """Return the first matching child (or descendant), ``None`` when absent."""

    candidates = descendants(element, name, ns) if deep else iter(children(element, name, ns))
    return next(candidates, None)


def first_of_required(
    element: ET.Element,
    name: str,
    what: str,
    ns: Optional[str] = None,
    *,
    deep: bool = False,
) -> ET.Element:
    """Return the first matching child (or descendant) or raise ``ServiceListError``."""

    found = first_of_optional(element, name, ns, deep=deep)
    if found is None:
        raise ServiceListError(f"missing {what}")
    return found


def optional_text(element: ET.Element, name: str, ns: Optional[str] = None, *, deep: bool = False) -> Optional[str]:
    return text_of(first_of_optional(element, name, ns, deep=deep))


def required_text(element: ET.Element, name: str, what: str, ns: Optional[str] = None, *, deep: bool = False) -> str:
    text = text_of(first_of_required(element, name, what, ns, deep=deep))
    if text is None:
        raise ServiceListError(f"empty {what}")
    return text


def optional_attribute(element: ET.Element, name: str) -> Optional[str]:
    value = element.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def required_attribute(element: ET.Element, name: str, what: str) -> str:
    value = optional_attribute(element, name)
    if value is None:
        raise ServiceListError(f"missing attribute {name!r} on {what}")
    return value


def texts_of(elements: List[ET.Element]) -> List[str]:
    values: List[str] = []
    for element in elements:
        text = text_of(element)
        if text is not None:
            values.append(text)
    return values
