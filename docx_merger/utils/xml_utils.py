"""Helper functions to work with XML namespaces and parsing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
from xml.etree import ElementTree as ET


@dataclass(frozen=True)
class Namespaces:
    """Common OpenXML namespace prefixes used across parsers and writers."""

    WORD: Dict[str, str] = None  # type: ignore[assignment]
    RELS: Dict[str, str] = None  # type: ignore[assignment]
    CONTENT_TYPES: Dict[str, str] = None  # type: ignore[assignment]
    OFFICE_RELS: Dict[str, str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:  # pragma: no cover
        raise RuntimeError("Namespaces should not be instantiated")


Namespaces.WORD = {  # type: ignore[attr-defined]
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
}
Namespaces.RELS = {  # type: ignore[attr-defined]
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}
Namespaces.CONTENT_TYPES = {  # type: ignore[attr-defined]
    "ct": "http://schemas.openxmlformats.org/package/2006/content-types",
}
Namespaces.OFFICE_RELS = {  # type: ignore[attr-defined]
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}

W_NS = Namespaces.WORD["w"]
R_NS = Namespaces.OFFICE_RELS["r"]

# Prefixes used when re-serializing elements copied from a source package.
for _prefix, _uri in (
    ("w", W_NS),
    ("r", R_NS),
    ("mc", "http://schemas.openxmlformats.org/markup-compatibility/2006"),
    ("wp", "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"),
    ("a", "http://schemas.openxmlformats.org/drawingml/2006/main"),
    ("w14", "http://schemas.microsoft.com/office/word/2010/wordml"),
    ("w15", "http://schemas.microsoft.com/office/word/2012/wordml"),
):
    ET.register_namespace(_prefix, _uri)


def qn(name: str) -> str:
    """Expand a ``w:tag`` style name into Clark notation (``{uri}tag``)."""
    prefix, local = name.split(":", 1)
    for mapping in (Namespaces.WORD, Namespaces.OFFICE_RELS):
        if prefix in mapping:
            return f"{{{mapping[prefix]}}}{local}"
    raise KeyError(f"Unknown namespace prefix: {prefix}")


def local_name(tag: str) -> str:
    return tag.split("}", 1)[-1]


def parse_xml(data: bytes) -> ET.ElementTree:
    """Parse XML from raw bytes with sane defaults."""
    return ET.ElementTree(ET.fromstring(data))


def get_attr(element: Optional[ET.Element], child_name: Optional[str], attr_name: str) -> Optional[str]:
    """Return a ``w:``-qualified attribute from ``element`` or its first matching child."""
    if element is None:
        return None
    target = element.find(child_name, Namespaces.WORD) if child_name else element
    if target is None:
        return None
    return target.attrib.get(qn(attr_name))


def get_int_attr(element: Optional[ET.Element], child_name: Optional[str], attr_name: str) -> Optional[int]:
    value = get_attr(element, child_name, attr_name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def is_on(element: Optional[ET.Element]) -> Optional[bool]:
    """Evaluate an OOXML toggle property such as ``<w:b/>`` or ``<w:b w:val="0"/>``."""
    if element is None:
        return None
    value = element.attrib.get(qn("w:val"))
    return value not in ("0", "false", "off", "none")
