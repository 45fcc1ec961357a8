"""Translate ``w:rPr`` / ``w:pPr`` blocks into ElementStyle attribute overrides."""
from __future__ import annotations

from typing import Dict, Optional
from xml.etree import ElementTree as ET

from docx_merger.utils.units import half_points_to_points, line_units_to_multiple, twips_to_points
from docx_merger.utils.xml_utils import Namespaces, get_attr, get_int_attr, is_on

ALIGNMENT_MAP = {
    "left": "left",
    "start": "left",
    "center": "center",
    "right": "right",
    "end": "right",
    "both": "justify",
    "justify": "justify",
    "distribute": "justify",
}

FONT_ATTRIBUTES = ("w:ascii", "w:hAnsi", "w:eastAsia", "w:cs")


def read_run_properties(rpr: Optional[ET.Element]) -> Dict[str, object]:
    """Return font/emphasis overrides keyed by ElementStyle attribute name."""
    props: Dict[str, object] = {}
    if rpr is None:
        return props

    fonts = rpr.find("w:rFonts", Namespaces.WORD)
    if fonts is not None:
        for attr in FONT_ATTRIBUTES:
            font = get_attr(fonts, None, attr)
            if font:
                props["font_family"] = font
                break

    size = get_int_attr(rpr, "w:sz", "w:val")
    if size:
        props["font_size"] = half_points_to_points(size)

    color = get_attr(rpr, "w:color", "w:val")
    if color and color.lower() != "auto":
        props["font_color"] = normalize_color(color)

    for tag, key in (("w:b", "bold"), ("w:i", "italic")):
        value = is_on(rpr.find(tag, Namespaces.WORD))
        if value is not None:
            props[key] = value

    underline = rpr.find("w:u", Namespaces.WORD)
    if underline is not None:
        props["underline"] = get_attr(underline, None, "w:val") not in (None, "none", "0")

    return props


def read_paragraph_properties(ppr: Optional[ET.Element]) -> Dict[str, object]:
    """Return alignment, spacing, and indentation overrides in points."""
    props: Dict[str, object] = {}
    if ppr is None:
        return props

    alignment = get_attr(ppr, "w:jc", "w:val")
    if alignment:
        props["alignment"] = ALIGNMENT_MAP.get(alignment.lower(), "left")

    spacing = ppr.find("w:spacing", Namespaces.WORD)
    if spacing is not None:
        line = get_int_attr(spacing, None, "w:line")
        line_rule = get_attr(spacing, None, "w:lineRule")
        if line and line_rule in (None, "auto"):
            props["line_spacing"] = line_units_to_multiple(line)
        before = get_int_attr(spacing, None, "w:before")
        if before is not None:
            props["space_before"] = twips_to_points(before)
        after = get_int_attr(spacing, None, "w:after")
        if after is not None:
            props["space_after"] = twips_to_points(after)

    indent = ppr.find("w:ind", Namespaces.WORD)
    if indent is not None:
        left = get_int_attr(indent, None, "w:left")
        if left is None:
            left = get_int_attr(indent, None, "w:start")
        if left is not None:
            props["indent_left"] = twips_to_points(left)
        first_line = get_int_attr(indent, None, "w:firstLine")
        if first_line is not None:
            props["indent_first_line"] = twips_to_points(first_line)

    return props


def read_numbering_reference(ppr: Optional[ET.Element]) -> tuple[Optional[int], Optional[int]]:
    """Return ``(numId, ilvl)`` from ``w:numPr``; either may be missing."""
    if ppr is None:
        return None, None
    num_pr = ppr.find("w:numPr", Namespaces.WORD)
    if num_pr is None:
        return None, None
    return get_int_attr(num_pr, "w:numId", "w:val"), get_int_attr(num_pr, "w:ilvl", "w:val")


def normalize_color(value: str) -> str:
    value = value.lstrip("#").upper()
    return f"#{value}"
