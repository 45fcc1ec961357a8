"""Helpers that turn style attributes into ``w:pPr`` / ``w:rPr`` markup."""
from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple
from xml.etree import ElementTree as ET

from docx_merger.utils.units import multiple_to_line_units, points_to_half_points, points_to_twips
from docx_merger.utils.xml_utils import qn

PARAGRAPH_ATTRIBUTES = (
    "alignment",
    "line_spacing",
    "space_before",
    "space_after",
    "indent_left",
    "indent_first_line",
)
RUN_ATTRIBUTES = ("font_family", "font_size", "font_color", "bold", "italic", "underline")

JC_VALUES = {"left": "left", "center": "center", "right": "right", "justify": "both"}


def split_attributes(attributes: Mapping[str, object]) -> Tuple[Dict[str, object], Dict[str, object]]:
    """Split ElementStyle attributes into paragraph-level and run-level groups."""
    paragraph = {key: value for key, value in attributes.items() if key in PARAGRAPH_ATTRIBUTES}
    run = {key: value for key, value in attributes.items() if key in RUN_ATTRIBUTES}
    return paragraph, run


def _set(parent: ET.Element, tag: str, **attrs: object) -> ET.Element:
    child = ET.SubElement(parent, qn(tag))
    for name, value in attrs.items():
        child.set(qn(f"w:{name}"), str(value))
    return child


def build_paragraph_properties(
    style_id: Optional[str] = None,
    attributes: Optional[Mapping[str, object]] = None,
    numbering: Optional[Tuple[int, int]] = None,
) -> Optional[ET.Element]:
    """Return a ``w:pPr`` element, or ``None`` when there is nothing to express.

    ``numbering`` is a ``(numId, ilvl)`` pair.
    """
    attributes = attributes or {}
    ppr = ET.Element(qn("w:pPr"))
    if style_id:
        _set(ppr, "w:pStyle", val=style_id)
    if numbering is not None:
        num_pr = ET.SubElement(ppr, qn("w:numPr"))
        _set(num_pr, "w:ilvl", val=numbering[1])
        _set(num_pr, "w:numId", val=numbering[0])

    spacing = {}
    if attributes.get("space_before") is not None:
        spacing["before"] = points_to_twips(attributes["space_before"])
    if attributes.get("space_after") is not None:
        spacing["after"] = points_to_twips(attributes["space_after"])
    if attributes.get("line_spacing") is not None:
        spacing["line"] = multiple_to_line_units(attributes["line_spacing"])
        spacing["lineRule"] = "auto"
    if spacing:
        _set(ppr, "w:spacing", **spacing)

    indent = {}
    if attributes.get("indent_left") is not None:
        indent["left"] = points_to_twips(attributes["indent_left"])
    if attributes.get("indent_first_line") is not None:
        indent["firstLine"] = points_to_twips(attributes["indent_first_line"])
    if indent:
        _set(ppr, "w:ind", **indent)

    alignment = attributes.get("alignment")
    if alignment:
        _set(ppr, "w:jc", val=JC_VALUES.get(str(alignment), "left"))

    return ppr if len(ppr) else None


def build_run_properties(
    attributes: Mapping[str, object], style_id: Optional[str] = None
) -> Optional[ET.Element]:
    """Return a ``w:rPr`` element in schema order, or ``None`` when empty."""
    rpr = ET.Element(qn("w:rPr"))
    if style_id:
        _set(rpr, "w:rStyle", val=style_id)
    font = attributes.get("font_family")
    if font:
        _set(rpr, "w:rFonts", ascii=font, hAnsi=font, eastAsia=font, cs=font)
    for key, tag in (("bold", "w:b"), ("italic", "w:i")):
        value = attributes.get(key)
        if value is not None:
            el = _set(rpr, tag)
            if not value:
                el.set(qn("w:val"), "0")
    color = attributes.get("font_color")
    if color:
        _set(rpr, "w:color", val=str(color).lstrip("#").upper())
    size = attributes.get("font_size")
    if size:
        half_points = points_to_half_points(float(size))
        _set(rpr, "w:sz", val=half_points)
        _set(rpr, "w:szCs", val=half_points)
    underline = attributes.get("underline")
    if underline is not None:
        _set(rpr, "w:u", val="single" if underline else "none")
    return rpr if len(rpr) else None
