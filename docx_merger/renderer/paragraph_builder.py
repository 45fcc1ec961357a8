"""Build ``w:p`` elements for output elements and document separators."""
from __future__ import annotations

import re
from typing import Dict, Mapping, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

from docx_merger.merge.engine import Separator
from docx_merger.merge.settings import SeparatorStyle
from docx_merger.model.elements import TextRun
from docx_merger.renderer.utils import build_paragraph_properties, build_run_properties
from docx_merger.utils.xml_utils import qn

XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"
TEXT_SPLIT_PATTERN = re.compile(r"(\t|\n)")

TITLE_SEPARATOR_MARK = "━━━"


def run_attributes(run: TextRun) -> Dict[str, object]:
    """Inline overrides of ``run`` keyed by ElementStyle attribute name."""
    values = {
        "bold": run.bold,
        "italic": run.italic,
        "underline": run.underline,
        "font_color": run.color,
        "font_family": run.font_family,
        "font_size": run.font_size,
    }
    return {key: value for key, value in values.items() if value is not None}


def append_text(run_el: ET.Element, text: str) -> None:
    for piece in TEXT_SPLIT_PATTERN.split(text):
        if not piece:
            continue
        if piece == "\t":
            ET.SubElement(run_el, qn("w:tab"))
        elif piece == "\n":
            ET.SubElement(run_el, qn("w:br"))
        else:
            text_el = ET.SubElement(run_el, qn("w:t"))
            text_el.set(XML_SPACE, "preserve")
            text_el.text = piece


def build_run(run: TextRun, base_attributes: Mapping[str, object], keep_style_id: bool = False) -> ET.Element:
    run_el = ET.Element(qn("w:r"))
    attributes = {**base_attributes, **run_attributes(run)}
    rpr = build_run_properties(attributes, run.style_id if keep_style_id else None)
    if rpr is not None:
        run_el.append(rpr)
    append_text(run_el, run.text)
    return run_el


def build_paragraph(
    runs: Sequence[TextRun],
    style_id: Optional[str] = None,
    paragraph_attributes: Optional[Mapping[str, object]] = None,
    base_run_attributes: Optional[Mapping[str, object]] = None,
    numbering: Optional[Tuple[int, int]] = None,
    keep_run_styles: bool = False,
) -> ET.Element:
    paragraph = ET.Element(qn("w:p"))
    ppr = build_paragraph_properties(style_id, paragraph_attributes, numbering)
    if ppr is not None:
        paragraph.append(ppr)
    for run in runs:
        paragraph.append(build_run(run, base_run_attributes or {}, keep_run_styles))
    return paragraph


def build_separator(separator: Separator, color: str) -> ET.Element:
    """Paragraph that marks the start of the next merged document."""
    paragraph = ET.Element(qn("w:p"))
    if separator.style is SeparatorStyle.PAGE_BREAK:
        run_el = ET.SubElement(paragraph, qn("w:r"))
        ET.SubElement(run_el, qn("w:br")).set(qn("w:type"), "page")
        return paragraph

    ppr = ET.SubElement(paragraph, qn("w:pPr"))
    if separator.style is SeparatorStyle.LINE:
        borders = ET.SubElement(ppr, qn("w:pBdr"))
        bottom = ET.SubElement(borders, qn("w:bottom"))
        for name, value in (("val", "single"), ("sz", "6"), ("space", "1"), ("color", "CCCCCC")):
            bottom.set(qn(f"w:{name}"), value)
        spacing = ET.SubElement(ppr, qn("w:spacing"))
        spacing.set(qn("w:before"), "400")
        spacing.set(qn("w:after"), "400")
        return paragraph

    spacing = ET.SubElement(ppr, qn("w:spacing"))
    spacing.set(qn("w:before"), "600")
    spacing.set(qn("w:after"), "200")
    ET.SubElement(ppr, qn("w:jc")).set(qn("w:val"), "center")
    title = TextRun(text=f"{TITLE_SEPARATOR_MARK} {separator.title} {TITLE_SEPARATOR_MARK}", color=color, font_size=10.0)
    paragraph.append(build_run(title, {}))
    return paragraph
