"""Parse document.xml into the canonical element stream, style map, and structure."""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple
from xml.etree import ElementTree as ET

from docx_merger.model.document_model import MAX_TRACKED_LEVELS, DocumentStructure, ParsedDocument, SourceType
from docx_merger.model.elements import DocumentElement, ElementKind, TextRun
from docx_merger.model.numbering_model import NumberingCatalog
from docx_merger.model.style_model import (
    DEFAULT_NUMBERING_FORMATS,
    DocumentStyleMap,
    ElementStyle,
    PageMargins,
    StyleDefinition,
    StylesCatalog,
)
from docx_merger.parser.docx_loader import DocxPackage
from docx_merger.parser.property_reader import (
    read_numbering_reference,
    read_paragraph_properties,
    read_run_properties,
)
from docx_merger.parser.style_cascade import CascadeContext, resolve_style
from docx_merger.utils.logger import get_logger
from docx_merger.utils.text_cleaner import clean_text
from docx_merger.utils.units import twips_to_points
from docx_merger.utils.xml_utils import Namespaces, get_attr, get_int_attr, local_name

LOGGER = get_logger(__name__)

HEADING_NAME_PATTERN = re.compile(r"^(?:heading|제목)\s*(\d+)$", re.IGNORECASE)
HEADING_ID_PATTERN = re.compile(r"^(?:heading|h)(\d+)$", re.IGNORECASE)
LEVEL_TEXT_PLACEHOLDER = re.compile(r"%\d")

# Style names and ids probed when a kind never occurs in the body.
KIND_STYLE_CANDIDATES: Dict[ElementKind, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    ElementKind.HEADING1: (("heading 1", "제목 1"), ("Heading1",)),
    ElementKind.HEADING2: (("heading 2", "제목 2"), ("Heading2",)),
    ElementKind.HEADING3: (("heading 3", "제목 3"), ("Heading3",)),
    ElementKind.HEADING4: (("heading 4", "제목 4"), ("Heading4",)),
    ElementKind.PARAGRAPH: (("normal",), ("Normal",)),
    ElementKind.LIST_NUMBER: (("list number",), ("ListNumber",)),
    ElementKind.LIST_BULLET: (("list bullet", "list paragraph"), ("ListBullet", "ListParagraph")),
}

RUN_CONTAINERS = ("hyperlink", "smartTag", "ins", "fldSimple")


def heading_level_for(style: Optional[StyleDefinition], outline_level: Optional[int]) -> Optional[int]:
    """Return the heading level (1-4) implied by a style or an outline level."""
    level: Optional[int] = None
    if style is not None:
        match = HEADING_NAME_PATTERN.match((style.name or "").strip())
        if match is None:
            match = HEADING_ID_PATTERN.match(style.style_id)
        if match is not None:
            level = int(match.group(1))
    if level is None:
        if outline_level is None and style is not None:
            outline_level = style.outline_level
        if outline_level is not None:
            level = outline_level + 1
    if level is not None and 1 <= level <= 4:
        return level
    return None


def level_text_to_template(level_text: Optional[str]) -> Optional[str]:
    """Convert a Word ``lvlText`` such as ``%1.%2`` into the ``{n}.{n}`` form."""
    if not level_text or not LEVEL_TEXT_PLACEHOLDER.search(level_text):
        return None
    return LEVEL_TEXT_PLACEHOLDER.sub("{n}", level_text)


class DocumentParser:
    """Transforms Word body XML into model elements."""

    def __init__(self, package: DocxPackage, styles: StylesCatalog, numbering: NumberingCatalog) -> None:
        self._package = package
        self._styles = styles
        self._numbering = numbering

        self._heading_counters: List[int] = [0] * MAX_TRACKED_LEVELS
        self._list_counters: Dict[int, List[Optional[int]]] = {}
        self._observed: Dict[ElementKind, ElementStyle] = {}
        self._style_ids: Dict[ElementKind, str] = {}
        self._list_abstract_ids: Dict[ElementKind, int] = {}
        self._numbering_formats: Dict[str, str] = {}

    def parse(self, doc_id: str, name: str) -> ParsedDocument:
        """Parse the body and return a document with its style map and structure."""
        root = self._package.require_document_xml().getroot()
        body = root.find("w:body", Namespaces.WORD)
        elements: List[DocumentElement] = []
        margins = PageMargins()
        if body is None:
            LOGGER.warning("%s: document.xml missing body element", name)
        else:
            for child in list(body):
                tag = local_name(child.tag)
                if tag == "p":
                    element = self._parse_paragraph(child, len(elements))
                    if element is not None:
                        elements.append(element)
                elif tag == "sectPr":
                    margins = self._read_page_margins(child)
                else:
                    LOGGER.debug("%s: skipping body element %s", name, tag)

        style_map = self._build_style_map(margins)
        LOGGER.debug("%s: parsed %d elements", name, len(elements))
        return ParsedDocument(
            id=doc_id,
            name=name,
            source_type=SourceType.DOCX,
            elements=tuple(elements),
            style_map=style_map,
            baseline_style_map=style_map,
            structure=self._build_structure(elements),
            numbering=self._numbering,
            styles=self._styles,
            package=self._package,
        )

    # ------------------------------------------------------------------
    # Paragraphs and runs
    def _parse_paragraph(self, paragraph_el: ET.Element, index: int) -> Optional[DocumentElement]:
        runs = tuple(self._collect_runs(paragraph_el))
        if not "".join(run.text for run in runs).strip():
            return None

        ppr = paragraph_el.find("w:pPr", Namespaces.WORD)
        style_id = get_attr(ppr, "w:pStyle", "w:val")
        style = self._styles.get(style_id)
        direct = read_paragraph_properties(ppr)
        kind, level, num_id = self._classify(style, ppr)

        number: Optional[int] = None
        num_format: Optional[str] = None
        if kind.is_heading:
            number = self._advance_heading(level)
        elif kind.is_list:
            level_def = self._numbering.level_for(num_id, level)
            num_format = level_def.num_format if level_def is not None else None
            number = self._advance_list(num_id, level)
            if kind is ElementKind.LIST_BULLET:
                number = None

        self._observe(kind, style_id, direct, runs, num_id, level)
        return DocumentElement(
            kind=kind,
            runs=runs,
            element_id=f"p{index}",
            level=level,
            list_id=str(num_id) if num_id is not None else None,
            number=number,
            num_format=num_format,
            style_id=style_id,
            paragraph_properties=direct,
        )

    def _collect_runs(self, container: ET.Element) -> List[TextRun]:
        runs: List[TextRun] = []
        for child in list(container):
            tag = local_name(child.tag)
            if tag == "r":
                run = self._parse_run(child)
                if run is not None:
                    runs.append(run)
            elif tag in RUN_CONTAINERS:
                runs.extend(self._collect_runs(child))
        return runs

    def _parse_run(self, run_el: ET.Element) -> Optional[TextRun]:
        parts: List[str] = []
        for child in list(run_el):
            tag = local_name(child.tag)
            if tag == "t" and child.text:
                parts.append(child.text)
            elif tag == "tab":
                parts.append("\t")
            elif tag in ("br", "cr"):
                parts.append("\n")
        text = clean_text("".join(parts))
        if not text:
            return None
        rpr = run_el.find("w:rPr", Namespaces.WORD)
        props = read_run_properties(rpr)
        return TextRun(
            text=text,
            bold=props.get("bold"),
            italic=props.get("italic"),
            underline=props.get("underline"),
            color=props.get("font_color"),
            font_family=props.get("font_family"),
            font_size=props.get("font_size"),
            style_id=get_attr(rpr, "w:rStyle", "w:val"),
        )

    # ------------------------------------------------------------------
    # Classification and counters
    def _classify(
        self, style: Optional[StyleDefinition], ppr: Optional[ET.Element]
    ) -> Tuple[ElementKind, Optional[int], Optional[int]]:
        heading_level = heading_level_for(style, get_int_attr(ppr, "w:outlineLvl", "w:val"))
        if heading_level is not None:
            return ElementKind.heading(heading_level), heading_level, None

        num_id, ilvl = read_numbering_reference(ppr)
        if num_id is None and style is not None:
            num_id = style.num_id
            if ilvl is None:
                ilvl = style.num_level
        if num_id is None or num_id == 0:
            return ElementKind.PARAGRAPH, None, None

        ilvl = ilvl or 0
        level_def = self._numbering.level_for(num_id, ilvl)
        if level_def is None:
            LOGGER.debug("Unresolved numbering numId=%s ilvl=%s, treating as numbered", num_id, ilvl)
        if level_def is not None and level_def.is_bullet:
            return ElementKind.LIST_BULLET, ilvl, num_id
        return ElementKind.LIST_NUMBER, ilvl, num_id

    def _advance_heading(self, level: int) -> int:
        index = level - 1
        self._heading_counters[index] += 1
        for deeper in range(index + 1, MAX_TRACKED_LEVELS):
            self._heading_counters[deeper] = 0
        return self._heading_counters[index]

    def _advance_list(self, num_id: int, level: int) -> int:
        counters = self._list_counters.setdefault(num_id, [])
        while len(counters) <= level:
            counters.append(None)
        current = counters[level]
        counters[level] = (current if current is not None else self._numbering.start_for(num_id, level) - 1) + 1
        del counters[level + 1:]
        return counters[level]

    # ------------------------------------------------------------------
    # Style map accumulation
    def _observe(
        self,
        kind: ElementKind,
        style_id: Optional[str],
        direct: Dict[str, object],
        runs: Tuple[TextRun, ...],
        num_id: Optional[int],
        level: Optional[int],
    ) -> None:
        if kind in self._observed:
            return
        context = CascadeContext(
            kind=kind, catalog=self._styles, style_id=style_id, paragraph_properties=direct, runs=runs
        )
        self._observed[kind] = resolve_style(context)
        if style_id and self._styles.get(style_id) is not None:
            self._style_ids[kind] = style_id
        if kind.is_list and num_id is not None:
            instance = self._numbering.get_instance(num_id)
            if instance is not None:
                self._list_abstract_ids[kind] = instance.abstract_num_id
            if kind is ElementKind.LIST_NUMBER:
                level_def = self._numbering.level_for(num_id, level or 0)
                template = level_text_to_template(level_def.level_text if level_def else None)
                if template:
                    self._numbering_formats["list"] = template

    def _build_style_map(self, margins: PageMargins) -> DocumentStyleMap:
        styles: Dict[ElementKind, ElementStyle] = {}
        style_ids = dict(self._style_ids)
        for kind in ElementKind:
            if kind not in style_ids:
                definition = self._lookup_kind_style(kind)
                if definition is not None:
                    style_ids[kind] = definition.style_id
            styles[kind] = self._observed.get(kind) or resolve_style(
                CascadeContext(kind=kind, catalog=self._styles, style_id=style_ids.get(kind))
            )

        list_abstract_ids = dict(self._list_abstract_ids)
        for kind, bullet in ((ElementKind.LIST_NUMBER, False), (ElementKind.LIST_BULLET, True)):
            if kind in list_abstract_ids:
                continue
            definition = self._styles.get(style_ids.get(kind))
            preferred = []
            if definition is not None and definition.num_id:
                instance = self._numbering.get_instance(definition.num_id)
                if instance is not None:
                    preferred.append(instance.abstract_num_id)
            abstract = self._numbering.find_abstract(bullet, preferred)
            if abstract is not None:
                list_abstract_ids[kind] = abstract.abstract_num_id

        return DocumentStyleMap(
            styles=styles,
            numbering_formats=self._collect_numbering_formats(style_ids),
            page_margins=margins,
            style_ids=style_ids,
            list_abstract_ids=list_abstract_ids,
        )

    def _lookup_kind_style(self, kind: ElementKind) -> Optional[StyleDefinition]:
        names, ids = KIND_STYLE_CANDIDATES[kind]
        if kind is ElementKind.PARAGRAPH:
            default = self._styles.default_for("paragraph")
            if default is not None:
                return default
        found = self._styles.find_by_name(*names)
        if found is not None:
            return found
        for style_id in ids:
            found = self._styles.get(style_id)
            if found is not None:
                return found
        return None

    def _collect_numbering_formats(self, style_ids: Dict[ElementKind, str]) -> Dict[str, str]:
        formats = dict(DEFAULT_NUMBERING_FORMATS)
        for level in range(1, 5):
            definition = self._styles.get(style_ids.get(ElementKind.heading(level)))
            if definition is None or not definition.num_id:
                continue
            ilvl = definition.num_level if definition.num_level is not None else level - 1
            level_def = self._numbering.level_for(definition.num_id, ilvl)
            template = level_text_to_template(level_def.level_text if level_def else None)
            if template:
                formats[f"heading{level}"] = template
        formats.update(self._numbering_formats)
        return formats

    # ------------------------------------------------------------------
    # Structure and section
    def _build_structure(self, elements: List[DocumentElement]) -> DocumentStructure:
        heading_levels = set()
        last_headings = [0] * MAX_TRACKED_LEVELS
        last_lists = [0] * MAX_TRACKED_LEVELS
        for element in elements:
            if element.kind.is_heading:
                index = element.kind.heading_level - 1
                heading_levels.add(index + 1)
                last_headings[index] = max(last_headings[index], element.number or 0)
            elif element.kind is ElementKind.LIST_NUMBER:
                slot = min(element.level or 0, MAX_TRACKED_LEVELS - 1)
                last_lists[slot] = max(last_lists[slot], element.number or 0)
        return DocumentStructure(
            heading_levels=tuple(sorted(heading_levels)),
            has_numbered_list=any(e.kind is ElementKind.LIST_NUMBER for e in elements),
            has_bullet_list=any(e.kind is ElementKind.LIST_BULLET for e in elements),
            last_heading_numbers=tuple(last_headings),
            last_list_numbers=tuple(last_lists),
        )

    def _read_page_margins(self, sect_pr: ET.Element) -> PageMargins:
        values = {}
        for side in ("top", "bottom", "left", "right"):
            twips = get_int_attr(sect_pr, "w:pgMar", f"w:{side}")
            if twips is not None:
                values[side] = twips_to_points(abs(twips))
        return PageMargins(**values)
