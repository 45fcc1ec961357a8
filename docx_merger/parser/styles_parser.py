"""Extract style definitions from styles.xml and produce a catalog."""
from __future__ import annotations

from typing import Dict, List, Optional
from xml.etree import ElementTree as ET

from docx_merger.model.style_model import StyleDefinition, StylesCatalog
from docx_merger.parser.property_reader import (
    read_numbering_reference,
    read_paragraph_properties,
    read_run_properties,
)
from docx_merger.utils.xml_utils import Namespaces, get_attr, get_int_attr, qn


class StylesParser:
    """Parse Word styles and resolve ``w:basedOn`` inheritance."""

    def __init__(self, styles_xml: Optional[ET.ElementTree]) -> None:
        self._styles_xml = styles_xml

    def parse(self) -> StylesCatalog:
        """Parse the XML tree and return a resolved catalog."""
        if self._styles_xml is None:
            return StylesCatalog({})
        root = self._styles_xml.getroot()
        raw_styles = self._collect_styles(root)
        resolved = self._resolve_inheritance(raw_styles)
        return StylesCatalog(resolved, self._collect_document_defaults(root))

    def _collect_document_defaults(self, root: ET.Element) -> Dict[str, object]:
        defaults: Dict[str, object] = {}
        doc_defaults = root.find("w:docDefaults", Namespaces.WORD)
        if doc_defaults is None:
            return defaults
        defaults.update(read_run_properties(doc_defaults.find("w:rPrDefault/w:rPr", Namespaces.WORD)))
        defaults.update(read_paragraph_properties(doc_defaults.find("w:pPrDefault/w:pPr", Namespaces.WORD)))
        return defaults

    def _collect_styles(self, root: ET.Element) -> Dict[str, StyleDefinition]:
        styles: Dict[str, StyleDefinition] = {}
        for style_el in root.findall("w:style", Namespaces.WORD):
            style_id = style_el.attrib.get(qn("w:styleId"))
            if not style_id:
                continue
            ppr = style_el.find("w:pPr", Namespaces.WORD)
            properties: Dict[str, object] = {}
            properties.update(read_run_properties(style_el.find("w:rPr", Namespaces.WORD)))
            properties.update(read_paragraph_properties(ppr))
            num_id, num_level = read_numbering_reference(ppr)
            styles[style_id] = StyleDefinition(
                style_id=style_id,
                style_type=style_el.attrib.get(qn("w:type"), "paragraph"),
                name=get_attr(style_el, "w:name", "w:val"),
                properties=properties,
                based_on=get_attr(style_el, "w:basedOn", "w:val"),
                is_default=style_el.attrib.get(qn("w:default")) in ("1", "true"),
                outline_level=get_int_attr(ppr, "w:outlineLvl", "w:val"),
                num_id=num_id,
                num_level=num_level,
            )
        return styles

    def _resolve_inheritance(self, raw_styles: Dict[str, StyleDefinition]) -> Dict[str, StyleDefinition]:
        resolved: Dict[str, StyleDefinition] = {}

        def resolve(style_id: str, stack: Optional[List[str]] = None) -> StyleDefinition:
            if style_id in resolved:
                return resolved[style_id]
            if stack is None:
                stack = []
            if style_id in stack:
                return raw_styles[style_id]
            stack.append(style_id)
            style = raw_styles[style_id]
            merged_props = dict(style.properties)
            parent_style = None
            if style.based_on and style.based_on in raw_styles:
                parent_style = resolve(style.based_on, stack)
                merged_props = {**parent_style.properties, **style.properties}
            resolved_style = StyleDefinition(
                style_id=style.style_id,
                style_type=style.style_type,
                name=style.name,
                properties=merged_props,
                based_on=style.based_on,
                is_default=style.is_default,
                outline_level=self._inherit(style.outline_level, parent_style, "outline_level"),
                num_id=self._inherit(style.num_id, parent_style, "num_id"),
                num_level=self._inherit(style.num_level, parent_style, "num_level"),
            )
            resolved[style_id] = resolved_style
            stack.pop()
            return resolved_style

        for style_id in raw_styles:
            resolve(style_id)
        return resolved

    @staticmethod
    def _inherit(value: Optional[int], parent: Optional[StyleDefinition], attr: str) -> Optional[int]:
        if value is not None or parent is None:
            return value
        return getattr(parent, attr)
