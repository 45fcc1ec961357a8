"""Serialize an output stream into a DOCX package using the style authority's parts."""
from __future__ import annotations

import copy
import io
import posixpath
import zipfile
from typing import Dict, List, Optional, Tuple
from xml.etree import ElementTree as ET

from docx_merger.config import get_config
from docx_merger.errors import DocumentMergerError, PackagingError
from docx_merger.merge.engine import OutputElement, OutputStream, Separator
from docx_merger.model.document_model import ParsedDocument
from docx_merger.model.elements import ElementKind
from docx_merger.parser.docx_loader import CONTENT_TYPES_PATH, DocxPackage
from docx_merger.parser.rels_parser import RELTYPE_NUMBERING, rels_part_for
from docx_merger.parser.style_cascade import resolve_named_style
from docx_merger.renderer.numbering_writer import NumberingWriter
from docx_merger.renderer.paragraph_builder import build_paragraph, build_separator
from docx_merger.renderer.utils import split_attributes
from docx_merger.utils.logger import get_logger
from docx_merger.utils.units import points_to_twips
from docx_merger.utils.xml_utils import Namespaces, qn

LOGGER = get_logger(__name__)

NUMBERING_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
RELS_NS = Namespaces.RELS["rel"]
SECTION_LEADING_TAGS = ("headerReference", "footerReference", "footnotePr", "endnotePr", "type", "pgSz")


class PackageAssembler:
    """Build output archives. Every call either returns complete bytes or raises ``PackagingError``."""

    def __init__(self, separator_color: Optional[str] = None) -> None:
        self.separator_color = separator_color or get_config().separator_color

    def assemble(self, stream: OutputStream, authority: Optional[ParsedDocument] = None) -> bytes:
        authority = authority or stream.authority
        if authority.package is None:
            raise PackagingError(f"{authority.name} has no DOCX package to use as style authority")
        try:
            data = self._assemble(stream, authority, authority.package)
        except DocumentMergerError:
            raise
        except Exception as exc:
            raise PackagingError(f"Failed to assemble {stream.filename}: {exc}") from exc
        LOGGER.info("Assembled %s (%d bytes, %d elements)", stream.filename, len(data), len(stream.elements))
        return data

    # ------------------------------------------------------------------
    def _assemble(self, stream: OutputStream, authority: ParsedDocument, package: DocxPackage) -> bytes:
        writer = NumberingWriter(authority.numbering, authority.style_map.numbering_formats.get("list", "{n}."))
        starts = self._collect_list_starts(stream)

        root = ET.Element(qn("w:document"))
        body = ET.SubElement(root, qn("w:body"))
        for item in stream.items:
            if isinstance(item, Separator):
                body.append(build_separator(item, self.separator_color))
            else:
                body.append(self._paragraph(item, authority, writer, starts))
        body.append(self._section_properties(authority, package))

        parts: Dict[str, bytes] = dict(package.raw_parts)
        parts[package.document_part] = ET.tostring(root, encoding="UTF-8", xml_declaration=True)

        if writer.has_additions:
            if package.numbering_part:
                parts[package.numbering_part] = writer.splice(parts[package.numbering_part])
            else:
                self._add_numbering_part(parts, package, writer.render_part())
        return self._write_archive(parts)

    def _paragraph(
        self,
        item: OutputElement,
        authority: ParsedDocument,
        writer: NumberingWriter,
        starts: Dict[Tuple[object, ...], Dict[int, int]],
    ) -> ET.Element:
        element = item.element
        style_map = authority.style_map
        kind = element.kind
        style_id = style_map.style_ids.get(kind)
        if item.from_authority:
            style_id = element.style_id or style_id
            attributes = dict(element.paragraph_properties)
            attributes.update(item.style.diff(authority.baseline_style_map.resolve(kind)))
        elif style_id:
            attributes = item.style.diff(resolve_named_style(kind, authority.styles, style_id))
        else:
            attributes = item.style.as_dict()
        paragraph_attributes, run_attributes = split_attributes(attributes)
        return build_paragraph(
            element.runs,
            style_id=style_id,
            paragraph_attributes=paragraph_attributes,
            base_run_attributes=run_attributes,
            numbering=self._numbering_for(item, authority, writer, starts),
            keep_run_styles=item.from_authority,
        )

    def _numbering_for(
        self,
        item: OutputElement,
        authority: ParsedDocument,
        writer: NumberingWriter,
        starts: Dict[Tuple[object, ...], Dict[int, int]],
    ) -> Optional[Tuple[int, int]]:
        element = item.element
        if not element.kind.is_list:
            return None
        level = element.level or 0
        if item.from_authority and not item.renumbered and element.list_id is not None:
            return int(element.list_id), level

        bullet = element.kind is ElementKind.LIST_BULLET
        abstract_id = writer.abstract_for(bullet, authority.style_map.list_abstract_ids.get(element.kind))
        key = self._list_key(item)
        # A new w:num sharing an abstractNum keeps counting unless it overrides the start.
        return writer.num_for(key, abstract_id, starts.get(key, {})), level

    @staticmethod
    def _list_key(item: OutputElement) -> Tuple[object, ...]:
        return (item.origin_id, item.element.list_id, item.element.kind.value)

    def _collect_list_starts(self, stream: OutputStream) -> Dict[Tuple[object, ...], Dict[int, int]]:
        """First counter per level of every numbered list that needs its own instance."""
        starts: Dict[Tuple[object, ...], Dict[int, int]] = {}
        for item in stream.elements:
            element = item.element
            if element.kind is not ElementKind.LIST_NUMBER or element.number is None:
                continue
            if item.from_authority and not item.renumbered:
                continue
            starts.setdefault(self._list_key(item), {}).setdefault(element.level or 0, element.number)
        return starts

    # ------------------------------------------------------------------
    def _section_properties(self, authority: ParsedDocument, package: DocxPackage) -> ET.Element:
        body = package.require_document_xml().getroot().find("w:body", Namespaces.WORD)
        source = body.find("w:sectPr", Namespaces.WORD) if body is not None else None
        sect_pr = copy.deepcopy(source) if source is not None else ET.Element(qn("w:sectPr"))

        pg_mar = sect_pr.find("w:pgMar", Namespaces.WORD)
        if pg_mar is None:
            position = 0
            for index, child in enumerate(list(sect_pr)):
                if child.tag.split("}", 1)[-1] in SECTION_LEADING_TAGS:
                    position = index + 1
            pg_mar = ET.Element(qn("w:pgMar"))
            for name, value in (("header", "720"), ("footer", "720"), ("gutter", "0")):
                pg_mar.set(qn(f"w:{name}"), value)
            sect_pr.insert(position, pg_mar)

        margins = authority.style_map.page_margins
        for side in ("top", "bottom", "left", "right"):
            pg_mar.set(qn(f"w:{side}"), str(points_to_twips(getattr(margins, side))))
        return sect_pr

    def _add_numbering_part(self, parts: Dict[str, bytes], package: DocxPackage, payload: bytes) -> None:
        document_dir = posixpath.dirname(package.document_part)
        part_name = posixpath.join(document_dir, "numbering.xml")
        parts[part_name] = payload

        override = f'<Override PartName="/{part_name}" ContentType="{NUMBERING_CONTENT_TYPE}"/>'
        parts[CONTENT_TYPES_PATH] = self._insert_before(parts[CONTENT_TYPES_PATH], b"</Types>", override)

        rels_name = rels_part_for(package.document_part)
        r_id = package.relationships.next_id(package.document_part)
        relationship = (
            f'<Relationship Id="{r_id}" Type="{RELTYPE_NUMBERING}" '
            f'Target="{posixpath.relpath(part_name, document_dir or ".")}"/>'
        )
        if rels_name in parts:
            parts[rels_name] = self._insert_before(parts[rels_name], b"</Relationships>", relationship)
        else:
            parts[rels_name] = (
                '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
                f'<Relationships xmlns="{RELS_NS}">{relationship}</Relationships>'
            ).encode("utf-8")
        LOGGER.debug("Added numbering part %s to output package", part_name)

    @staticmethod
    def _insert_before(payload: bytes, closing_tag: bytes, markup: str) -> bytes:
        anchor = payload.rfind(closing_tag)
        if anchor < 0:
            raise ValueError(f"missing {closing_tag.decode()} in package part")
        return payload[:anchor] + markup.encode("utf-8") + payload[anchor:]

    @staticmethod
    def _write_archive(parts: Dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        ordered: List[str] = [CONTENT_TYPES_PATH] + [name for name in parts if name != CONTENT_TYPES_PATH]
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for name in ordered:
                archive.writestr(name, parts[name])
        return buffer.getvalue()


def assemble(stream: OutputStream, authority: Optional[ParsedDocument] = None) -> bytes:
    """Serialize ``stream`` to DOCX bytes with ``authority`` (default: the stream's) as style source."""
    return PackageAssembler().assemble(stream, authority)
