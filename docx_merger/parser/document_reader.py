"""Entry point that turns raw file bytes into a ParsedDocument."""
from __future__ import annotations

import uuid
from pathlib import PurePath
from typing import Optional, Union

from docx_merger.config import get_config
from docx_merger.errors import UnsupportedFormat
from docx_merger.model.document_model import ParsedDocument, SourceType
from docx_merger.parser.document_parser import DocumentParser
from docx_merger.parser.docx_loader import DocxPackage
from docx_merger.parser.numbering_parser import NumberingParser
from docx_merger.parser.styles_parser import StylesParser
from docx_merger.parser.text_parser import parse_text
from docx_merger.utils.logger import get_logger

LOGGER = get_logger(__name__)

EXTENSION_TYPES = {
    ".docx": SourceType.DOCX,
    ".txt": SourceType.TEXT,
    ".pdf": SourceType.PDF,
}


def detect_source_type(filename: str) -> SourceType:
    return EXTENSION_TYPES.get(PurePath(filename).suffix.lower(), SourceType.UNKNOWN)


def parse_docx(data: bytes, doc_id: str, name: str) -> ParsedDocument:
    package = DocxPackage.from_bytes(data, name)
    styles = StylesParser(package.get_styles_xml()).parse()
    numbering = NumberingParser(package.get_numbering_xml()).parse()
    return DocumentParser(package, styles, numbering).parse(doc_id, name)


def parse_document(
    data: bytes,
    source_type: Union[SourceType, str, None] = None,
    name: str = "document",
    doc_id: Optional[str] = None,
) -> ParsedDocument:
    """Parse ``data`` according to ``source_type`` (detected from ``name`` when omitted).

    Raises ``ParseError`` for malformed input and ``UnsupportedFormat`` for types
    that cannot be parsed. Page-description input follows
    ``MergerConfig.page_description_policy``.
    """
    if not source_type:
        source_type = detect_source_type(name)
    elif not isinstance(source_type, SourceType):
        source_type = EXTENSION_TYPES.get(f".{source_type}".lower(), SourceType.UNKNOWN)
    doc_id = doc_id or uuid.uuid4().hex

    if source_type is SourceType.DOCX:
        return parse_docx(data, doc_id, name)
    if source_type is SourceType.TEXT:
        return parse_text(data, doc_id, name)
    if source_type is SourceType.PDF and get_config().page_description_policy == "placeholder":
        LOGGER.warning("%s: page-description input is not parsed, adding an empty placeholder", name)
        return ParsedDocument(id=doc_id, name=name, source_type=source_type, unsupported=True)
    raise UnsupportedFormat(name, source_type.value)
