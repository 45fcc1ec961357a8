"""Plain-text input: one body paragraph per non-blank line."""
from __future__ import annotations

from docx_merger.errors import ParseError
from docx_merger.model.document_model import ParsedDocument, SourceType
from docx_merger.model.elements import DocumentElement, ElementKind, TextRun
from docx_merger.utils.text_cleaner import clean_text, split_lines


def parse_text(data: bytes, doc_id: str, name: str) -> ParsedDocument:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(name, f"text is not valid UTF-8 ({exc.reason})") from exc

    elements = []
    for line in split_lines(clean_text(text)):
        elements.append(
            DocumentElement(
                kind=ElementKind.PARAGRAPH,
                runs=(TextRun(text=line),),
                element_id=f"p{len(elements)}",
            )
        )
    return ParsedDocument(id=doc_id, name=name, source_type=SourceType.TEXT, elements=tuple(elements))
