"""Tests for input type detection, plain text parsing, and the page-description policy."""
import unittest
from unittest import mock

from docx_merger.config import MergerConfig
from docx_merger.errors import ParseError, UnsupportedFormat
from docx_merger.model.document_model import SourceType
from docx_merger.model.elements import ElementKind
from docx_merger.parser.document_reader import detect_source_type, parse_document
from docx_merger.parser.text_parser import parse_text
from docx_merger.tests.fixtures import build_docx, heading


class SourceTypeDetectionTest(unittest.TestCase):
    def test_extensions(self) -> None:
        self.assertEqual(detect_source_type("Report.DOCX"), SourceType.DOCX)
        self.assertEqual(detect_source_type("notes.txt"), SourceType.TEXT)
        self.assertEqual(detect_source_type("scan.pdf"), SourceType.PDF)
        self.assertEqual(detect_source_type("sheet.xlsx"), SourceType.UNKNOWN)
        self.assertEqual(detect_source_type("README"), SourceType.UNKNOWN)


class TextParserTest(unittest.TestCase):
    def test_one_paragraph_per_non_blank_line(self) -> None:
        data = "\ufeffFirst line\r\n\r\n  \nSecond\x07 line  \nThird".encode("utf-8")
        doc = parse_text(data, "t1", "notes.txt")
        self.assertEqual([e.text for e in doc.elements], ["First line", "Second line", "Third"])
        self.assertTrue(all(e.kind is ElementKind.PARAGRAPH for e in doc.elements))
        self.assertFalse(doc.structure.has_headings)
        self.assertFalse(doc.structure.has_numbered_list)
        self.assertEqual(doc.source_type, SourceType.TEXT)
        self.assertFalse(doc.is_structured)
        self.assertTrue(doc.is_mergeable)

    def test_invalid_utf8_is_a_parse_error(self) -> None:
        with self.assertRaises(ParseError):
            parse_text(b"\xff\xfe\xfa", "t1", "latin.txt")


class ParseDocumentTest(unittest.TestCase):
    def test_dispatches_on_filename(self) -> None:
        doc = parse_document(build_docx([heading("Hello")]), name="a.docx")
        self.assertEqual(doc.source_type, SourceType.DOCX)
        self.assertTrue(doc.is_structured)
        self.assertTrue(doc.id)

    def test_explicit_source_type_wins(self) -> None:
        doc = parse_document(b"line", source_type="txt", name="upload.bin", doc_id="fixed")
        self.assertEqual(doc.source_type, SourceType.TEXT)
        self.assertEqual(doc.id, "fixed")

    def test_unknown_types_are_rejected(self) -> None:
        with self.assertRaises(UnsupportedFormat) as ctx:
            parse_document(b"data", name="image.png")
        self.assertEqual(ctx.exception.filename, "image.png")

    def test_page_description_placeholder(self) -> None:
        config = MergerConfig(page_description_policy="placeholder")
        with mock.patch("docx_merger.parser.document_reader.get_config", return_value=config):
            doc = parse_document(b"%PDF-1.7", name="scan.pdf")
        self.assertTrue(doc.unsupported)
        self.assertEqual(doc.elements, ())
        self.assertFalse(doc.is_mergeable)

    def test_page_description_reject(self) -> None:
        config = MergerConfig(page_description_policy="reject")
        with mock.patch("docx_merger.parser.document_reader.get_config", return_value=config):
            with self.assertRaises(UnsupportedFormat):
                parse_document(b"%PDF-1.7", name="scan.pdf")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
