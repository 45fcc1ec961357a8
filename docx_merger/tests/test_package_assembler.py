"""Tests for serializing merged streams back into DOCX packages."""
import io
import unittest
import zipfile
from dataclasses import replace
from unittest import mock
from xml.etree import ElementTree as ET

from docx_merger.errors import PackagingError
from docx_merger.merge.engine import merge_documents
from docx_merger.merge.settings import MergeMode, MergeSettings
from docx_merger.model.elements import ElementKind
from docx_merger.parser.document_reader import parse_docx
from docx_merger.parser.text_parser import parse_text
from docx_merger.renderer.numbering_writer import NumberingWriter, template_to_level_text
from docx_merger.renderer.package_assembler import PackageAssembler, assemble
from docx_merger.tests.fixtures import (
    NUMBERING_XML,
    bullet,
    build_docx,
    heading,
    numbered,
    paragraph,
    part_names,
    read_part,
    run,
)

NS = {"w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main"}
W = "{%s}" % NS["w"]


def body_paragraphs(data: bytes):
    root = ET.fromstring(read_part(data, "word/document.xml"))
    result = []
    for p in root.find("w:body", NS).findall("w:p", NS):
        style = p.find("w:pPr/w:pStyle", NS)
        num = p.find("w:pPr/w:numPr/w:numId", NS)
        text = "".join(t.text or "" for t in p.iter(W + "t"))
        result.append(
            (
                style.get(W + "val") if style is not None else None,
                num.get(W + "val") if num is not None else None,
                text,
            )
        )
    return result


class PackageAssemblerTest(unittest.TestCase):
    def setUp(self) -> None:
        self.main_bytes = build_docx(
            [heading("Plan", 1), paragraph("Intro text"), numbered("a"), numbered("b"), numbered("c")]
        )
        self.main = replace(parse_docx(self.main_bytes, "main", "main.docx"), is_main_document=True)
        other_bytes = build_docx(
            [
                numbered("x"),
                numbered("y"),
                paragraph(runs=[run("fancy", '<w:rFonts w:ascii="Comic Sans MS"/><w:b/>')]),
            ]
        )
        self.other = replace(parse_docx(other_bytes, "b", "b.docx"), order=1)

    def merged(self, **settings) -> bytes:
        stream = merge_documents(self.main, [self.other], MergeSettings(**settings))[0]
        return assemble(stream)

    def test_archive_layout_and_copied_parts(self) -> None:
        data = self.merged()
        names = part_names(data)
        self.assertEqual(names[0], "[Content_Types].xml")
        self.assertIn("word/styles.xml", names)
        self.assertEqual(read_part(data, "word/styles.xml"), read_part(self.main_bytes, "word/styles.xml"))
        self.assertEqual(read_part(data, "_rels/.rels"), read_part(self.main_bytes, "_rels/.rels"))
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            self.assertTrue(all(info.compress_type == zipfile.ZIP_DEFLATED for info in archive.infolist()))

    def test_paragraphs_reference_authority_styles(self) -> None:
        paragraphs = body_paragraphs(self.merged())
        self.assertEqual(paragraphs[0], ("Heading1", None, "Plan"))
        self.assertEqual(paragraphs[1], ("Normal", None, "Intro text"))
        self.assertEqual([p[1] for p in paragraphs[2:5]], ["1", "1", "1"])
        self.assertEqual(paragraphs[5][2], "━━━ b.docx ━━━")
        self.assertEqual(paragraphs[6], ("ListParagraph", "3", "x"))
        self.assertEqual(paragraphs[7], ("ListParagraph", "3", "y"))
        self.assertEqual(paragraphs[8], ("Normal", None, "fancy"))

    def test_continued_list_gets_start_override(self) -> None:
        data = self.merged()
        original = read_part(self.main_bytes, "word/numbering.xml")
        numbering = read_part(data, "word/numbering.xml")
        closing = original.rfind(b"</w:numbering>")
        self.assertTrue(numbering.startswith(original[:closing]))
        self.assertIn(
            b'<w:num w:numId="3"><w:abstractNumId w:val="1"/>'
            b'<w:lvlOverride w:ilvl="0"><w:startOverride w:val="4"/></w:lvlOverride></w:num>',
            numbering,
        )

    def test_restarted_list_overrides_start(self) -> None:
        numbering = read_part(self.merged(mode=MergeMode.SIMPLE_MERGE), "word/numbering.xml")
        self.assertIn(
            b'<w:num w:numId="3"><w:abstractNumId w:val="1"/>'
            b'<w:lvlOverride w:ilvl="0"><w:startOverride w:val="1"/></w:lvlOverride></w:num>',
            numbering,
        )

    def test_independent_lists_in_one_document_each_restart(self) -> None:
        numbering_xml = NUMBERING_XML.replace(
            "</w:numbering>", '<w:num w:numId="3"><w:abstractNumId w:val="1"/></w:num></w:numbering>'
        )
        body = [numbered("p"), numbered("q"), paragraph("between"), numbered("r", num_id=3)]
        other = replace(parse_docx(build_docx(body, numbering_xml=numbering_xml), "c", "c.docx"), order=1)
        stream = merge_documents(self.main, [other], MergeSettings(mode=MergeMode.STYLE_ONLY))[0]
        data = assemble(stream)

        numbering = read_part(data, "word/numbering.xml")
        self.assertEqual(numbering.count(b'<w:startOverride w:val="1"/>'), 2)
        nums = [p[1] for p in body_paragraphs(data) if p[1] is not None]
        self.assertEqual(nums, ["3", "3", "4"])

    def test_foreign_font_overrides_removed_but_emphasis_kept(self) -> None:
        root = ET.fromstring(read_part(self.merged(), "word/document.xml"))
        fancy = [p for p in root.iter(W + "p") if "".join(t.text or "" for t in p.iter(W + "t")) == "fancy"][0]
        rpr = fancy.find("w:r/w:rPr", NS)
        self.assertIsNone(rpr.find("w:rFonts", NS))
        self.assertIsNotNone(rpr.find("w:b", NS))

    def test_edited_authority_style_is_applied(self) -> None:
        style_map = self.main.style_map.with_style(ElementKind.PARAGRAPH, {"font_size": 14.0, "alignment": "center"})
        self.main = replace(self.main, style_map=style_map)
        root = ET.fromstring(read_part(self.merged(), "word/document.xml"))
        for p in root.iter(W + "p"):
            text = "".join(t.text or "" for t in p.iter(W + "t"))
            if text in ("Intro text", "fancy"):
                self.assertEqual(p.find("w:pPr/w:jc", NS).get(W + "val"), "center")
                self.assertEqual(p.find("w:r/w:rPr/w:sz", NS).get(W + "val"), "28")

    def test_section_margins_follow_style_map(self) -> None:
        root = ET.fromstring(read_part(self.merged(), "word/document.xml"))
        pg_mar = root.find("w:body/w:sectPr/w:pgMar", NS)
        self.assertEqual(pg_mar.get(W + "top"), "1440")
        self.assertEqual(pg_mar.get(W + "left"), "1080")
        self.assertIsNotNone(root.find("w:body/w:sectPr/w:pgSz", NS))

    def test_output_parses_back(self) -> None:
        doc = parse_docx(self.merged(), "out", "merged_smart.docx")
        numbers = [e.number for e in doc.elements if e.kind is ElementKind.LIST_NUMBER]
        self.assertEqual(numbers, [1, 2, 3, 4, 5])

    def test_style_only_text_document(self) -> None:
        text = replace(parse_text(b"first\nsecond", "t", "notes.txt"), order=1)
        stream = merge_documents(self.main, [text], MergeSettings(mode=MergeMode.STYLE_ONLY))[0]
        paragraphs = body_paragraphs(assemble(stream))
        self.assertEqual(paragraphs, [("Normal", None, "first"), ("Normal", None, "second")])


class SynthesizedNumberingTest(unittest.TestCase):
    def test_numbering_part_added_when_authority_has_none(self) -> None:
        main_bytes = build_docx([heading("Plan", 1), paragraph("text")], numbering_xml=None)
        main = parse_docx(main_bytes, "main", "main.docx")
        other = replace(parse_docx(build_docx([bullet("dot"), bullet("dash")]), "b", "b.docx"), order=1)
        data = assemble(merge_documents(main, [other], MergeSettings())[0])

        self.assertIn("word/numbering.xml", part_names(data))
        content_types = read_part(data, "[Content_Types].xml")
        self.assertIn(b'<Override PartName="/word/numbering.xml"', content_types)
        rels = read_part(data, "word/_rels/document.xml.rels")
        self.assertIn(b'Id="rId2"', rels)
        self.assertIn(b'relationships/numbering" Target="numbering.xml"', rels)

        parsed = parse_docx(data, "out", "out.docx")
        kinds = [e.kind for e in parsed.elements if e.text in ("dot", "dash")]
        self.assertEqual(kinds, [ElementKind.LIST_BULLET, ElementKind.LIST_BULLET])

    def test_level_text_from_template(self) -> None:
        self.assertEqual(template_to_level_text("{n})", 0), "%1)")
        self.assertEqual(template_to_level_text("{n}.", 2), "%3.")
        self.assertEqual(template_to_level_text("{n}.{n}", 1), "%1.%2")


class PackagingFailureTest(unittest.TestCase):
    def setUp(self) -> None:
        main = parse_docx(build_docx([numbered("a")]), "main", "main.docx")
        other = replace(parse_docx(build_docx([numbered("b")]), "b", "b.docx"), order=1)
        self.stream = merge_documents(main, [other], MergeSettings())[0]

    def test_unexpected_errors_become_packaging_errors(self) -> None:
        with mock.patch.object(NumberingWriter, "splice", side_effect=ValueError("boom")):
            with self.assertRaises(PackagingError) as ctx:
                PackageAssembler().assemble(self.stream)
        self.assertIn("boom", str(ctx.exception))

    def test_authority_without_package(self) -> None:
        authority = replace(self.stream.authority, package=None)
        with self.assertRaises(PackagingError):
            assemble(self.stream, authority)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
