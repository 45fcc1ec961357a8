"""Tests for numbering parser behavior."""
import unittest
from xml.etree import ElementTree as ET

from docx_merger.parser.numbering_parser import NumberingParser


NUMBERING_XML = """
<w:numbering xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:abstractNum w:abstractNumId="1">
    <w:multiLevelType w:val="multilevel"/>
    <w:name w:val="List Bullet"/>
    <w:lvl w:ilvl="0">
      <w:start w:val="1"/>
      <w:numFmt w:val="bullet"/>
      <w:lvlText w:val="•"/>
      <w:lvlJc w:val="left"/>
      <w:pPr>
        <w:ind w:left="720" w:hanging="360"/>
      </w:pPr>
    </w:lvl>
    <w:lvl w:ilvl="1">
      <w:start w:val="1"/>
      <w:numFmt w:val="decimal"/>
      <w:lvlText w:val="%2."/>
    </w:lvl>
  </w:abstractNum>
  <w:abstractNum w:abstractNumId="3">
    <w:lvl w:ilvl="0">
      <w:start w:val="5"/>
      <w:numFmt w:val="upperRoman"/>
      <w:lvlText w:val="%1."/>
    </w:lvl>
  </w:abstractNum>
  <w:num w:numId="5">
    <w:abstractNumId w:val="1"/>
    <w:lvlOverride w:ilvl="0">
      <w:startOverride w:val="3"/>
    </w:lvlOverride>
  </w:num>
  <w:num w:numId="6">
    <w:abstractNumId w:val="3"/>
  </w:num>
</w:numbering>
"""


class NumberingParserTest(unittest.TestCase):
    """Ensure numbering parser captures definitions correctly."""

    def setUp(self) -> None:
        self.tree = ET.ElementTree(ET.fromstring(NUMBERING_XML))
        self.catalog = NumberingParser(self.tree).parse()

    def test_abstracts_parsed(self) -> None:
        abstract = self.catalog.get_abstract(1)
        self.assertIsNotNone(abstract)
        assert abstract
        self.assertEqual(abstract.name, "List Bullet")
        self.assertTrue(abstract.is_bullet)
        level0 = abstract.levels[0]
        self.assertEqual(level0.num_format, "bullet")
        self.assertEqual(level0.level_text, "•")
        self.assertEqual(level0.alignment, "left")
        self.assertEqual(abstract.levels[1].level_text, "%2.")

    def test_instances_and_overrides(self) -> None:
        instance = self.catalog.get_instance(5)
        self.assertIsNotNone(instance)
        assert instance
        self.assertEqual(instance.abstract_num_id, 1)
        self.assertEqual(instance.start_overrides, {0: 3})

    def test_start_values_honour_overrides_then_levels(self) -> None:
        self.assertEqual(self.catalog.start_for(5, 0), 3)
        self.assertEqual(self.catalog.start_for(5, 1), 1)
        self.assertEqual(self.catalog.start_for(6, 0), 5)
        self.assertEqual(self.catalog.start_for(99, 0), 1)

    def test_find_abstract_and_next_ids(self) -> None:
        self.assertEqual(self.catalog.find_abstract(bullet=False).abstract_num_id, 3)
        self.assertEqual(self.catalog.find_abstract(bullet=True, preferred=[3, 1]).abstract_num_id, 1)
        self.assertEqual(self.catalog.next_num_id(), 7)
        self.assertEqual(self.catalog.next_abstract_id(), 4)

    def test_missing_part_gives_empty_catalog(self) -> None:
        catalog = NumberingParser(None).parse()
        self.assertIsNone(catalog.level_for(1, 0))
        self.assertEqual(catalog.next_num_id(), 1)
        self.assertEqual(catalog.next_abstract_id(), 0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
