"""Allocate numbering instances for merged lists and splice them into numbering.xml."""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple
from xml.sax.saxutils import quoteattr

from docx_merger.model.numbering_model import BULLET_FORMAT, NumberingCatalog
from docx_merger.utils.logger import get_logger
from docx_merger.utils.xml_utils import W_NS

LOGGER = get_logger(__name__)

NUMBERING_LEVELS = 9
NUM_TAG_PATTERN = re.compile(rb"<w:num[\s>]")
CLEANUP_TAG = b"<w:numIdMacAtCleanup"
CLOSING_TAG = b"</w:numbering>"
BULLET_SYMBOLS = ("•", "◦", "▪")


def template_to_level_text(template: str, level: int) -> str:
    """Convert a ``{n}`` template into Word ``lvlText`` whose last placeholder is ``level``."""
    count = template.count("{n}")
    first = max(level + 2 - count, 1)
    pieces = template.split("{n}")
    out = [pieces[0]]
    for index, tail in enumerate(pieces[1:]):
        out.append(f"%{first + index}")
        out.append(tail)
    return "".join(out)


class NumberingWriter:
    """Collect ``w:num`` / ``w:abstractNum`` additions for one output package.

    Ids continue after the highest ones already defined in ``catalog`` so the
    authority's own instances stay valid.
    """

    def __init__(self, catalog: NumberingCatalog, list_template: str = "{n}.") -> None:
        self._catalog = catalog
        self._list_template = list_template
        self._next_num_id = catalog.next_num_id()
        self._next_abstract_id = catalog.next_abstract_id()
        self._abstract_xml: List[str] = []
        self._num_xml: List[str] = []
        self._synthesized: Dict[bool, int] = {}
        self._nums: Dict[Tuple[object, ...], int] = {}

    @property
    def has_additions(self) -> bool:
        return bool(self._abstract_xml or self._num_xml)

    def abstract_for(self, bullet: bool, preferred: Optional[int] = None) -> int:
        """Return an abstract numbering id of the requested flavour, synthesizing one if needed."""
        candidates = [preferred] if preferred is not None else []
        abstract = self._catalog.find_abstract(bullet, candidates)
        if abstract is not None:
            return abstract.abstract_num_id
        if bullet not in self._synthesized:
            abstract_id = self._next_abstract_id
            self._next_abstract_id += 1
            self._abstract_xml.append(self._render_abstract(abstract_id, bullet))
            self._synthesized[bullet] = abstract_id
            LOGGER.debug("Synthesized %s abstract numbering %d", "bullet" if bullet else "decimal", abstract_id)
        return self._synthesized[bullet]

    def num_for(self, key: Tuple[object, ...], abstract_id: int, starts: Optional[Dict[int, int]] = None) -> int:
        """Return the numId allocated for ``key``, creating the instance on first use."""
        if key in self._nums:
            return self._nums[key]
        num_id = self._next_num_id
        self._next_num_id += 1
        self._nums[key] = num_id
        self._num_xml.append(self._render_num(num_id, abstract_id, starts or {}))
        LOGGER.debug("Allocated numId %d (abstract %d) for %s", num_id, abstract_id, key)
        return num_id

    # ------------------------------------------------------------------
    def splice(self, numbering_xml: bytes) -> bytes:
        """Insert the additions into an existing numbering part, leaving its bytes otherwise untouched."""
        if not self.has_additions:
            return numbering_xml
        result = numbering_xml
        nums = "".join(self._num_xml).encode("utf-8")
        anchor = result.find(CLEANUP_TAG)
        if anchor < 0:
            anchor = result.rfind(CLOSING_TAG)
        if anchor < 0:
            raise ValueError("numbering part has no closing w:numbering tag")
        result = result[:anchor] + nums + result[anchor:]

        abstracts = "".join(self._abstract_xml).encode("utf-8")
        if abstracts:
            match = NUM_TAG_PATTERN.search(result)
            anchor = match.start() if match else result.rfind(CLOSING_TAG)
            result = result[:anchor] + abstracts + result[anchor:]
        return result

    def render_part(self) -> bytes:
        """A complete numbering part holding only the additions."""
        body = "".join(self._abstract_xml) + "".join(self._num_xml)
        return (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
            f'<w:numbering xmlns:w="{W_NS}">{body}</w:numbering>'
        ).encode("utf-8")

    # ------------------------------------------------------------------
    def _render_abstract(self, abstract_id: int, bullet: bool) -> str:
        levels = []
        for level in range(NUMBERING_LEVELS):
            if bullet:
                num_format = BULLET_FORMAT
                text = BULLET_SYMBOLS[level % len(BULLET_SYMBOLS)]
            else:
                num_format = "decimal"
                text = template_to_level_text(self._list_template, level)
            indent = 720 * (level + 1)
            levels.append(
                f'<w:lvl w:ilvl="{level}"><w:start w:val="1"/><w:numFmt w:val="{num_format}"/>'
                f"<w:lvlText w:val={quoteattr(text)}/><w:lvlJc w:val=\"left\"/>"
                f'<w:pPr><w:ind w:left="{indent}" w:hanging="360"/></w:pPr></w:lvl>'
            )
        return (
            f'<w:abstractNum w:abstractNumId="{abstract_id}">'
            f'<w:multiLevelType w:val="hybridMultilevel"/>{"".join(levels)}</w:abstractNum>'
        )

    def _render_num(self, num_id: int, abstract_id: int, starts: Dict[int, int]) -> str:
        overrides = "".join(
            f'<w:lvlOverride w:ilvl="{level}"><w:startOverride w:val="{start}"/></w:lvlOverride>'
            for level, start in sorted(starts.items())
        )
        return f'<w:num w:numId="{num_id}"><w:abstractNumId w:val="{abstract_id}"/>{overrides}</w:num>'
