"""Aggregate model for one parsed input document."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, TYPE_CHECKING

from docx_merger.model.elements import DocumentElement
from docx_merger.model.numbering_model import NumberingCatalog
from docx_merger.model.style_model import DocumentStyleMap, StylesCatalog

if TYPE_CHECKING:
    from docx_merger.parser.docx_loader import DocxPackage

MAX_TRACKED_LEVELS = 4


class SourceType(str, Enum):
    DOCX = "docx"
    TEXT = "txt"
    PDF = "pdf"
    UNKNOWN = "unknown"


def _zero_counters() -> Tuple[int, ...]:
    return (0,) * MAX_TRACKED_LEVELS


@dataclass(frozen=True, slots=True)
class DocumentStructure:
    """Derived summary of which headings and lists a document uses.

    ``last_heading_numbers`` and ``last_list_numbers`` hold the highest counter
    seen per level (headings 1-4, list levels 0-3 with deeper levels folded
    into the last slot) and seed numbering continuation during a merge.
    """

    heading_levels: Tuple[int, ...] = ()
    has_numbered_list: bool = False
    has_bullet_list: bool = False
    last_heading_numbers: Tuple[int, ...] = field(default_factory=_zero_counters)
    last_list_numbers: Tuple[int, ...] = field(default_factory=_zero_counters)

    @property
    def has_headings(self) -> bool:
        return bool(self.heading_levels)


@dataclass(frozen=True, slots=True)
class ParsedDocument:
    """A document held by a merge session.

    ``baseline_style_map`` is the style map as parsed; ``style_map`` may be edited
    afterwards. ``package`` keeps the raw container parts of DOCX input so the
    document can later serve as style authority. ``unsupported`` marks the empty
    placeholder produced for input types that are recognized but not parsed.
    """

    id: str
    name: str
    source_type: SourceType
    elements: Tuple[DocumentElement, ...] = ()
    style_map: DocumentStyleMap = field(default_factory=DocumentStyleMap)
    baseline_style_map: DocumentStyleMap = field(default_factory=DocumentStyleMap)
    structure: DocumentStructure = field(default_factory=DocumentStructure)
    numbering: NumberingCatalog = field(default_factory=NumberingCatalog, compare=False, repr=False)
    styles: StylesCatalog = field(default_factory=lambda: StylesCatalog({}), compare=False, repr=False)
    package: Optional["DocxPackage"] = field(default=None, compare=False, repr=False)
    is_main_document: bool = False
    order: int = 0
    unsupported: bool = False

    @property
    def is_structured(self) -> bool:
        return self.source_type is SourceType.DOCX and self.package is not None

    @property
    def is_mergeable(self) -> bool:
        return not self.unsupported and self.source_type in (SourceType.DOCX, SourceType.TEXT)
