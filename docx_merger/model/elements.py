"""Canonical element stream produced by the parsers and consumed by the merge engine."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple


class ElementKind(str, Enum):
    """Structural classification of a paragraph."""

    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    HEADING4 = "heading4"
    PARAGRAPH = "paragraph"
    LIST_NUMBER = "listNumber"
    LIST_BULLET = "listBullet"

    @classmethod
    def heading(cls, level: int) -> "ElementKind":
        if not 1 <= level <= 4:
            raise ValueError(f"Heading level out of range: {level}")
        return cls(f"heading{level}")

    @property
    def is_heading(self) -> bool:
        return self.value.startswith("heading")

    @property
    def is_list(self) -> bool:
        return self in (ElementKind.LIST_NUMBER, ElementKind.LIST_BULLET)

    @property
    def heading_level(self) -> Optional[int]:
        if not self.is_heading:
            return None
        return int(self.value[-1])


@dataclass(frozen=True, slots=True)
class TextRun:
    """Contiguous text sharing the same inline overrides. ``None`` means inherited."""

    text: str
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    color: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    style_id: Optional[str] = None

    def without_font_overrides(self) -> "TextRun":
        """Drop font family, size, and colour overrides along with the character style."""
        return replace(self, color=None, font_family=None, font_size=None, style_id=None)


@dataclass(frozen=True, slots=True)
class DocumentElement:
    """One paragraph-level unit of a parsed document.

    ``number`` carries the running counter for numbered list items and headings.
    ``list_id`` identifies the source list instance (the document-local ``numId``)
    and ``style_id`` the document-local paragraph style; neither is portable
    between packages.
    """

    kind: ElementKind
    runs: Tuple[TextRun, ...]
    element_id: str = ""
    level: Optional[int] = None
    list_id: Optional[str] = None
    number: Optional[int] = None
    num_format: Optional[str] = None
    style_id: Optional[str] = None
    paragraph_properties: Dict[str, object] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)
