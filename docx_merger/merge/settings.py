"""Merge policy selection and flags."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict


class MergeMode(str, Enum):
    SMART_MERGE = "smartMerge"
    SIMPLE_MERGE = "simpleMerge"
    STYLE_ONLY = "styleOnly"


class SeparatorStyle(str, Enum):
    PAGE_BREAK = "pageBreak"
    LINE = "line"
    TITLE = "title"


OUTPUT_FORMATS = ("docx",)


@dataclass(frozen=True, slots=True)
class MergeSettings:
    """Selected merge mode plus the policy flags that refine it.

    ``add_section_break`` applies to smartMerge and ``add_separator`` to
    simpleMerge; both insert a separator of ``separator_style`` before every
    document after the first. ``prefix_heading_numbers`` only affects smartMerge.
    """

    mode: MergeMode = MergeMode.SMART_MERGE
    continue_numbering: bool = True
    add_section_break: bool = True
    add_separator: bool = True
    separator_style: SeparatorStyle = SeparatorStyle.TITLE
    strip_inline_formatting: bool = True
    prefix_heading_numbers: bool = False
    output_format: str = "docx"

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", MergeMode(self.mode))
        object.__setattr__(self, "separator_style", SeparatorStyle(self.separator_style))
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {self.output_format}")

    def updated(self, **changes: Any) -> "MergeSettings":
        """Return a copy with ``changes`` applied; unknown names raise ``TypeError``."""
        return replace(self, **changes)

    @property
    def separates_documents(self) -> bool:
        if self.mode is MergeMode.SMART_MERGE:
            return self.add_section_break
        if self.mode is MergeMode.SIMPLE_MERGE:
            return self.add_separator
        return False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "continue_numbering": self.continue_numbering,
            "add_section_break": self.add_section_break,
            "add_separator": self.add_separator,
            "separator_style": self.separator_style.value,
            "strip_inline_formatting": self.strip_inline_formatting,
            "prefix_heading_numbers": self.prefix_heading_numbers,
            "output_format": self.output_format,
        }
