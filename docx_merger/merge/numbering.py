"""Counter continuation across document boundaries and heading number prefixes."""
from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Optional, Sequence

from docx_merger.model.document_model import MAX_TRACKED_LEVELS
from docx_merger.model.elements import DocumentElement, ElementKind

NUMBER_PLACEHOLDER = "{n}"
LEADING_NUMBER_PATTERN = re.compile(r"^\s*(?:\d|[IVXivx]+[.)]\s|제\s*\d)")


def format_number(template: str, numbers: Sequence[int]) -> str:
    """Fill each ``{n}`` of ``template`` with successive ``numbers`` (missing or zero -> 1)."""
    parts = template.split(NUMBER_PLACEHOLDER)
    out = [parts[0]]
    for index, tail in enumerate(parts[1:]):
        value = numbers[index] if index < len(numbers) else 0
        out.append(str(value or 1))
        out.append(tail)
    return "".join(out)


def has_leading_number(text: str) -> bool:
    return bool(LEADING_NUMBER_PATTERN.match(text))


def _slot(element: DocumentElement) -> int:
    if element.kind.is_heading:
        return element.kind.heading_level - 1
    return min(element.level or 0, MAX_TRACKED_LEVELS - 1)


class _LevelTrack:
    """Running counters of one family (headings or numbered lists)."""

    def __init__(self) -> None:
        self.running: List[int] = [0] * MAX_TRACKED_LEVELS
        self.offsets: List[int] = [0] * MAX_TRACKED_LEVELS

    def begin(self, carry: bool) -> None:
        self.offsets = list(self.running) if carry else [0] * MAX_TRACKED_LEVELS

    def shift(self, slot: int, number: int) -> int:
        shifted = number + self.offsets[slot]
        for deeper in range(slot + 1, MAX_TRACKED_LEVELS):
            self.offsets[deeper] = 0
            self.running[deeper] = 0
        self.running[slot] = shifted
        return shifted


class NumberingContinuation:
    """Renumber headings and numbered list items of consecutive documents.

    With ``carry`` enabled every document after the first continues the counters
    reached by the documents before it: its level-L numbers are shifted by the
    running counter at level L, and deeper offsets are dropped as soon as a
    shallower item of that document appears. Without ``carry`` numbers pass
    through unchanged, so each document restarts at its own values.
    """

    def __init__(self, carry: bool) -> None:
        self.carry = carry
        self._headings = _LevelTrack()
        self._lists = _LevelTrack()
        self._heading_path: List[int] = [0] * MAX_TRACKED_LEVELS

    def begin_document(self) -> None:
        self._headings.begin(self.carry)
        self._lists.begin(self.carry)

    def renumber(self, element: DocumentElement) -> DocumentElement:
        if element.number is None:
            return element
        if element.kind.is_heading:
            number = self._headings.shift(_slot(element), element.number)
            self._record_heading(element.kind.heading_level, number)
        elif element.kind is ElementKind.LIST_NUMBER:
            number = self._lists.shift(_slot(element), element.number)
        else:
            return element
        if number == element.number:
            return element
        return replace(element, number=number)

    def heading_numbers(self, level: int) -> List[int]:
        """Counters of heading levels 1..``level`` as emitted so far."""
        return self._heading_path[:level]

    def heading_prefix(self, element: DocumentElement, template: Optional[str]) -> Optional[str]:
        """Prefix text such as ``"2.3 "`` for a heading whose text has no number yet."""
        if not template or not element.kind.is_heading or has_leading_number(element.text):
            return None
        return format_number(template, self.heading_numbers(element.kind.heading_level)) + " "

    def _record_heading(self, level: int, number: int) -> None:
        self._heading_path[level - 1] = number
        for deeper in range(level, MAX_TRACKED_LEVELS):
            self._heading_path[deeper] = 0
