"""Combine parsed documents into output element streams under one style authority."""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import PurePath
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from docx_merger.config import get_config
from docx_merger.errors import InvalidMainDocument, NoMainDocument, NoMergeableDocuments
from docx_merger.merge.numbering import NumberingContinuation
from docx_merger.merge.settings import MergeMode, MergeSettings, SeparatorStyle
from docx_merger.model.document_model import ParsedDocument
from docx_merger.model.elements import DocumentElement, TextRun
from docx_merger.model.style_model import ElementStyle
from docx_merger.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class OutputElement:
    """An element placed in an output stream together with the authority style for its kind.

    ``from_authority`` marks elements that came from the style authority itself;
    ``source_number`` keeps the counter the element had before renumbering.
    """

    element: DocumentElement
    style: ElementStyle
    origin_id: str
    from_authority: bool = False
    source_number: Optional[int] = None

    @property
    def renumbered(self) -> bool:
        return self.element.number != self.source_number


@dataclass(frozen=True, slots=True)
class Separator:
    """Marker inserted between documents of a merged stream."""

    style: SeparatorStyle
    title: str = ""


StreamItem = Union[OutputElement, Separator]


@dataclass(frozen=True, slots=True)
class OutputStream:
    filename: str
    authority: ParsedDocument
    items: Tuple[StreamItem, ...]
    source_ids: Tuple[str, ...] = ()

    @property
    def elements(self) -> Tuple[OutputElement, ...]:
        return tuple(item for item in self.items if isinstance(item, OutputElement))


def eligible_documents(main: ParsedDocument, documents: Iterable[ParsedDocument]) -> List[ParsedDocument]:
    """Non-main documents that can contribute content, in merge order."""
    others = [doc for doc in documents if doc.id != main.id and doc.is_mergeable]
    return sorted(others, key=lambda doc: doc.order)


def styled_filename(name: str) -> str:
    config = get_config()
    return f"{PurePath(name).stem}{config.styled_suffix}.docx"


class MergeEngine:
    """Apply one of the three merge policies to a main document and its companions."""

    def __init__(self, settings: Optional[MergeSettings] = None) -> None:
        self.settings = settings or MergeSettings()

    def merge(self, main: Optional[ParsedDocument], others: Sequence[ParsedDocument]) -> List[OutputStream]:
        if main is None:
            raise NoMainDocument()
        if not main.is_structured:
            raise InvalidMainDocument(main.name, main.source_type.value)

        documents = eligible_documents(main, others)
        mode = self.settings.mode
        LOGGER.info("Merging %d document(s) into %s using %s", len(documents), main.name, mode.value)

        if mode is MergeMode.STYLE_ONLY:
            return [self._style_only(main, doc) for doc in documents]
        if not documents:
            raise NoMergeableDocuments()
        return [self._concatenate(main, documents)]

    # ------------------------------------------------------------------
    def _concatenate(self, main: ParsedDocument, documents: List[ParsedDocument]) -> OutputStream:
        settings = self.settings
        smart = settings.mode is MergeMode.SMART_MERGE
        continuation = NumberingContinuation(carry=smart and settings.continue_numbering)
        formats = main.style_map.numbering_formats
        config = get_config()

        items: List[StreamItem] = []
        for index, doc in enumerate([main, *documents]):
            if index and settings.separates_documents:
                items.append(Separator(settings.separator_style, doc.name))
            continuation.begin_document()
            for element in doc.elements:
                renumbered = continuation.renumber(element)
                if smart and settings.prefix_heading_numbers:
                    key = f"heading{element.kind.heading_level}" if element.kind.is_heading else None
                    prefix = continuation.heading_prefix(renumbered, formats.get(key) if key else None)
                    if prefix:
                        renumbered = replace(renumbered, runs=(TextRun(text=prefix), *renumbered.runs))
                items.append(self._place(main, doc, renumbered, element.number))

        filename = config.smart_merge_filename if smart else config.simple_merge_filename
        return OutputStream(
            filename=filename,
            authority=main,
            items=tuple(items),
            source_ids=tuple(doc.id for doc in [main, *documents]),
        )

    def _style_only(self, main: ParsedDocument, doc: ParsedDocument) -> OutputStream:
        items = tuple(self._place(main, doc, element, element.number) for element in doc.elements)
        return OutputStream(
            filename=styled_filename(doc.name),
            authority=main,
            items=items,
            source_ids=(doc.id,),
        )

    def _place(
        self,
        main: ParsedDocument,
        doc: ParsedDocument,
        element: DocumentElement,
        source_number: Optional[int],
    ) -> OutputElement:
        from_authority = doc.id == main.id
        if not from_authority and self.settings.strip_inline_formatting:
            element = replace(element, runs=tuple(run.without_font_overrides() for run in element.runs))
        return OutputElement(
            element=element,
            style=main.style_map.resolve(element.kind),
            origin_id=doc.id,
            from_authority=from_authority,
            source_number=source_number,
        )


def merge_documents(
    main: Optional[ParsedDocument],
    others: Sequence[ParsedDocument],
    settings: Optional[MergeSettings] = None,
) -> List[OutputStream]:
    """Convenience wrapper around :class:`MergeEngine`."""
    return MergeEngine(settings).merge(main, others)
