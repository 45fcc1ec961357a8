"""Session state for a merge job.

A ``MergeSession`` is an immutable value: every operation returns a new session
and leaves the receiver untouched, so callers own the session lifetime and can
keep earlier states around (for undo, or to retry after a failed ``process``).
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from docx_merger.config import get_config
from docx_merger.errors import DocumentMergerError, NoMainDocument, ParseError, UnsupportedFormat
from docx_merger.merge.engine import MergeEngine
from docx_merger.merge.settings import MergeMode, MergeSettings
from docx_merger.model.document_model import ParsedDocument
from docx_merger.model.elements import ElementKind
from docx_merger.parser.document_reader import parse_document
from docx_merger.renderer.package_assembler import PackageAssembler
from docx_merger.utils.logger import get_logger

LOGGER = get_logger(__name__)

ProgressCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class IncomingFile:
    name: str
    data: bytes


@dataclass(frozen=True)
class FileError:
    """A file that could not be added; ``kind`` is the exception class name."""

    filename: str
    kind: str
    message: str


@dataclass(frozen=True)
class OutputFile:
    blob: bytes
    filename: str


@dataclass(frozen=True)
class ProcessOutcome:
    session: "MergeSession"
    outputs: List[OutputFile]


def default_settings() -> MergeSettings:
    return MergeSettings(mode=MergeMode(get_config().default_merge_mode))


def _renumber(documents: Iterable[ParsedDocument]) -> Tuple[ParsedDocument, ...]:
    return tuple(replace(doc, order=index) for index, doc in enumerate(documents))


@dataclass(frozen=True)
class MergeSession:
    documents: Tuple[ParsedDocument, ...] = ()
    settings: MergeSettings = field(default_factory=default_settings)
    file_errors: Tuple[FileError, ...] = ()
    error: Optional[str] = None
    progress: int = 0
    progress_message: str = ""

    # ------------------------------------------------------------------
    # Queries
    @property
    def main_document(self) -> Optional[ParsedDocument]:
        for doc in self.documents:
            if doc.is_main_document:
                return doc
        return None

    def get(self, doc_id: str) -> ParsedDocument:
        for doc in self.documents:
            if doc.id == doc_id:
                return doc
        raise KeyError(f"Unknown document id: {doc_id}")

    # ------------------------------------------------------------------
    # Collection
    def add_documents(
        self, files: Iterable[IncomingFile], progress: Optional[ProgressCallback] = None
    ) -> "MergeSession":
        """Parse ``files`` in order, appending successes and recording per-file errors."""
        files = list(files)
        added: List[ParsedDocument] = []
        errors: List[FileError] = []
        for index, incoming in enumerate(files):
            try:
                doc = parse_document(incoming.data, name=incoming.name)
            except (UnsupportedFormat, ParseError) as exc:
                LOGGER.warning("Could not add %s: %s", incoming.name, exc)
                errors.append(FileError(incoming.name, type(exc).__name__, str(exc)))
            else:
                added.append(doc)
                LOGGER.info("Added %s (%s, %d elements)", doc.name, doc.source_type.value, len(doc.elements))
            percent = round((index + 1) / len(files) * 100)
            self._report(progress, percent, "Done" if index + 1 == len(files) else f"Parsed {incoming.name}")

        documents = list(_renumber([*self.documents, *added]))
        if self.main_document is None and documents:
            documents[0] = replace(documents[0], is_main_document=True)
        return replace(
            self,
            documents=tuple(documents),
            file_errors=self.file_errors + tuple(errors),
            error=None,
            progress=100,
            progress_message="Done",
        )

    def set_main_document(self, doc_id: str) -> "MergeSession":
        self.get(doc_id)
        documents = tuple(replace(doc, is_main_document=doc.id == doc_id) for doc in self.documents)
        return replace(self, documents=documents)

    def reorder_documents(self, from_index: int, to_index: int) -> "MergeSession":
        count = len(self.documents)
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise IndexError(f"Cannot move document {from_index} to {to_index} in a collection of {count}")
        documents = list(self.documents)
        moved = documents.pop(from_index)
        documents.insert(to_index, moved)
        return replace(self, documents=_renumber(documents))

    def remove_document(self, doc_id: str) -> "MergeSession":
        removed = self.get(doc_id)
        documents = list(_renumber(doc for doc in self.documents if doc.id != doc_id))
        if removed.is_main_document and documents:
            documents[0] = replace(documents[0], is_main_document=True)
        return replace(self, documents=tuple(documents))

    # ------------------------------------------------------------------
    # Settings and authority styles
    def update_settings(self, **changes: Any) -> "MergeSession":
        return replace(self, settings=self.settings.updated(**changes))

    def update_main_style(self, kind: ElementKind, changes: Mapping[str, object]) -> "MergeSession":
        main = self._require_main()
        return self._replace_document(replace(main, style_map=main.style_map.with_style(kind, changes)))

    def update_numbering_format(self, key: str, template: str) -> "MergeSession":
        main = self._require_main()
        return self._replace_document(replace(main, style_map=main.style_map.with_numbering_format(key, template)))

    def reset(self) -> "MergeSession":
        return MergeSession()

    # ------------------------------------------------------------------
    # Processing
    def process(self, progress: Optional[ProgressCallback] = None) -> ProcessOutcome:
        """Merge and assemble; on failure return no outputs and record one session error."""
        self._report(progress, 0, "Processing documents")
        try:
            streams = MergeEngine(self.settings).merge(self.main_document, self.documents)
            assembler = PackageAssembler()
            outputs: List[OutputFile] = []
            for index, stream in enumerate(streams):
                self._report(progress, round(index / len(streams) * 100), f"Assembling {stream.filename}")
                outputs.append(OutputFile(assembler.assemble(stream), stream.filename))
        except DocumentMergerError as exc:
            message = f"{type(exc).__name__}: {exc}"
            LOGGER.warning("Processing failed: %s", message)
            return ProcessOutcome(replace(self, error=message, progress=0, progress_message=""), [])

        self._report(progress, 100, "Done")
        LOGGER.info("Produced %d output file(s)", len(outputs))
        return ProcessOutcome(replace(self, error=None, progress=100, progress_message="Done"), outputs)

    # ------------------------------------------------------------------
    def _require_main(self) -> ParsedDocument:
        main = self.main_document
        if main is None:
            raise NoMainDocument()
        return main

    def _replace_document(self, updated: ParsedDocument) -> "MergeSession":
        documents = tuple(updated if doc.id == updated.id else doc for doc in self.documents)
        return replace(self, documents=documents)

    @staticmethod
    def _report(progress: Optional[ProgressCallback], percent: int, message: str) -> None:
        if progress is not None:
            progress(percent, message)
