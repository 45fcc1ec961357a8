"""Exception taxonomy shared by the parser, merge engine, assembler, and session."""
from __future__ import annotations

from typing import Optional


class DocumentMergerError(Exception):
    """Base class for every error raised by the merging pipeline."""


class UnsupportedFormat(DocumentMergerError):
    """The file type cannot be parsed. Per-file and non-fatal for a batch."""

    def __init__(self, filename: str, source_type: Optional[str] = None) -> None:
        detail = f" ({source_type})" if source_type else ""
        super().__init__(f"Unsupported file format{detail}: {filename}")
        self.filename = filename
        self.source_type = source_type


class ParseError(DocumentMergerError):
    """Malformed archive, XML, or text payload. Per-file and non-fatal for a batch."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"Failed to parse {filename}: {reason}")
        self.filename = filename
        self.reason = reason


class MergeError(DocumentMergerError):
    """Fatal for a single process invocation; session state is left untouched."""


class NoMainDocument(MergeError):
    def __init__(self) -> None:
        super().__init__("No main document has been selected")


class InvalidMainDocument(MergeError):
    def __init__(self, name: str, source_type: str) -> None:
        super().__init__(f"Main document {name} must be a DOCX file, got {source_type}")
        self.name = name
        self.source_type = source_type


class NoMergeableDocuments(MergeError):
    def __init__(self) -> None:
        super().__init__("There are no DOCX or text documents to merge besides the main document")


class StyleResolutionError(DocumentMergerError):
    """An element kind has no resolvable style; indicates a model invariant violation."""


class PackagingError(DocumentMergerError):
    """The output archive could not be produced. No partial bytes are returned."""
