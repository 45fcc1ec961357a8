"""Helpers to persist intermediate representations for debugging."""
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from docx_merger.model.document_model import ParsedDocument

# Raw package parts and parsed catalogs are too large to be useful in a dump.
SKIPPED_FIELDS = {"package", "numbering", "styles"}


class DebugDumper:
    """Writes intermediate artifacts onto disk for inspection."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, documents: Sequence[ParsedDocument]) -> Path:
        """Persist the parsed documents as JSON for offline analysis."""
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / "parsed_documents.json"
        payload = [self._serialize(doc) for doc in documents]
        target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return target

    def _serialize(self, value: Any) -> Any:
        if is_dataclass(value):
            return {
                f.name: self._serialize(getattr(value, f.name))
                for f in fields(value)
                if f.name not in SKIPPED_FIELDS
            }
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return {str(self._serialize(k)): self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value
