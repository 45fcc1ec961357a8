"""Relationship lookup for the package parts the merger reads and writes."""
from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from docx_merger.utils.xml_utils import Namespaces, parse_xml

WORD_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

RELTYPE_OFFICE_DOCUMENT = f"{WORD_REL_NS}/officeDocument"
RELTYPE_STYLES = f"{WORD_REL_NS}/styles"
RELTYPE_NUMBERING = f"{WORD_REL_NS}/numbering"

# Relationships declared in _rels/.rels belong to the package itself.
PACKAGE_SOURCE = ""
PACKAGE_RELS_PART = "_rels/.rels"


def rels_part_for(part_name: str) -> str:
    """Name of the ``.rels`` part holding the relationships of ``part_name``."""
    if part_name == PACKAGE_SOURCE:
        return PACKAGE_RELS_PART
    folder, base = posixpath.split(part_name)
    return posixpath.join(folder, "_rels", f"{base}.rels")


def source_of(rels_part: str) -> str:
    """Inverse of :func:`rels_part_for`."""
    if rels_part == PACKAGE_RELS_PART:
        return PACKAGE_SOURCE
    folder, base = posixpath.split(rels_part)
    owner_dir = posixpath.dirname(folder) if posixpath.basename(folder) == "_rels" else folder
    return posixpath.join(owner_dir, base[: -len(".rels")])


def resolve_target(source_part: str, target: str) -> Optional[str]:
    """Package part name addressed by ``target``, or ``None`` if it escapes the package."""
    if not target:
        return None
    if target.startswith("/"):
        return target.lstrip("/")
    resolved = posixpath.normpath(posixpath.join(posixpath.dirname(source_part), target))
    if resolved == "." or resolved.startswith("../"):
        return None
    return resolved


@dataclass(frozen=True)
class Relationship:
    source_part: str
    r_id: str
    rel_type: str
    target: str
    is_external: bool = False

    @property
    def part_name(self) -> Optional[str]:
        """Resolved part name for internal targets; external targets have none."""
        if self.is_external:
            return None
        return resolve_target(self.source_part, self.target)


class PackageRelationships:
    """Relationships of every part in a package, keyed by source part then id."""

    def __init__(self, by_source: Dict[str, Dict[str, Relationship]]) -> None:
        self._by_source = by_source

    @classmethod
    def from_parts(cls, parts: Mapping[str, bytes]) -> "PackageRelationships":
        by_source: Dict[str, Dict[str, Relationship]] = {}
        for name, payload in parts.items():
            if not name.endswith(".rels"):
                continue
            source = source_of(name)
            entries = {}
            for rel_el in parse_xml(payload).iterfind(".//rel:Relationship", Namespaces.RELS):
                r_id = rel_el.get("Id")
                if not r_id:
                    continue
                entries[r_id] = Relationship(
                    source_part=source,
                    r_id=r_id,
                    rel_type=rel_el.get("Type", ""),
                    target=rel_el.get("Target", ""),
                    is_external=rel_el.get("TargetMode") == "External",
                )
            if entries:
                by_source[source] = entries
        return cls(by_source)

    def of(self, part_name: str) -> List[Relationship]:
        return list(self._by_source.get(part_name, {}).values())

    def find(self, part_name: str, r_id: str) -> Optional[Relationship]:
        return self._by_source.get(part_name, {}).get(r_id)

    def target(self, part_name: str, rel_type: str) -> Optional[str]:
        """Part name reached from ``part_name`` through the first ``rel_type`` relationship."""
        for rel in self.of(part_name):
            if rel.rel_type == rel_type and rel.part_name:
                return rel.part_name
        return None

    def main_document_part(self) -> Optional[str]:
        return self.target(PACKAGE_SOURCE, RELTYPE_OFFICE_DOCUMENT)

    def next_id(self, part_name: str) -> str:
        """First ``rIdN`` not yet used by ``part_name``."""
        used = self._by_source.get(part_name, {})
        index = len(used) + 1
        while f"rId{index}" in used:
            index += 1
        return f"rId{index}"
