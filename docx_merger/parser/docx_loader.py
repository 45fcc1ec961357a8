"""DOCX package loader responsible for unpacking the XML parts of an archive."""
from __future__ import annotations

import io
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from xml.etree import ElementTree as ET

from docx_merger.errors import ParseError
from docx_merger.parser.rels_parser import (
    RELTYPE_NUMBERING,
    RELTYPE_STYLES,
    PackageRelationships,
)
from docx_merger.utils.logger import get_logger
from docx_merger.utils.xml_utils import parse_xml

LOGGER = get_logger(__name__)

CONTENT_TYPES_PATH = "[Content_Types].xml"
DOCUMENT_XML_PATH = "word/document.xml"
STYLES_XML_PATH = "word/styles.xml"
NUMBERING_XML_PATH = "word/numbering.xml"


@dataclass(slots=True)
class DocxPackage:
    """Raw parts of a DOCX archive plus parsed trees for the parts the merger reads."""

    name: str
    raw_parts: Mapping[str, bytes]
    xml_cache: Dict[str, ET.ElementTree] = field(default_factory=dict)

    document_part: str = DOCUMENT_XML_PATH
    styles_part: Optional[str] = None
    numbering_part: Optional[str] = None

    document_xml: Optional[ET.ElementTree] = None
    styles_xml: Optional[ET.ElementTree] = None
    numbering_xml: Optional[ET.ElementTree] = None

    relationships: PackageRelationships = field(init=False)

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "document.docx") -> "DocxPackage":
        """Open a DOCX archive held in memory. Raises ``ParseError`` for malformed input."""
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as docx_zip:
                parts = {info.filename: docx_zip.read(info) for info in docx_zip.infolist() if not info.is_dir()}
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as exc:
            raise ParseError(name, f"not a valid ZIP archive ({exc})") from exc
        # Damaged, encrypted, or unsupported-compression members fail on read.
        except (zlib.error, RuntimeError, NotImplementedError) as exc:
            raise ParseError(name, f"unreadable archive member ({exc})") from exc

        LOGGER.debug("Loaded %d parts from %s", len(parts), name)

        package = cls(name=name, raw_parts=parts)
        try:
            package._initialize_caches()
        except ET.ParseError as exc:
            raise ParseError(name, f"malformed XML ({exc})") from exc
        except KeyError as exc:
            raise ParseError(name, str(exc.args[0]) if exc.args else "missing part") from exc
        return package

    # ------------------------------------------------------------------
    # Public helpers
    def require_document_xml(self) -> ET.ElementTree:
        if self.document_xml is None:
            raise ParseError(self.name, "primary document part missing from package")
        return self.document_xml

    def get_styles_xml(self) -> Optional[ET.ElementTree]:
        return self.styles_xml

    def get_numbering_xml(self) -> Optional[ET.ElementTree]:
        return self.numbering_xml

    def get_xml_part(self, name: str) -> Optional[ET.ElementTree]:
        if name in self.xml_cache:
            return self.xml_cache[name]
        data = self.raw_parts.get(name)
        if data is None:
            return None
        tree = parse_xml(data)
        self.xml_cache[name] = tree
        return tree

    # ------------------------------------------------------------------
    # Internal bootstrap
    def _initialize_caches(self) -> None:
        if CONTENT_TYPES_PATH not in self.raw_parts:
            raise KeyError(f"Required DOCX part missing: {CONTENT_TYPES_PATH}")

        self.relationships = PackageRelationships.from_parts(self.raw_parts)
        self.document_part = self.relationships.main_document_part() or DOCUMENT_XML_PATH
        self.document_xml = self._parse_required(self.document_part)

        self.styles_part = self._locate(RELTYPE_STYLES, STYLES_XML_PATH)
        self.numbering_part = self._locate(RELTYPE_NUMBERING, NUMBERING_XML_PATH)
        self.styles_xml = self.get_xml_part(self.styles_part) if self.styles_part else None
        self.numbering_xml = self.get_xml_part(self.numbering_part) if self.numbering_part else None

    def _locate(self, rel_type: str, fallback: str) -> Optional[str]:
        target = self.relationships.target(self.document_part, rel_type)
        if target and target in self.raw_parts:
            return target
        if fallback in self.raw_parts:
            return fallback
        return None

    def _parse_required(self, name: str) -> ET.ElementTree:
        tree = self.get_xml_part(name)
        if tree is None:
            raise KeyError(f"Required DOCX part missing: {name}")
        return tree
