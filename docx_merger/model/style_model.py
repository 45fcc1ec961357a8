"""Style model: resolved per-kind formatting plus the raw style catalog of a package."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Mapping, Optional

from docx_merger.errors import StyleResolutionError
from docx_merger.model.elements import ElementKind

ALIGNMENTS = ("left", "center", "right", "justify")


@dataclass(frozen=True, slots=True)
class ElementStyle:
    """Resolved formatting attributes for one element kind. Sizes are in points."""

    font_family: str = "Calibri"
    font_size: float = 11.0
    font_color: str = "#000000"
    bold: bool = False
    italic: bool = False
    underline: bool = False
    alignment: str = "left"
    line_spacing: float = 1.15
    space_before: float = 0.0
    space_after: float = 8.0
    indent_left: float = 0.0
    indent_first_line: float = 0.0

    def merged(self, overrides: Mapping[str, object]) -> "ElementStyle":
        """Return a copy with every known attribute in ``overrides`` applied."""
        known = {name: value for name, value in overrides.items() if name in STYLE_ATTRIBUTES and value is not None}
        if not known:
            return self
        alignment = known.get("alignment")
        if alignment is not None and alignment not in ALIGNMENTS:
            raise ValueError(f"Unknown alignment: {alignment}")
        return replace(self, **known)

    def diff(self, baseline: "ElementStyle") -> Dict[str, object]:
        """Attributes whose value differs from ``baseline``."""
        return {
            name: getattr(self, name)
            for name in STYLE_ATTRIBUTES
            if getattr(self, name) != getattr(baseline, name)
        }

    def as_dict(self) -> Dict[str, object]:
        return {name: getattr(self, name) for name in STYLE_ATTRIBUTES}


STYLE_ATTRIBUTES = tuple(f.name for f in fields(ElementStyle))


@dataclass(frozen=True, slots=True)
class PageMargins:
    """Page margins in points."""

    top: float = 72.0
    bottom: float = 72.0
    left: float = 72.0
    right: float = 72.0


DEFAULT_ELEMENT_STYLE = ElementStyle()

DEFAULT_STYLES: Dict[ElementKind, ElementStyle] = {
    ElementKind.HEADING1: replace(DEFAULT_ELEMENT_STYLE, font_size=16.0, bold=True, space_before=12.0, space_after=6.0),
    ElementKind.HEADING2: replace(DEFAULT_ELEMENT_STYLE, font_size=14.0, bold=True, space_before=10.0, space_after=4.0),
    ElementKind.HEADING3: replace(DEFAULT_ELEMENT_STYLE, font_size=12.0, bold=True, space_before=8.0, space_after=4.0),
    ElementKind.HEADING4: replace(DEFAULT_ELEMENT_STYLE, font_size=11.0, bold=True, space_before=6.0, space_after=2.0),
    ElementKind.PARAGRAPH: DEFAULT_ELEMENT_STYLE,
    ElementKind.LIST_BULLET: replace(DEFAULT_ELEMENT_STYLE, indent_left=18.0),
    ElementKind.LIST_NUMBER: replace(DEFAULT_ELEMENT_STYLE, indent_left=18.0),
}

NUMBERING_FORMAT_KEYS = ("heading1", "heading2", "heading3", "heading4", "list")

DEFAULT_NUMBERING_FORMATS: Dict[str, str] = {
    "heading1": "{n}.",
    "heading2": "{n}.{n}",
    "heading3": "{n}.{n}.{n}",
    "heading4": "{n}.{n}.{n}.{n}",
    "list": "{n})",
}


def builtin_style(kind: ElementKind) -> ElementStyle:
    return DEFAULT_STYLES[kind]


@dataclass(frozen=True, slots=True)
class DocumentStyleMap:
    """Per-kind resolved styles, numbering formats, and page margins of one document.

    ``style_ids`` and ``list_abstract_ids`` point into the owning package's
    styles and numbering parts so an assembler can reference them directly.
    """

    styles: Dict[ElementKind, ElementStyle] = field(default_factory=lambda: dict(DEFAULT_STYLES))
    numbering_formats: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_NUMBERING_FORMATS))
    page_margins: PageMargins = field(default_factory=PageMargins)
    style_ids: Dict[ElementKind, str] = field(default_factory=dict)
    list_abstract_ids: Dict[ElementKind, int] = field(default_factory=dict)

    def resolve(self, kind: ElementKind) -> ElementStyle:
        """Return the style for ``kind``, falling back to the built-in default."""
        try:
            kind = ElementKind(kind)
        except ValueError as exc:
            raise StyleResolutionError(f"Unknown element kind: {kind!r}") from exc
        style = self.styles.get(kind)
        if style is None:
            style = DEFAULT_STYLES.get(kind)
        if style is None:  # pragma: no cover - DEFAULT_STYLES covers every kind
            raise StyleResolutionError(f"No style available for {kind.value}")
        return style

    def with_style(self, kind: ElementKind, overrides: Mapping[str, object]) -> "DocumentStyleMap":
        unknown = set(overrides) - set(STYLE_ATTRIBUTES)
        if unknown:
            raise ValueError(f"Unknown style attributes: {', '.join(sorted(unknown))}")
        kind = ElementKind(kind)
        styles = dict(self.styles)
        styles[kind] = self.resolve(kind).merged(overrides)
        return replace(self, styles=styles)

    def with_numbering_format(self, key: str, template: str) -> "DocumentStyleMap":
        if key not in NUMBERING_FORMAT_KEYS:
            raise ValueError(f"Unknown numbering format key: {key}")
        formats = dict(self.numbering_formats)
        formats[key] = template
        return replace(self, numbering_formats=formats)


@dataclass(slots=True)
class StyleDefinition:
    """A ``w:style`` entry after inheritance has been resolved.

    ``properties`` holds ElementStyle attribute overrides read from the style's
    ``w:rPr``/``w:pPr``; ``outline_level`` and ``num_id``/``num_level`` come from
    the paragraph properties when present.
    """

    style_id: str
    style_type: str
    name: Optional[str]
    properties: Dict[str, object] = field(default_factory=dict)
    based_on: Optional[str] = None
    is_default: bool = False
    outline_level: Optional[int] = None
    num_id: Optional[int] = None
    num_level: Optional[int] = None


class StylesCatalog:
    """Collection of resolved styles keyed by identifier."""

    def __init__(
        self,
        styles: Mapping[str, StyleDefinition],
        document_defaults: Optional[Mapping[str, object]] = None,
    ):
        self._styles = dict(styles)
        self.document_defaults: Dict[str, object] = dict(document_defaults or {})

    def get(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        """Return the resolved style definition given its identifier."""
        if style_id is None:
            return None
        return self._styles.get(style_id)

    def all(self) -> Mapping[str, StyleDefinition]:
        """Return read-only view of resolved styles."""
        return dict(self._styles)

    def default_for(self, style_type: str) -> Optional[StyleDefinition]:
        """Return the default style for the given style type if defined."""
        for style in self._styles.values():
            if style.style_type == style_type and style.is_default:
                return style
        return None

    def find_by_name(self, *names: str) -> Optional[StyleDefinition]:
        """Return the first paragraph style whose name matches one of ``names`` (case-insensitive)."""
        wanted = [name.lower() for name in names]
        for candidate in wanted:
            for style in self._styles.values():
                if style.style_type == "paragraph" and (style.name or "").lower() == candidate:
                    return style
        return None
