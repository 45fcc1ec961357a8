"""Ordered resolver functions that compute the effective ElementStyle of a paragraph.

Each resolver takes the style produced so far plus the paragraph context and returns
the next style. The default chain applies, lowest precedence first: the built-in
style of the kind, the document defaults, the referenced paragraph style (with its
``basedOn`` chain already flattened), direct paragraph properties, and finally run
overrides shared by every run of the paragraph.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Tuple

from docx_merger.model.elements import ElementKind, TextRun
from docx_merger.model.style_model import ElementStyle, StylesCatalog, builtin_style


@dataclass(slots=True)
class CascadeContext:
    kind: ElementKind
    catalog: StylesCatalog
    style_id: Optional[str] = None
    paragraph_properties: Dict[str, object] = field(default_factory=dict)
    runs: Tuple[TextRun, ...] = ()


Resolver = Callable[[ElementStyle, CascadeContext], ElementStyle]

RUN_ATTRIBUTE_MAP = (
    ("bold", "bold"),
    ("italic", "italic"),
    ("underline", "underline"),
    ("color", "font_color"),
    ("font_family", "font_family"),
    ("font_size", "font_size"),
)


def apply_builtin(style: ElementStyle, context: CascadeContext) -> ElementStyle:
    return builtin_style(context.kind)


def apply_document_defaults(style: ElementStyle, context: CascadeContext) -> ElementStyle:
    return style.merged(context.catalog.document_defaults)


def apply_paragraph_style(style: ElementStyle, context: CascadeContext) -> ElementStyle:
    definition = context.catalog.get(context.style_id)
    if definition is None:
        definition = context.catalog.default_for("paragraph")
    if definition is None:
        return style
    return style.merged(definition.properties)


def apply_direct_formatting(style: ElementStyle, context: CascadeContext) -> ElementStyle:
    return style.merged(context.paragraph_properties)


def apply_shared_run_overrides(style: ElementStyle, context: CascadeContext) -> ElementStyle:
    """Promote run overrides that every non-empty run of the paragraph agrees on."""
    runs = [run for run in context.runs if run.text.strip()]
    if not runs:
        return style
    shared: Dict[str, object] = {}
    for run_attr, style_attr in RUN_ATTRIBUTE_MAP:
        values = {getattr(run, run_attr) for run in runs}
        if len(values) == 1:
            value = values.pop()
            if value is not None:
                shared[style_attr] = value
    return style.merged(shared)


DEFAULT_RESOLVERS: Tuple[Resolver, ...] = (
    apply_builtin,
    apply_document_defaults,
    apply_paragraph_style,
    apply_direct_formatting,
    apply_shared_run_overrides,
)


def resolve_style(context: CascadeContext, resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS) -> ElementStyle:
    style = builtin_style(context.kind)
    for resolver in resolvers:
        style = resolver(style, context)
    return style


NAMED_STYLE_RESOLVERS: Tuple[Resolver, ...] = (
    apply_builtin,
    apply_document_defaults,
    apply_paragraph_style,
)


def resolve_named_style(kind: ElementKind, catalog: StylesCatalog, style_id: Optional[str]) -> ElementStyle:
    """Formatting a paragraph of ``kind`` gets from ``style_id`` alone, without direct formatting."""
    return resolve_style(CascadeContext(kind=kind, catalog=catalog, style_id=style_id), NAMED_STYLE_RESOLVERS)
