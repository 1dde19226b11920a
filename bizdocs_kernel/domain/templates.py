"""
Templates -- document templates and the immutable template catalog.

Responsibility:
    Declares how a (document type, business type) pair is rendered: the
    layout, the extra declarative fields a document of that kind may carry,
    and the styling flags consumed by the content renderer.  The
    ``TemplateCatalog`` is a constructed, read-only registry passed to the
    resolver; there is no process-wide singleton.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  Catalogs are built from YAML
    by ``bizdocs_config`` or directly in tests.

Invariants enforced:
    - Templates and catalogs are immutable after construction.
    - Catalog order is the declaration order.

Failure modes:
    - ValueError for unknown layout / header style / field type values.
    - ValueError for duplicate template ids within one catalog.

Non-goals:
    - At most one template per (document type, specific business type) is
      a design assumption.  ``ambiguities()`` reports violations; nothing
      enforces it.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from bizdocs_kernel.domain.documents import BusinessType, DocumentType

DEFAULT_PRIMARY_COLOR = "#0066CC"


class Layout(str, Enum):
    MODERN = "modern"
    CLASSIC = "classic"
    MINIMAL = "minimal"
    DETAILED = "detailed"


class HeaderStyle(str, Enum):
    GRADIENT = "gradient"
    SOLID = "solid"
    MINIMAL = "minimal"


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    SELECT = "select"


@dataclass(frozen=True)
class TemplateField:
    """An extra, business-specific field a document may carry."""
    id: str
    label: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    default_value: str | None = None
    options: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", FieldType(self.type))
        object.__setattr__(self, "options", tuple(self.options))


@dataclass(frozen=True)
class TemplateStyling:
    primary_color: str = DEFAULT_PRIMARY_COLOR
    header_style: HeaderStyle = HeaderStyle.GRADIENT
    show_logo: bool = True
    show_qr_code: bool = False
    show_payment_terms: bool = True
    show_delivery_info: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "header_style", HeaderStyle(self.header_style))


@dataclass(frozen=True)
class DocumentTemplate:
    """Rendering configuration for a document type across business types."""
    id: str
    name: str
    document_type: DocumentType
    business_types: tuple[BusinessType, ...]
    layout: Layout = Layout.MODERN
    fields: tuple[TemplateField, ...] = ()
    styling: TemplateStyling = field(default_factory=TemplateStyling)

    def __post_init__(self) -> None:
        object.__setattr__(self, "document_type", DocumentType(self.document_type))
        object.__setattr__(
            self, "business_types", tuple(BusinessType(b) for b in self.business_types)
        )
        object.__setattr__(self, "layout", Layout(self.layout))
        object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def is_wildcard(self) -> bool:
        return BusinessType.OTHER in self.business_types

    def serves(self, business_type: BusinessType | str) -> bool:
        """True when ``business_type`` is listed explicitly."""
        return business_type in self.business_types

    def applies_to(self, business_type: BusinessType | str, allow_wildcard: bool = True) -> bool:
        return self.serves(business_type) or (allow_wildcard and self.is_wildcard)

    def get_field(self, field_id: str) -> TemplateField | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


def default_template(document_type: DocumentType | str) -> DocumentTemplate:
    """Template synthesized when no catalog entry matches."""
    doc_type = DocumentType(document_type)
    return DocumentTemplate(
        id=f"default-{doc_type.value}",
        name=f"Default {doc_type.label}",
        document_type=doc_type,
        business_types=(BusinessType.OTHER,),
        layout=Layout.MODERN,
        fields=(),
        styling=TemplateStyling(
            primary_color=DEFAULT_PRIMARY_COLOR,
            header_style=HeaderStyle.GRADIENT,
            show_logo=True,
            show_qr_code=False,
            show_payment_terms=True,
            show_delivery_info=False,
        ),
    )


class TemplateCatalog:
    """
    Immutable, ordered registry of document templates.

    Contract:
        Constructed once from a sequence of templates and handed to
        ``TemplateResolver``.  No mutation API.

    Guarantees:
        - ``list_templates()`` returns templates in declaration order.
        - Template ids are unique.
    """

    def __init__(self, templates: Sequence[DocumentTemplate], source: str = "<memory>"):
        self._templates: tuple[DocumentTemplate, ...] = tuple(templates)
        self._source = source
        seen: set[str] = set()
        for t in self._templates:
            if t.id in seen:
                raise ValueError(f"Duplicate template id in catalog: {t.id}")
            seen.add(t.id)

    @property
    def source(self) -> str:
        return self._source

    def list_templates(self) -> tuple[DocumentTemplate, ...]:
        return self._templates

    def for_document_type(self, document_type: DocumentType | str) -> tuple[DocumentTemplate, ...]:
        doc_type = DocumentType(document_type)
        return tuple(t for t in self._templates if t.document_type == doc_type)

    def get(self, template_id: str) -> DocumentTemplate | None:
        for t in self._templates:
            if t.id == template_id:
                return t
        return None

    def ambiguities(self) -> dict[tuple[DocumentType, BusinessType], tuple[str, ...]]:
        """(document type, business type) pairs served by more than one template."""
        claims: dict[tuple[DocumentType, BusinessType], list[str]] = {}
        for t in self._templates:
            for b in t.business_types:
                if b is BusinessType.OTHER:
                    continue
                claims.setdefault((t.document_type, b), []).append(t.id)
        return {k: tuple(v) for k, v in claims.items() if len(v) > 1}

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[DocumentTemplate]:
        return iter(self._templates)

    def __repr__(self) -> str:
        return f"TemplateCatalog({len(self._templates)} templates from {self._source})"
