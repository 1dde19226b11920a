"""
Pure domain layer.

This module contains immutable value objects with NO dependencies on:
- Persistence
- Time/clock (beyond the injectable Clock interface)
- I/O
"""

from bizdocs_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from bizdocs_kernel.domain.currency import (
    CurrencyCode,
    CurrencyFormat,
    CurrencyRegistry,
    format_currency,
)
from bizdocs_kernel.domain.documents import (
    CONSERVATION_TOLERANCE,
    BusinessProfile,
    BusinessType,
    Document,
    DocumentStatus,
    DocumentType,
    LineItem,
    Payment,
    PaymentMethod,
)
from bizdocs_kernel.domain.notes import (
    FreeTextNotes,
    Notes,
    StructuredNotes,
    notes_from_legacy,
    serialize_notes,
)
from bizdocs_kernel.domain.templates import (
    DEFAULT_PRIMARY_COLOR,
    DocumentTemplate,
    FieldType,
    HeaderStyle,
    Layout,
    TemplateCatalog,
    TemplateField,
    TemplateStyling,
    default_template,
)
from bizdocs_kernel.domain.values import Money

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyCode",
    "CurrencyFormat",
    "CurrencyRegistry",
    "format_currency",
    "CONSERVATION_TOLERANCE",
    "BusinessProfile",
    "BusinessType",
    "Document",
    "DocumentStatus",
    "DocumentType",
    "LineItem",
    "Payment",
    "PaymentMethod",
    "FreeTextNotes",
    "Notes",
    "StructuredNotes",
    "notes_from_legacy",
    "serialize_notes",
    "DEFAULT_PRIMARY_COLOR",
    "DocumentTemplate",
    "FieldType",
    "HeaderStyle",
    "Layout",
    "TemplateCatalog",
    "TemplateField",
    "TemplateStyling",
    "default_template",
    "Money",
]
