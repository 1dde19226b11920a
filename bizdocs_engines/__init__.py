"""
Module: bizdocs_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the engine
    sub-modules: template resolution, rendering, payment application,
    receivable/payable derivation, aging, QR payload and CSV export.

Architecture position:
    Engines -- calculation layer over ``bizdocs_kernel`` domain objects.
    MUST NOT import ``bizdocs_config``; catalogs and settings are injected.

Invariants enforced:
    - Purity: engines never read the wall clock.  "Today" comes from an
      injected ``Clock`` or an explicit ``as_of`` parameter.
    - Decimal-only arithmetic for every monetary amount.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from bizdocs_engines import ContentRenderer, TemplateResolver

    template = TemplateResolver(catalog).resolve("invoice", "retail")
    rendered = ContentRenderer().render(document, business, template)
"""

from bizdocs_kernel.logging_config import get_logger

logger = get_logger("engines")

from bizdocs_engines.aging import STANDARD_BUCKETS, AgeBucket, AgingCalculator
from bizdocs_engines.export import DOCUMENT_CSV_HEADERS, documents_to_csv
from bizdocs_engines.payments import (
    LedgerSnapshot,
    PaymentLedger,
    PaymentResult,
    PaymentState,
    PaymentStateKind,
    display_outstanding,
    is_fully_paid,
    outstanding_amount,
    paid_amount,
    payment_state,
    record_payment,
)
from bizdocs_engines.qr import payment_link, payment_qr_payload
from bizdocs_engines.receivables import (
    AgingStatus,
    BalanceSummary,
    PaidSource,
    PayableEntry,
    ReceivableEntry,
    ReceivablesAggregator,
)
from bizdocs_engines.rendering import (
    ContentRenderer,
    RenderedDocument,
    RenderOptions,
    format_date,
    format_quantity,
)
from bizdocs_engines.template_resolver import TemplateResolver
from bizdocs_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Aging
    "AgeBucket",
    "AgingCalculator",
    "STANDARD_BUCKETS",
    # Export
    "DOCUMENT_CSV_HEADERS",
    "documents_to_csv",
    # Payments
    "LedgerSnapshot",
    "PaymentLedger",
    "PaymentResult",
    "PaymentState",
    "PaymentStateKind",
    "display_outstanding",
    "is_fully_paid",
    "outstanding_amount",
    "paid_amount",
    "payment_state",
    "record_payment",
    # QR
    "payment_link",
    "payment_qr_payload",
    # Receivables
    "AgingStatus",
    "BalanceSummary",
    "PaidSource",
    "PayableEntry",
    "ReceivableEntry",
    "ReceivablesAggregator",
    # Rendering
    "ContentRenderer",
    "RenderedDocument",
    "RenderOptions",
    "format_date",
    "format_quantity",
    # Template resolution
    "TemplateResolver",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
