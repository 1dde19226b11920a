"""
Module: bizdocs_engines.rendering
Responsibility:
    Turn a document, the issuing business's profile and a resolved template
    into shareable content: a canonical plain-text rendition and a
    self-contained HTML rendition for print/PDF export.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Determinism: identical inputs yield byte-identical text and HTML.
    - Same figures: both renditions are built from one ``_DocumentView``
      whose amounts come straight from ``document.subtotal/tax/total``;
      nothing is recomputed for either target.
    - Totality: rendering never raises for a well-typed document and
      template.  Absent optional values are omitted, not shown blank.
    - Structured notes are shown as labelled template fields; the stored
      serialization never reaches the output.

Text layout, in order:
    header (per ``header_style``), document label/number/date, FROM block,
    TO or SUPPLIER block, ITEMS, totals, PAYMENT TERMS (when enabled and a
    due date exists), PAY ONLINE (when the template shows a QR code),
    ADDITIONAL INFORMATION or NOTES, footer.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from bizdocs_kernel.domain.currency import format_currency
from bizdocs_kernel.domain.documents import BusinessProfile, Document
from bizdocs_kernel.domain.notes import FreeTextNotes, StructuredNotes
from bizdocs_kernel.domain.templates import (
    DEFAULT_PRIMARY_COLOR,
    DocumentTemplate,
    HeaderStyle,
)
from bizdocs_kernel.logging_config import get_logger
from bizdocs_engines.qr import payment_link, payment_qr_payload
from bizdocs_engines.tracer import traced_engine

logger = get_logger("engines.rendering")

LINE_WIDTH = 60
DEFAULT_FOOTER_LINES: tuple[str, ...] = (
    "Generated by DreamBig Business OS",
    "Thank you for your business!",
)

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_COLOR_RE = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20})$")


def format_date(value: date) -> str:
    """Long date, e.g. ``15 January 2024``; independent of process locale."""
    return f"{value.day} {_MONTHS[value.month - 1]} {value.year}"


def format_quantity(value: Decimal) -> str:
    """Quantity without trailing zeros: ``2``, ``1.5``."""
    if value == value.to_integral_value():
        return f"{value.quantize(Decimal(1)):f}"
    return f"{value.normalize():f}"


@dataclass(frozen=True)
class RenderOptions:
    footer_lines: tuple[str, ...] = DEFAULT_FOOTER_LINES
    payment_link_base_url: str | None = None


@dataclass(frozen=True)
class RenderedDocument:
    text: str
    html: str


@dataclass(frozen=True)
class _ItemRow:
    index: int
    description: str
    quantity: str
    unit_price: str
    total: str


@dataclass(frozen=True)
class _DocumentView:
    """Every string either rendition shows, computed once."""

    business_name: str
    label: str
    document_number: str
    issue_date: str
    from_lines: tuple[str, ...]
    recipient_label: str
    counterparty_name: str
    to_lines: tuple[str, ...]
    items: tuple[_ItemRow, ...]
    subtotal: str
    tax: str | None
    total: str
    due_date: str | None
    pay_link: str | None
    qr_payload: str | None
    field_rows: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    free_notes: str | None = None


def _contact_lines(*pairs: tuple[str, str | None]) -> tuple[str, ...]:
    return tuple(f"{label}: {value}" for label, value in pairs if value)


def _build_view(
    document: Document,
    business: BusinessProfile,
    template: DocumentTemplate,
    options: RenderOptions,
) -> _DocumentView:
    currency = document.currency

    items = tuple(
        _ItemRow(
            index=i,
            description=item.description,
            quantity=format_quantity(item.quantity),
            unit_price=format_currency(item.unit_price, currency),
            total=format_currency(item.total, currency),
        )
        for i, item in enumerate(document.items, start=1)
    )

    due_date = None
    if template.styling.show_payment_terms and document.due_date is not None:
        due_date = format_date(document.due_date)

    pay_link = qr_payload = None
    if template.styling.show_qr_code:
        pay_link = payment_link(document.id, options.payment_link_base_url)
        qr_payload = payment_qr_payload(document)

    field_rows: tuple[tuple[str, str], ...] = ()
    free_notes = None
    if isinstance(document.notes, StructuredNotes):
        field_rows = tuple(
            (f.label, value)
            for f in template.fields
            if (value := document.notes.value_for(f.id)) is not None
        )
    elif isinstance(document.notes, FreeTextNotes) and document.notes.text.strip():
        free_notes = document.notes.text

    return _DocumentView(
        business_name=business.name,
        label=document.type.label,
        document_number=document.document_number,
        issue_date=format_date(document.issue_date),
        from_lines=_contact_lines(
            ("Phone", business.phone),
            ("Location", business.location),
            ("Email", business.email),
        ),
        recipient_label="Supplier" if document.type.is_supplier_facing else "To",
        counterparty_name=document.counterparty_name,
        to_lines=_contact_lines(
            ("Phone", document.counterparty_phone),
            ("Email", document.counterparty_email),
        ),
        items=items,
        subtotal=format_currency(document.subtotal, currency),
        tax=format_currency(document.tax, currency) if document.has_tax else None,
        total=format_currency(document.total, currency),
        due_date=due_date,
        pay_link=pay_link,
        qr_payload=qr_payload,
        field_rows=field_rows,
        free_notes=free_notes,
    )


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def _text_header(name: str, style: HeaderStyle) -> list[str]:
    if style is HeaderStyle.GRADIENT:
        inner = LINE_WIDTH - 2
        return [
            "╔" + "═" * inner + "╗",
            "║" + name.upper().center(inner) + "║",
            "╚" + "═" * inner + "╝",
            "",
        ]
    if style is HeaderStyle.SOLID:
        return ["═" * LINE_WIDTH, name.upper(), "═" * LINE_WIDTH, ""]
    return [name, "-" * LINE_WIDTH, ""]


def _render_text(view: _DocumentView, template: DocumentTemplate, options: RenderOptions) -> str:
    lines = _text_header(view.business_name, template.styling.header_style)

    lines += [
        view.label.upper(),
        f"Number: {view.document_number}",
        f"Date: {view.issue_date}",
        "",
        "FROM:",
        view.business_name,
        *view.from_lines,
        "",
        f"{view.recipient_label.upper()}:",
        view.counterparty_name,
        *view.to_lines,
        "",
        "ITEMS:",
        "-" * LINE_WIDTH,
    ]
    for row in view.items:
        lines.append(f"{row.index}. {row.description}")
        lines.append(f"   Quantity: {row.quantity} x {row.unit_price} = {row.total}")
    lines += ["-" * LINE_WIDTH, ""]

    lines.append(f"SUBTOTAL: {view.subtotal}")
    if view.tax is not None:
        lines.append(f"TAX: {view.tax}")
    lines += [f"TOTAL: {view.total}", ""]

    if view.due_date is not None:
        lines += ["PAYMENT TERMS:", f"Due Date: {view.due_date}", ""]

    if view.pay_link is not None:
        lines += ["PAY ONLINE:", view.pay_link, ""]

    if view.field_rows:
        lines.append("ADDITIONAL INFORMATION:")
        lines += [f"{label}: {value}" for label, value in view.field_rows]
        lines.append("")
    elif view.free_notes is not None:
        lines += ["NOTES:", view.free_notes, ""]

    lines += ["", "─" * LINE_WIDTH, *options.footer_lines]
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def _e(value: str) -> str:
    return html.escape(value, quote=True)


def _safe_color(value: str) -> str:
    return value if _COLOR_RE.match(value or "") else DEFAULT_PRIMARY_COLOR


def _header_css(style: HeaderStyle, color: str) -> str:
    if style is HeaderStyle.GRADIENT:
        return (
            f"background: linear-gradient(135deg, {color} 0%, #1F2937 100%); "
            "color: #FFFFFF; padding: 24px; border-radius: 8px;"
        )
    if style is HeaderStyle.SOLID:
        return f"background: {color}; color: #FFFFFF; padding: 24px;"
    return f"border-bottom: 3px solid {color}; padding-bottom: 20px;"


def _stylesheet(template: DocumentTemplate) -> str:
    color = _safe_color(template.styling.primary_color)
    name_color = color if template.styling.header_style is HeaderStyle.MINIMAL else "inherit"
    return "\n".join([
        "body { font-family: Arial, sans-serif; padding: 40px; color: #333333; }",
        f".header {{ text-align: center; margin-bottom: 40px; "
        f"{_header_css(template.styling.header_style, color)} }}",
        f".business-name {{ font-size: 28px; font-weight: bold; color: {name_color}; "
        "margin-bottom: 10px; }",
        ".document-type { font-size: 20px; margin-bottom: 10px; }",
        ".document-number, .document-date { font-size: 16px; }",
        ".info-section { display: flex; justify-content: space-between; margin-bottom: 30px; }",
        ".from-to { flex: 1; }",
        f".section-title {{ font-weight: bold; margin-bottom: 10px; color: {color}; }}",
        ".items-table { width: 100%; border-collapse: collapse; margin-bottom: 30px; }",
        f".items-table th {{ background-color: {color}; color: #FFFFFF; padding: 12px; "
        "text-align: left; }",
        ".items-table td { padding: 10px 12px; border-bottom: 1px solid #EEEEEE; }",
        ".totals { text-align: right; margin-top: 20px; }",
        ".total-row { margin-bottom: 10px; }",
        ".total-label { display: inline-block; width: 150px; font-weight: bold; }",
        ".total-value { display: inline-block; width: 150px; text-align: right; }",
        f".grand-total {{ font-size: 24px; font-weight: bold; color: {color}; "
        f"margin-top: 20px; padding-top: 20px; border-top: 2px solid {color}; }}",
        ".payment-terms, .payment-link { margin-top: 30px; text-align: center; color: #666666; }",
        f".template-fields, .notes {{ margin-top: 30px; padding: 15px; "
        f"background-color: #F9F9F9; border-left: 4px solid {color}; }}",
        ".footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #EEEEEE; "
        "text-align: center; color: #999999; font-size: 12px; }",
    ])


def _party_html(title: str, name: str, lines: tuple[str, ...]) -> list[str]:
    out = [
        '<div class="from-to">',
        f'<div class="section-title">{_e(title)}:</div>',
        f"<div>{_e(name)}</div>",
    ]
    out += [f"<div>{_e(line)}</div>" for line in lines]
    out.append("</div>")
    return out


def _total_row(label: str, value: str, extra_class: str = "") -> str:
    cls = f"total-row {extra_class}".strip()
    return (
        f'<div class="{cls}"><span class="total-label">{_e(label)}:</span>'
        f'<span class="total-value">{_e(value)}</span></div>'
    )


def _render_html(view: _DocumentView, template: DocumentTemplate, options: RenderOptions) -> str:
    style = template.styling.header_style
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="UTF-8">',
        f"<title>{_e(view.label)} {_e(view.document_number)}</title>",
        "<style>",
        _stylesheet(template),
        "</style>",
        "</head>",
        f'<body class="layout-{template.layout.value}">',
        f'<div class="header header-{style.value}">',
        f'<div class="business-name">{_e(view.business_name)}</div>',
        f'<div class="document-type">{_e(view.label)}</div>',
        f'<div class="document-number">{_e(view.document_number)}</div>',
        f'<div class="document-date">{_e(view.issue_date)}</div>',
        "</div>",
        '<div class="info-section">',
        *_party_html("From", view.business_name, view.from_lines),
        *_party_html(view.recipient_label, view.counterparty_name, view.to_lines),
        "</div>",
        '<table class="items-table">',
        "<thead><tr><th>#</th><th>Description</th><th>Quantity</th>"
        "<th>Unit Price</th><th>Total</th></tr></thead>",
        "<tbody>",
    ]
    for row in view.items:
        parts.append(
            f"<tr><td>{row.index}</td><td>{_e(row.description)}</td>"
            f"<td>{_e(row.quantity)}</td><td>{_e(row.unit_price)}</td>"
            f"<td>{_e(row.total)}</td></tr>"
        )
    parts += ["</tbody>", "</table>", '<div class="totals">', _total_row("Subtotal", view.subtotal)]
    if view.tax is not None:
        parts.append(_total_row("Tax", view.tax))
    parts += [_total_row("Total", view.total, "grand-total"), "</div>"]

    if view.due_date is not None:
        parts.append(
            f'<div class="payment-terms"><strong>Due Date:</strong> {_e(view.due_date)}</div>'
        )

    if view.pay_link is not None:
        parts.append(
            f'<div class="payment-link" data-payment="{_e(view.qr_payload or "")}">'
            f'<strong>Pay online:</strong> <a href="{_e(view.pay_link)}">{_e(view.pay_link)}</a>'
            "</div>"
        )

    if view.field_rows:
        parts += [
            '<div class="template-fields">',
            '<div class="section-title">Additional Information</div>',
        ]
        parts += [
            f'<div class="template-field-row"><span class="template-field-label">{_e(label)}:</span> '
            f'<span class="template-field-value">{_e(value)}</span></div>'
            for label, value in view.field_rows
        ]
        parts.append("</div>")
    elif view.free_notes is not None:
        body = "<br>".join(_e(line) for line in view.free_notes.splitlines())
        parts.append(f'<div class="notes"><strong>Notes:</strong><br>{body}</div>')

    footer = "<br>".join(_e(line) for line in options.footer_lines)
    parts += [f'<div class="footer">{footer}</div>', "</body>", "</html>"]
    return "\n".join(parts) + "\n"


class ContentRenderer:
    """
    Render documents to text and HTML.

    Contract:
        Pure -- no I/O, no clock, no mutation of inputs.
    """

    def __init__(self, options: RenderOptions | None = None):
        self._options = options or RenderOptions()

    @property
    def options(self) -> RenderOptions:
        return self._options

    @traced_engine("renderer", "1.0", fingerprint_fields=("document", "template"))
    def render(
        self,
        document: Document,
        business: BusinessProfile,
        template: DocumentTemplate,
    ) -> RenderedDocument:
        view = _build_view(document, business, template, self._options)
        rendered = RenderedDocument(
            text=_render_text(view, template, self._options),
            html=_render_html(view, template, self._options),
        )
        logger.debug("document_rendered", extra={
            "document_id": document.id,
            "document_type": document.type.value,
            "template_id": template.id,
            "item_count": len(document.items),
            "text_length": len(rendered.text),
            "html_length": len(rendered.html),
        })
        return rendered

    def render_text(
        self,
        document: Document,
        business: BusinessProfile,
        template: DocumentTemplate,
    ) -> str:
        view = _build_view(document, business, template, self._options)
        return _render_text(view, template, self._options)

    def render_html(
        self,
        document: Document,
        business: BusinessProfile,
        template: DocumentTemplate,
    ) -> str:
        view = _build_view(document, business, template, self._options)
        return _render_html(view, template, self._options)
