"""Payment link and QR payload for documents whose template shows a QR code."""

from __future__ import annotations

import json

from bizdocs_kernel.domain.documents import Document

DEFAULT_PAYMENT_LINK_BASE = "https://dreambig.app/pay"


def payment_link(document_id: str, base_url: str | None = None) -> str:
    """Shareable payment link for a document."""
    base = (base_url or DEFAULT_PAYMENT_LINK_BASE).rstrip("/")
    return f"{base}/{document_id}"


def payment_qr_payload(document: Document) -> str:
    """
    JSON string encoded into the payment QR code.

    Deterministic for a given document: keys are sorted and no generation
    timestamp is included, so re-rendering a document yields the same code.
    """
    payload = {
        "type": "payment",
        "documentId": document.id,
        "documentNumber": document.document_number,
        "amount": str(document.total_money.round().amount),
        "currency": document.currency.value,
        "customerName": document.counterparty_name,
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))
