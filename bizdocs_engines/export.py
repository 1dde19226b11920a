"""CSV export of documents for spreadsheets and accountants."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from bizdocs_kernel.domain.documents import Document
from bizdocs_kernel.logging_config import get_logger

logger = get_logger("engines.export")

DOCUMENT_CSV_HEADERS: tuple[str, ...] = (
    "Document Number",
    "Type",
    "Date",
    "Due Date",
    "Customer Name",
    "Customer Email",
    "Customer Phone",
    "Subtotal",
    "Tax",
    "Total",
    "Currency",
    "Status",
)


def _document_row(document: Document) -> tuple[str, ...]:
    return (
        document.document_number,
        document.type.value,
        document.issue_date.isoformat(),
        document.due_date.isoformat() if document.due_date else "",
        document.counterparty_name,
        document.counterparty_email or "",
        document.counterparty_phone or "",
        str(document.subtotal),
        str(document.tax if document.tax is not None else Decimal("0")),
        str(document.total),
        document.currency.value,
        document.status.value,
    )


def documents_to_csv(
    documents: Iterable[Document],
    start: date | None = None,
    end: date | None = None,
) -> str:
    """
    Export documents as CSV text with every value quoted.

    ``start``/``end`` restrict the export to documents issued within the
    inclusive date range.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(DOCUMENT_CSV_HEADERS)

    count = 0
    for document in documents:
        if start is not None and document.issue_date < start:
            continue
        if end is not None and document.issue_date > end:
            continue
        writer.writerow(_document_row(document))
        count += 1

    logger.info("documents_exported", extra={"format": "csv", "row_count": count})
    return buffer.getvalue()
