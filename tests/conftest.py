"""
Pytest fixtures for the bizdocs test suite.

Provides:
- Structured logging configuration and log capture
- A deterministic clock
- Factories for businesses, documents and payments
- The bundled template catalog
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from itertools import count

import pytest

from bizdocs_config import load_catalog
from bizdocs_kernel.domain.clock import DeterministicClock
from bizdocs_kernel.domain.documents import (
    BusinessProfile,
    BusinessType,
    Document,
    DocumentStatus,
    DocumentType,
    LineItem,
    Payment,
    PaymentMethod,
)
from bizdocs_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Fixed "today" used by aging tests.
TODAY = date(2024, 3, 15)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture bizdocs logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            record_payment(...)
            logs = captured_logs()
            assert any(r["message"] == "payment_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("bizdocs")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock fixed at TODAY."""
    return DeterministicClock(TODAY)


# =============================================================================
# Catalog
# =============================================================================


@pytest.fixture(scope="session")
def bundled_catalog():
    """The template catalog shipped in bizdocs_config/data/templates.yaml."""
    return load_catalog()


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def business():
    return BusinessProfile(
        name="Acme Hardware",
        type=BusinessType.RETAIL,
        phone="+263 77 123 4567",
        location="Harare",
        email="sales@acme.example",
        id="biz-1",
    )


@pytest.fixture
def make_document():
    """
    Factory for documents whose totals are derived from their items.

    Defaults to a 100.00 USD invoice with one line and no tax.
    """
    seq = count(1)

    def _make(
        *,
        id: str | None = None,
        type: DocumentType | str = DocumentType.INVOICE,
        items=None,
        tax=None,
        status: DocumentStatus | str = DocumentStatus.SENT,
        due_date: date | None = None,
        currency: str = "USD",
        issue_date: date = date(2024, 1, 15),
        counterparty_name: str = "Jane Customer",
        **kwargs,
    ) -> Document:
        n = next(seq)
        if items is None:
            items = [LineItem("Widget", Decimal("1"), Decimal("100.00"))]
        return Document.create(
            id=id or f"doc-{n}",
            type=type,
            document_number=kwargs.pop("document_number", f"INV-{n:04d}"),
            counterparty_name=counterparty_name,
            items=items,
            currency=currency,
            issue_date=issue_date,
            tax=tax,
            status=status,
            due_date=due_date,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_payment():
    """Factory for payments; amounts accept str/int/Decimal."""
    seq = count(1)

    def _make(
        document: Document,
        amount,
        *,
        id: str | None = None,
        currency: str | None = None,
        payment_date: date = date(2024, 2, 1),
        method: PaymentMethod = PaymentMethod.CASH,
    ) -> Payment:
        n = next(seq)
        return Payment(
            id=id or f"pay-{n}",
            document_id=document.id,
            amount=Decimal(str(amount)),
            currency=currency or document.currency,
            payment_date=payment_date,
            payment_method=method,
        )

    return _make
