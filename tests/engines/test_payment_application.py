"""
Tests for payment application: pure functions and payment state.

Covers:
- paid / outstanding / fully-paid queries
- Bounded recording and its failure values
- Reconciliation of status flag vs. ledger
"""

from decimal import Decimal

import pytest

from bizdocs_engines.payments import (
    PaymentResult,
    PaymentStateKind,
    display_outstanding,
    is_fully_paid,
    outstanding_amount,
    paid_amount,
    payment_state,
    record_payment,
)
from bizdocs_kernel.exceptions import (
    InsufficientDocumentBalanceError,
    PaymentCurrencyMismatchError,
    PaymentDocumentMismatchError,
)


class TestQueries:
    """paid_amount / outstanding_amount / is_fully_paid."""

    def test_no_payments(self, make_document):
        doc = make_document()
        assert paid_amount(doc, []) == Decimal("0")
        assert outstanding_amount(doc, []) == Decimal("100.00")
        assert not is_fully_paid(doc, [])

    def test_partial(self, make_document, make_payment):
        doc = make_document()
        payments = [make_payment(doc, "30"), make_payment(doc, "20.50")]
        assert paid_amount(doc, payments) == Decimal("50.50")
        assert outstanding_amount(doc, payments) == Decimal("49.50")
        assert not is_fully_paid(doc, payments)

    def test_payments_for_other_documents_ignored(self, make_document, make_payment):
        doc, other = make_document(), make_document()
        payments = [make_payment(other, "100"), make_payment(doc, "10")]
        assert paid_amount(doc, payments) == Decimal("10")

    def test_exact_payment_is_fully_paid(self, make_document, make_payment):
        doc = make_document()
        assert is_fully_paid(doc, [make_payment(doc, "100.00")])

    def test_overpayment_is_negative_outstanding(self, make_document, make_payment):
        doc = make_document()
        payments = [make_payment(doc, "70"), make_payment(doc, "50")]
        assert outstanding_amount(doc, payments) == Decimal("-20.00")
        assert display_outstanding(doc, payments) == Decimal("0")
        assert is_fully_paid(doc, payments)

    def test_zero_total_document_is_fully_paid(self, make_document):
        doc = make_document(items=[])
        assert is_fully_paid(doc, [])


class TestRecordPayment:
    """record_payment returns results, never raises."""

    def test_partial_then_overpayment_rejected(self, make_document, make_payment):
        """100.00 invoice: 60 succeeds, then 41 fails with 40 outstanding."""
        doc = make_document()
        first = make_payment(doc, "60")

        result = record_payment(doc, [], first)
        assert result.is_success
        assert result.payment == first

        second = record_payment(doc, [first], make_payment(doc, "41"))
        assert not second.is_success
        assert isinstance(second.error, InsufficientDocumentBalanceError)
        assert second.error.outstanding == Decimal("40.00")
        assert second.error.requested == Decimal("41")
        assert second.error.currency == "USD"
        assert second.error_code == "INSUFFICIENT_DOCUMENT_BALANCE"

    def test_exact_remaining_amount_accepted(self, make_document, make_payment):
        doc = make_document()
        first = make_payment(doc, "60")
        assert record_payment(doc, [first], make_payment(doc, "40")).is_success

    def test_paid_document_rejects_any_payment(self, make_document, make_payment):
        doc = make_document()
        result = record_payment(doc, [make_payment(doc, "100")], make_payment(doc, "0.01"))
        assert isinstance(result.error, InsufficientDocumentBalanceError)
        assert result.error.outstanding == Decimal("0.00")

    def test_wrong_document_rejected(self, make_document, make_payment):
        doc, other = make_document(), make_document()
        result = record_payment(doc, [], make_payment(other, "10"))
        assert isinstance(result.error, PaymentDocumentMismatchError)
        assert result.error.payment_document_id == other.id

    def test_wrong_currency_rejected(self, make_document, make_payment):
        doc = make_document()
        result = record_payment(doc, [], make_payment(doc, "10", currency="ZWL"))
        assert isinstance(result.error, PaymentCurrencyMismatchError)
        assert result.error.payment_currency == "ZWL"

    def test_existing_payments_for_other_documents_ignored(self, make_document, make_payment):
        doc, other = make_document(), make_document()
        result = record_payment(doc, [make_payment(other, "100")], make_payment(doc, "100"))
        assert result.is_success

    def test_logs_outcomes(self, make_document, make_payment, captured_logs):
        doc = make_document()
        first = make_payment(doc, "60")
        record_payment(doc, [], first)
        record_payment(doc, [first], make_payment(doc, "41"))

        messages = [r["message"] for r in captured_logs()]
        assert "payment_recorded" in messages
        rejected = [r for r in captured_logs() if r["message"] == "payment_rejected"]
        assert rejected[0]["error_code"] == "INSUFFICIENT_DOCUMENT_BALANCE"


class TestPaymentResult:
    """Tests for PaymentResult."""

    def test_unwrap_success(self, make_document, make_payment):
        payment = make_payment(make_document(), "5")
        assert PaymentResult.success(payment).unwrap() is payment

    def test_unwrap_failure_raises_carried_error(self):
        error = InsufficientDocumentBalanceError("d", Decimal("2"), Decimal("1"), "USD")
        result = PaymentResult.failure(error)
        assert result.error_code == "INSUFFICIENT_DOCUMENT_BALANCE"
        with pytest.raises(InsufficientDocumentBalanceError):
            result.unwrap()


class TestPaymentState:
    """Both paid signals side by side."""

    def test_unpaid(self, make_document):
        state = payment_state(make_document(), [])
        assert state.state is PaymentStateKind.UNPAID
        assert not state.conflict

    def test_partially_paid(self, make_document, make_payment):
        doc = make_document()
        state = payment_state(doc, [make_payment(doc, "25")])
        assert state.state is PaymentStateKind.PARTIALLY_PAID
        assert state.ledger_paid_amount == Decimal("25")
        assert state.ledger_outstanding == Decimal("75.00")

    def test_paid_by_ledger_and_status(self, make_document, make_payment):
        doc = make_document(status="paid")
        state = payment_state(doc, [make_payment(doc, "100")])
        assert state.state is PaymentStateKind.PAID
        assert state.status_says_paid
        assert not state.conflict

    def test_status_paid_without_payments_is_conflict(self, make_document):
        state = payment_state(make_document(status="paid"), [])
        assert state.status_says_paid
        assert not state.ledger_fully_paid
        assert state.state is PaymentStateKind.UNPAID
        assert state.conflict

    def test_ledger_paid_but_status_sent_is_conflict(self, make_document, make_payment):
        doc = make_document(status="sent")
        state = payment_state(doc, [make_payment(doc, "100")])
        assert state.state is PaymentStateKind.PAID
        assert state.conflict

    def test_cancelled_is_void(self, make_document, make_payment):
        doc = make_document(status="cancelled")
        state = payment_state(doc, [make_payment(doc, "100")])
        assert state.state is PaymentStateKind.VOID
        assert not state.conflict
