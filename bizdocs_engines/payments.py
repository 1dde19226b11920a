"""
Module: bizdocs_engines.payments
Responsibility:
    Apply payments to documents: paid / outstanding / fully-paid queries,
    bounded recording of new payments, and the reconciled payment state of a
    document (status flag vs. ledger).

Architecture position:
    Engines -- the free functions are pure; ``PaymentLedger`` is an
    in-memory arena keyed by document id that owns the payments it records.

Invariants enforced:
    - Payment bound: a successful recording never takes the paid amount of
      a document above its total.
    - Payments for other documents never count toward a document.
    - Recording failures are returned as ``PaymentResult`` values; nothing
      is mutated on failure.
    - ``PaymentLedger`` serializes writes with a lock.  A caller passing
      ``expected_revision`` gets compare-and-swap semantics on the
      per-document revision.

Failure modes:
    - InsufficientDocumentBalanceError: amount exceeds the outstanding amount.
    - PaymentDocumentMismatchError: payment targets another document.
    - PaymentCurrencyMismatchError: payment currency differs from the document's.
    - StaleLedgerSnapshotError: revision moved since the caller's snapshot.
    - DuplicatePaymentIdError: ``PaymentLedger.record`` of a stored id whose
      details differ from the stored payment.
    - PaymentNotFoundError: ``PaymentLedger.delete`` of an unknown id (raised).

Usage:
    from bizdocs_engines.payments import PaymentLedger

    ledger = PaymentLedger()
    result = ledger.record(invoice, payment)
    if not result.is_success:
        logger.warning("payment_rejected", extra={"code": result.error.code})
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from bizdocs_kernel.domain.documents import Document, DocumentStatus, Payment
from bizdocs_kernel.exceptions import (
    DuplicatePaymentIdError,
    InsufficientDocumentBalanceError,
    PaymentCurrencyMismatchError,
    PaymentDocumentMismatchError,
    PaymentError,
    PaymentNotFoundError,
    StaleLedgerSnapshotError,
)
from bizdocs_kernel.logging_config import get_logger

logger = get_logger("engines.payments")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class PaymentResult:
    """
    Outcome of recording a payment.

    Exactly one of ``payment`` and ``error`` is set.
    """

    payment: Payment | None = None
    error: PaymentError | StaleLedgerSnapshotError | None = None

    @classmethod
    def success(cls, payment: Payment) -> PaymentResult:
        return cls(payment=payment)

    @classmethod
    def failure(cls, error: PaymentError | StaleLedgerSnapshotError) -> PaymentResult:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error is not None else None

    def unwrap(self) -> Payment:
        """Return the recorded payment, or raise the carried error."""
        if self.error is not None:
            raise self.error
        assert self.payment is not None
        return self.payment


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def _payments_for(document: Document, payments: Iterable[Payment]) -> list[Payment]:
    return [p for p in payments if p.document_id == document.id]


def paid_amount(document: Document, payments: Iterable[Payment]) -> Decimal:
    """Sum of payment amounts applied to ``document``."""
    return sum((p.amount for p in _payments_for(document, payments)), _ZERO)


def outstanding_amount(document: Document, payments: Iterable[Payment]) -> Decimal:
    """``total - paid``.  Negative when the document is overpaid."""
    return document.total - paid_amount(document, payments)


def display_outstanding(document: Document, payments: Iterable[Payment]) -> Decimal:
    """Outstanding amount floored at zero, for display."""
    return max(_ZERO, outstanding_amount(document, payments))


def is_fully_paid(document: Document, payments: Iterable[Payment]) -> bool:
    return paid_amount(document, payments) >= document.total


def _validate(
    document: Document,
    existing_payments: Iterable[Payment],
    new_payment: Payment,
) -> PaymentError | None:
    if new_payment.document_id != document.id:
        return PaymentDocumentMismatchError(
            new_payment.id, new_payment.document_id, document.id,
        )
    if new_payment.currency != document.currency:
        return PaymentCurrencyMismatchError(
            new_payment.id, new_payment.currency.value, document.currency.value,
        )
    outstanding = outstanding_amount(document, existing_payments)
    if new_payment.amount > outstanding:
        return InsufficientDocumentBalanceError(
            document.id, new_payment.amount, outstanding, document.currency.value,
        )
    return None


def record_payment(
    document: Document,
    existing_payments: Iterable[Payment],
    new_payment: Payment,
) -> PaymentResult:
    """
    Validate ``new_payment`` against the caller's snapshot of payments.

    Nothing is stored: on success the caller persists the returned payment.
    Two callers validating against the same snapshot can both succeed; use
    ``PaymentLedger`` when recording must be atomic.
    """
    error = _validate(document, tuple(existing_payments), new_payment)
    if error is not None:
        _log_rejected(document, new_payment, error)
        return PaymentResult.failure(error)

    logger.info("payment_recorded", extra={
        "document_id": document.id,
        "payment_id": new_payment.id,
        "amount": str(new_payment.amount),
        "currency": new_payment.currency.value,
    })
    return PaymentResult.success(new_payment)


def _log_rejected(document: Document, payment: Payment, error: Exception) -> None:
    logger.warning("payment_rejected", extra={
        "document_id": document.id,
        "payment_id": payment.id,
        "amount": str(payment.amount),
        "error_code": getattr(error, "code", type(error).__name__),
    })


# ---------------------------------------------------------------------------
# Payment state
# ---------------------------------------------------------------------------


class PaymentStateKind(str, Enum):
    VOID = "void"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class PaymentState:
    """
    Both "paid" signals for a document, side by side.

    ``status_says_paid`` comes from the document status; the ``ledger_*``
    fields come from the payments.  ``state`` is derived: a cancelled
    document is void, otherwise the ledger decides.  ``conflict`` is True
    when the status flag and the ledger disagree.
    """

    document_id: str
    status_says_paid: bool
    ledger_paid_amount: Decimal
    ledger_outstanding: Decimal
    ledger_fully_paid: bool
    state: PaymentStateKind

    @property
    def conflict(self) -> bool:
        if self.state is PaymentStateKind.VOID:
            return False
        return self.status_says_paid != self.ledger_fully_paid


def payment_state(document: Document, payments: Iterable[Payment]) -> PaymentState:
    paid = paid_amount(document, tuple(payments))
    fully_paid = paid >= document.total

    if document.status is DocumentStatus.CANCELLED:
        kind = PaymentStateKind.VOID
    elif fully_paid:
        kind = PaymentStateKind.PAID
    elif paid > 0:
        kind = PaymentStateKind.PARTIALLY_PAID
    else:
        kind = PaymentStateKind.UNPAID

    return PaymentState(
        document_id=document.id,
        status_says_paid=document.status is DocumentStatus.PAID,
        ledger_paid_amount=paid,
        ledger_outstanding=document.total - paid,
        ledger_fully_paid=fully_paid,
        state=kind,
    )


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerSnapshot:
    """A document's payments at a given revision."""

    document_id: str
    payments: tuple[Payment, ...]
    paid_amount: Decimal
    revision: int


class PaymentLedger:
    """
    Single-writer store of payments, keyed by document id.

    Every successful ``record`` or ``delete`` bumps the revision of the
    affected document.  Reads return immutable tuples.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._payments: dict[str, list[Payment]] = {}
        self._revisions: dict[str, int] = {}
        self._index: dict[str, str] = {}  # payment id -> document id

    @classmethod
    def from_payments(cls, payments: Iterable[Payment]) -> PaymentLedger:
        """Seed a ledger from already-persisted payments, without validation."""
        ledger = cls()
        for payment in payments:
            ledger._payments.setdefault(payment.document_id, []).append(payment)
            ledger._index[payment.id] = payment.document_id
        for document_id in ledger._payments:
            ledger._revisions[document_id] = 1
        return ledger

    def revision(self, document_id: str) -> int:
        with self._lock:
            return self._revisions.get(document_id, 0)

    def payments_for(self, document_id: str) -> tuple[Payment, ...]:
        with self._lock:
            return tuple(self._payments.get(document_id, ()))

    def snapshot(self, document_id: str) -> LedgerSnapshot:
        with self._lock:
            payments = tuple(self._payments.get(document_id, ()))
            return LedgerSnapshot(
                document_id=document_id,
                payments=payments,
                paid_amount=sum((p.amount for p in payments), _ZERO),
                revision=self._revisions.get(document_id, 0),
            )

    def paid_amount(self, document: Document) -> Decimal:
        return paid_amount(document, self.payments_for(document.id))

    def outstanding_amount(self, document: Document) -> Decimal:
        return outstanding_amount(document, self.payments_for(document.id))

    def is_fully_paid(self, document: Document) -> bool:
        return is_fully_paid(document, self.payments_for(document.id))

    def record(
        self,
        document: Document,
        payment: Payment,
        expected_revision: int | None = None,
    ) -> PaymentResult:
        """
        Validate and store ``payment`` atomically.

        Preconditions:
            - ``expected_revision``, when given, is the revision the caller
              read; a mismatch fails with StaleLedgerSnapshotError.
        """
        with self._lock:
            current = self._revisions.get(document.id, 0)
            if expected_revision is not None and expected_revision != current:
                error = StaleLedgerSnapshotError(document.id, expected_revision, current)
                _log_rejected(document, payment, error)
                return PaymentResult.failure(error)

            stored_under = self._index.get(payment.id)
            if stored_under == document.id:
                stored = next(p for p in self._payments[document.id] if p.id == payment.id)
                if stored == payment:
                    return PaymentResult.success(stored)
                error = DuplicatePaymentIdError(payment.id, document.id)
            elif stored_under is not None:
                error = PaymentDocumentMismatchError(payment.id, stored_under, document.id)
            else:
                error = _validate(document, self._payments.get(document.id, []), payment)
            if error is not None:
                _log_rejected(document, payment, error)
                return PaymentResult.failure(error)

            self._payments.setdefault(document.id, []).append(payment)
            self._index[payment.id] = document.id
            self._revisions[document.id] = current + 1

        logger.info("payment_recorded", extra={
            "document_id": document.id,
            "payment_id": payment.id,
            "amount": str(payment.amount),
            "currency": payment.currency.value,
            "revision": current + 1,
        })
        return PaymentResult.success(payment)

    def delete(self, payment_id: str) -> Payment:
        """
        Remove a payment unconditionally.

        Raises:
            PaymentNotFoundError: If no payment with this id is stored.
        """
        with self._lock:
            document_id = self._index.pop(payment_id, None)
            if document_id is None:
                raise PaymentNotFoundError(payment_id)
            payments = self._payments[document_id]
            removed = next(p for p in payments if p.id == payment_id)
            payments.remove(removed)
            revision = self._revisions.get(document_id, 0) + 1
            self._revisions[document_id] = revision

        logger.info("payment_deleted", extra={
            "document_id": document_id,
            "payment_id": payment_id,
            "amount": str(removed.amount),
            "revision": revision,
        })
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)
