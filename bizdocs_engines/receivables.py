"""
Module: bizdocs_engines.receivables
Responsibility:
    Derive accounts-receivable (customer invoices) and accounts-payable
    (purchase orders, supplier agreements) views from documents, with
    outstanding amounts, days overdue, aging bucket and a status per entry,
    plus totals per side.

Architecture position:
    Engines -- pure derivation.  "Today" comes from an injected ``Clock``
    or an explicit ``as_of`` date; entries are recomputed on every call and
    never cached.

Invariants enforced:
    - Cancelled documents never appear.
    - Only entries with an outstanding amount or an overdue status appear.
    - An entry is ``paid``, else ``overdue`` when days overdue > 0, else
      ``current``.
    - ``total_overdue`` <= ``total_outstanding`` for non-negative entries.

Paid source:
    ``PaidSource.DOCUMENT_STATUS`` (default) treats a document as paid when
    its status is ``paid`` and ignores payments.  ``PaidSource.LEDGER`` uses
    ``payment_state`` so partial payments reduce the outstanding amount.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from bizdocs_kernel.domain.clock import Clock
from bizdocs_kernel.domain.currency import CurrencyCode
from bizdocs_kernel.domain.documents import (
    Document,
    DocumentStatus,
    DocumentType,
    Payment,
)
from bizdocs_kernel.logging_config import get_logger
from bizdocs_engines.aging import STANDARD_BUCKETS, AgeBucket, AgingCalculator
from bizdocs_engines.payments import PaymentStateKind, payment_state
from bizdocs_engines.tracer import traced_engine

logger = get_logger("engines.receivables")

_ZERO = Decimal("0")

RECEIVABLE_TYPES: frozenset[DocumentType] = frozenset({DocumentType.INVOICE})
PAYABLE_TYPES: frozenset[DocumentType] = frozenset({
    DocumentType.PURCHASE_ORDER,
    DocumentType.SUPPLIER_AGREEMENT,
})


class AgingStatus(str, Enum):
    CURRENT = "current"
    OVERDUE = "overdue"
    PAID = "paid"


class PaidSource(str, Enum):
    """Which signal decides whether a document is paid."""
    DOCUMENT_STATUS = "document_status"
    LEDGER = "ledger"


@dataclass(frozen=True)
class _Entry:
    document_id: str
    document_number: str
    counterparty_name: str
    total_amount: Decimal
    paid_amount: Decimal
    outstanding_amount: Decimal
    currency: CurrencyCode
    due_date: date | None
    days_overdue: int
    status: AgingStatus
    aging_bucket: str

    @property
    def is_overdue(self) -> bool:
        return self.status is AgingStatus.OVERDUE


@dataclass(frozen=True)
class ReceivableEntry(_Entry):
    """A customer invoice with money still to come in."""

    @property
    def customer_name(self) -> str:
        return self.counterparty_name


@dataclass(frozen=True)
class PayableEntry(_Entry):
    """A supplier document with money still to go out."""

    @property
    def supplier_name(self) -> str:
        return self.counterparty_name


@dataclass(frozen=True)
class BalanceSummary:
    """Entries of one side plus their totals."""

    entries: tuple[_Entry, ...]
    total_outstanding: Decimal
    total_overdue: Decimal

    @classmethod
    def from_entries(cls, entries: Sequence[_Entry]) -> BalanceSummary:
        entries = tuple(entries)
        return cls(
            entries=entries,
            total_outstanding=sum((e.outstanding_amount for e in entries), _ZERO),
            total_overdue=sum(
                (e.outstanding_amount for e in entries if e.is_overdue), _ZERO,
            ),
        )

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def overdue_count(self) -> int:
        return sum(1 for e in self.entries if e.is_overdue)

    def outstanding_by_currency(self) -> dict[CurrencyCode, Decimal]:
        """Outstanding totals per currency, in first-seen order."""
        totals: dict[CurrencyCode, Decimal] = OrderedDict()
        for entry in self.entries:
            totals[entry.currency] = totals.get(entry.currency, _ZERO) + entry.outstanding_amount
        return dict(totals)

    def outstanding_by_bucket(self) -> dict[str, Decimal]:
        """Outstanding totals per aging bucket name, in first-seen order."""
        totals: dict[str, Decimal] = OrderedDict()
        for entry in self.entries:
            totals[entry.aging_bucket] = (
                totals.get(entry.aging_bucket, _ZERO) + entry.outstanding_amount
            )
        return dict(totals)


class ReceivablesAggregator:
    """
    Build receivable and payable views.

    Contract:
        No I/O.  The clock is read only when ``as_of`` is not given.
    """

    def __init__(
        self,
        clock: Clock,
        paid_source: PaidSource | str = PaidSource.DOCUMENT_STATUS,
        buckets: Sequence[AgeBucket] = STANDARD_BUCKETS,
    ):
        self._clock = clock
        self._paid_source = PaidSource(paid_source)
        self._aging = AgingCalculator(buckets)

    @property
    def paid_source(self) -> PaidSource:
        return self._paid_source

    def receivables(
        self,
        documents: Iterable[Document],
        payments: Iterable[Payment] = (),
        as_of: date | None = None,
    ) -> list[ReceivableEntry]:
        return self._entries(ReceivableEntry, RECEIVABLE_TYPES, documents, payments, as_of)

    def payables(
        self,
        documents: Iterable[Document],
        payments: Iterable[Payment] = (),
        as_of: date | None = None,
    ) -> list[PayableEntry]:
        return self._entries(PayableEntry, PAYABLE_TYPES, documents, payments, as_of)

    @traced_engine("receivables", "1.0", fingerprint_fields=("as_of",))
    def receivable_summary(
        self,
        documents: Iterable[Document],
        payments: Iterable[Payment] = (),
        as_of: date | None = None,
    ) -> BalanceSummary:
        return BalanceSummary.from_entries(self.receivables(documents, payments, as_of))

    @traced_engine("payables", "1.0", fingerprint_fields=("as_of",))
    def payable_summary(
        self,
        documents: Iterable[Document],
        payments: Iterable[Payment] = (),
        as_of: date | None = None,
    ) -> BalanceSummary:
        return BalanceSummary.from_entries(self.payables(documents, payments, as_of))

    def _entries(
        self,
        entry_cls: type[_Entry],
        types: frozenset[DocumentType],
        documents: Iterable[Document],
        payments: Iterable[Payment],
        as_of: date | None,
    ) -> list:
        as_of = as_of if as_of is not None else self._clock.today()
        payments = tuple(payments)

        entries = []
        skipped = 0
        for document in documents:
            if document.type not in types or document.status is DocumentStatus.CANCELLED:
                continue
            entry = self._entry(entry_cls, document, payments, as_of)
            if entry.outstanding_amount > 0 or entry.is_overdue:
                entries.append(entry)
            else:
                skipped += 1

        logger.debug("balance_entries_derived", extra={
            "side": entry_cls.__name__,
            "as_of": as_of,
            "paid_source": self._paid_source.value,
            "entry_count": len(entries),
            "settled_count": skipped,
        })
        return entries

    def _entry(
        self,
        entry_cls: type[_Entry],
        document: Document,
        payments: tuple[Payment, ...],
        as_of: date,
    ) -> _Entry:
        if self._paid_source is PaidSource.LEDGER:
            state = payment_state(document, payments)
            is_paid = state.state is PaymentStateKind.PAID
            paid = state.ledger_paid_amount
            outstanding = state.ledger_outstanding
        else:
            is_paid = document.status is DocumentStatus.PAID
            paid = document.total if is_paid else _ZERO
            outstanding = document.total - paid

        days_overdue = 0 if is_paid else self._aging.days_overdue(document.due_date, as_of)

        if is_paid:
            status = AgingStatus.PAID
        elif days_overdue > 0:
            status = AgingStatus.OVERDUE
        else:
            status = AgingStatus.CURRENT

        return entry_cls(
            document_id=document.id,
            document_number=document.document_number,
            counterparty_name=document.counterparty_name,
            total_amount=document.total,
            paid_amount=paid,
            outstanding_amount=outstanding,
            currency=document.currency,
            due_date=document.due_date,
            days_overdue=days_overdue,
            status=status,
            aging_bucket=self._aging.classify(days_overdue).name,
        )
