"""
Documents -- business documents, payments and the issuing business.

Responsibility:
    Frozen dataclass value objects for the nouns of the ledger: the
    financial documents a business issues or receives, the payments applied
    against them, and the profile of the business itself.

Architecture position:
    Kernel > Domain -- pure data definitions with ZERO I/O.  Documents are
    supplied by the persistence collaborator; the core only reads them and
    derives views.

Invariants enforced:
    - All monetary fields use ``Decimal`` -- never ``float``.
    - Line totals equal ``quantity * unit_price``.
    - ``subtotal`` equals the sum of line totals and ``total`` equals
      ``subtotal + tax`` (within ``CONSERVATION_TOLERANCE``).
    - Payment amounts are strictly positive.

Failure modes:
    - ValueError for enum strings that are not members.
    - InvalidLineItemError / DocumentTotalsMismatchError on construction.
    - InvalidPaymentAmountError for non-positive payment amounts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Sequence

from bizdocs_kernel.domain.currency import CurrencyCode
from bizdocs_kernel.domain.notes import FreeTextNotes, Notes, StructuredNotes, notes_from_legacy
from bizdocs_kernel.domain.values import Money, to_decimal
from bizdocs_kernel.exceptions import (
    DocumentTotalsMismatchError,
    InvalidLineItemError,
    InvalidPaymentAmountError,
)

# Pinned tolerance for the conservation checks.
CONSERVATION_TOLERANCE = Decimal("1e-9")


class DocumentType(str, Enum):
    """Kinds of financial document."""
    INVOICE = "invoice"
    RECEIPT = "receipt"
    QUOTATION = "quotation"
    PURCHASE_ORDER = "purchase_order"
    CONTRACT = "contract"
    SUPPLIER_AGREEMENT = "supplier_agreement"

    @property
    def label(self) -> str:
        """Display label: first letter capitalized, underscores as spaces."""
        text = self.value.replace("_", " ")
        return text[:1].upper() + text[1:]

    @property
    def is_supplier_facing(self) -> bool:
        """True when the counterparty is a supplier rather than a customer."""
        return self in (DocumentType.PURCHASE_ORDER, DocumentType.SUPPLIER_AGREEMENT)


class DocumentStatus(str, Enum):
    """Document lifecycle states (transitions happen outside the core)."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class BusinessType(str, Enum):
    """Category of the operating business, used to pick templates."""
    RETAIL = "retail"
    SERVICES = "services"
    MANUFACTURING = "manufacturing"
    AGRICULTURE = "agriculture"
    RESTAURANT = "restaurant"
    SALON = "salon"
    CONSTRUCTION = "construction"
    TRANSPORT = "transport"
    OTHER = "other"  # also the template wildcard


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    MOBILE_MONEY = "mobile_money"
    CARD = "card"
    OTHER = "other"


def _within_tolerance(a: Decimal, b: Decimal) -> bool:
    return abs(a - b) <= CONSERVATION_TOLERANCE


@dataclass(frozen=True)
class LineItem:
    """A single line on a document. ``total`` defaults to quantity x unit price."""
    description: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal | None = None

    def __post_init__(self) -> None:
        quantity = to_decimal(self.quantity, "quantity")
        unit_price = to_decimal(self.unit_price, "unit price")
        if quantity < 0:
            raise InvalidLineItemError(self.description, "quantity cannot be negative")
        if unit_price < 0:
            raise InvalidLineItemError(self.description, "unit price cannot be negative")

        expected = quantity * unit_price
        if self.total is None:
            total = expected
        else:
            total = to_decimal(self.total, "line total")
            if not _within_tolerance(total, expected):
                raise InvalidLineItemError(
                    self.description,
                    f"total {total} does not equal {quantity} x {unit_price}",
                )

        object.__setattr__(self, "quantity", quantity)
        object.__setattr__(self, "unit_price", unit_price)
        object.__setattr__(self, "total", total)


@dataclass(frozen=True)
class BusinessProfile:
    """The issuing business, as supplied by the surrounding application."""
    name: str
    type: BusinessType | str = BusinessType.OTHER
    phone: str | None = None
    location: str | None = None
    email: str | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        # Unknown business types are kept as plain strings; template
        # resolution falls back for them.
        if isinstance(self.type, str) and not isinstance(self.type, BusinessType):
            try:
                object.__setattr__(self, "type", BusinessType(self.type))
            except ValueError:
                pass


@dataclass(frozen=True)
class Document:
    """An issued financial document."""
    id: str
    type: DocumentType
    document_number: str
    counterparty_name: str
    items: tuple[LineItem, ...]
    subtotal: Decimal
    total: Decimal
    currency: CurrencyCode
    issue_date: date
    tax: Decimal | None = None
    due_date: date | None = None
    status: DocumentStatus = DocumentStatus.DRAFT
    counterparty_phone: str | None = None
    counterparty_email: str | None = None
    notes: Notes | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", DocumentType(self.type))
        object.__setattr__(self, "status", DocumentStatus(self.status))
        object.__setattr__(self, "currency", CurrencyCode.parse(self.currency))
        object.__setattr__(self, "items", tuple(self.items))
        if isinstance(self.notes, str):
            object.__setattr__(self, "notes", notes_from_legacy(self.notes))
        elif self.notes is not None and not isinstance(
            self.notes, (FreeTextNotes, StructuredNotes)
        ):
            raise TypeError(f"notes must be Notes or str, got {type(self.notes)}")

        subtotal = to_decimal(self.subtotal, "subtotal")
        total = to_decimal(self.total, "total")
        tax = to_decimal(self.tax, "tax") if self.tax is not None else None
        object.__setattr__(self, "subtotal", subtotal)
        object.__setattr__(self, "total", total)
        object.__setattr__(self, "tax", tax)

        if tax is not None and tax < 0:
            raise DocumentTotalsMismatchError(self.id, "tax", Decimal("0"), tax)

        items_sum = sum((item.total for item in self.items), Decimal("0"))
        if not _within_tolerance(subtotal, items_sum):
            raise DocumentTotalsMismatchError(self.id, "subtotal", items_sum, subtotal)

        expected_total = subtotal + (tax or Decimal("0"))
        if not _within_tolerance(total, expected_total):
            raise DocumentTotalsMismatchError(self.id, "total", expected_total, total)

    @classmethod
    def create(
        cls,
        *,
        id: str,
        type: DocumentType | str,
        document_number: str,
        counterparty_name: str,
        items: Sequence[LineItem],
        currency: CurrencyCode | str,
        issue_date: date,
        tax: Decimal | int | str | None = None,
        **kwargs,
    ) -> Document:
        """Build a document whose subtotal and total are derived from its items."""
        items = tuple(items)
        subtotal = sum((item.total for item in items), Decimal("0"))
        tax_value = to_decimal(tax, "tax") if tax is not None else None
        return cls(
            id=id,
            type=type,
            document_number=document_number,
            counterparty_name=counterparty_name,
            items=items,
            subtotal=subtotal,
            tax=tax_value,
            total=subtotal + (tax_value or Decimal("0")),
            currency=currency,
            issue_date=issue_date,
            **kwargs,
        )

    @property
    def total_money(self) -> Money:
        return Money(self.total, self.currency)

    @property
    def has_tax(self) -> bool:
        """True when a non-zero tax amount is present."""
        return self.tax is not None and self.tax != 0


@dataclass(frozen=True)
class Payment:
    """Money received or paid against exactly one document."""
    id: str
    document_id: str
    amount: Decimal
    currency: CurrencyCode
    payment_date: date
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference: str | None = None
    notes: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount, "payment amount")
        if amount <= 0:
            raise InvalidPaymentAmountError(self.id, amount)
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "currency", CurrencyCode.parse(self.currency))
        object.__setattr__(self, "payment_method", PaymentMethod(self.payment_method))

    @property
    def money(self) -> Money:
        return Money(self.amount, self.currency)
