"""
Typed Exception Hierarchy for the document ledger kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers decide how a failure is shown to the user (a dialog, an API error,
a log line). They should never have to parse a message string to do so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    result = record_payment(document, payments, payment)
    if not result.is_success:
        err = result.error
        if isinstance(err, InsufficientDocumentBalanceError):
            show(f"Payment cannot exceed outstanding amount of {err.outstanding}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BizdocsKernelError (base)
    |
    +-- DocumentError
    |   +-- DocumentTotalsMismatchError
    |   +-- InvalidLineItemError
    |
    +-- PaymentError
    |   +-- InsufficientDocumentBalanceError
    |   +-- InvalidPaymentAmountError
    |   +-- PaymentCurrencyMismatchError
    |   +-- PaymentDocumentMismatchError
    |   +-- PaymentNotFoundError
    |   +-- DuplicatePaymentIdError
    |
    +-- ConcurrencyError
    |   +-- StaleLedgerSnapshotError
    |
    +-- CurrencyError
    |   +-- UnsupportedCurrencyError
    |
    +-- TemplateError
        +-- InvalidTemplateCatalogError

There is no TemplateNotFoundError. Template resolution always falls back
to a synthesized default template.

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                           | When Raised / Returned
-------------|--------------------------------|------------------------------------
Document     | DOCUMENT_TOTALS_MISMATCH       | subtotal/tax/total do not reconcile
             | INVALID_LINE_ITEM              | negative qty/price, bad line total
-------------|--------------------------------|------------------------------------
Payment      | INSUFFICIENT_DOCUMENT_BALANCE  | payment exceeds outstanding amount
             | INVALID_PAYMENT_AMOUNT         | amount <= 0
             | PAYMENT_CURRENCY_MISMATCH      | payment currency != document's
             | PAYMENT_DOCUMENT_MISMATCH      | payment recorded on wrong document
             | PAYMENT_NOT_FOUND              | delete of unknown payment id
             | DUPLICATE_PAYMENT_ID           | payment id reused with other details
-------------|--------------------------------|------------------------------------
Concurrency  | STALE_LEDGER_SNAPSHOT          | expected revision no longer current
-------------|--------------------------------|------------------------------------
Currency     | UNSUPPORTED_CURRENCY           | code missing from the format table
-------------|--------------------------------|------------------------------------
Template     | INVALID_TEMPLATE_CATALOG       | catalog YAML cannot be parsed
"""

from decimal import Decimal


class BizdocsKernelError(Exception):
    """
    Base exception for all kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BIZDOCS_KERNEL_ERROR"


# Document-related exceptions


class DocumentError(BizdocsKernelError):
    """Base exception for document-related errors."""

    code: str = "DOCUMENT_ERROR"


class DocumentTotalsMismatchError(DocumentError):
    """Document subtotal, tax and total do not reconcile."""

    code: str = "DOCUMENT_TOTALS_MISMATCH"

    def __init__(
        self,
        document_id: str,
        field: str,
        expected: Decimal,
        actual: Decimal,
    ):
        self.document_id = document_id
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Document {document_id} has inconsistent {field}: "
            f"expected {expected}, got {actual}"
        )


class InvalidLineItemError(DocumentError):
    """A line item violates its quantity/price/total constraints."""

    code: str = "INVALID_LINE_ITEM"

    def __init__(self, description: str, reason: str):
        self.description = description
        self.reason = reason
        super().__init__(f"Invalid line item '{description}': {reason}")


# Payment-related exceptions


class PaymentError(BizdocsKernelError):
    """Base exception for payment-related errors."""

    code: str = "PAYMENT_ERROR"


class InsufficientDocumentBalanceError(PaymentError):
    """Payment would take the document's paid amount above its total."""

    code: str = "INSUFFICIENT_DOCUMENT_BALANCE"

    def __init__(
        self,
        document_id: str,
        requested: Decimal,
        outstanding: Decimal,
        currency: str,
    ):
        self.document_id = document_id
        self.requested = requested
        self.outstanding = outstanding
        self.currency = currency
        super().__init__(
            f"Payment of {requested} {currency} exceeds outstanding amount "
            f"of {outstanding} {currency} on document {document_id}"
        )


class InvalidPaymentAmountError(PaymentError):
    """Payment amount is zero or negative."""

    code: str = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, payment_id: str, amount: Decimal):
        self.payment_id = payment_id
        self.amount = amount
        super().__init__(f"Payment {payment_id} amount must be positive, got {amount}")


class PaymentCurrencyMismatchError(PaymentError):
    """Payment currency differs from the document currency."""

    code: str = "PAYMENT_CURRENCY_MISMATCH"

    def __init__(self, payment_id: str, payment_currency: str, document_currency: str):
        self.payment_id = payment_id
        self.payment_currency = payment_currency
        self.document_currency = document_currency
        super().__init__(
            f"Payment {payment_id} is in {payment_currency} but the document "
            f"is in {document_currency}"
        )


class PaymentDocumentMismatchError(PaymentError):
    """Payment references a different document than the one it is applied to."""

    code: str = "PAYMENT_DOCUMENT_MISMATCH"

    def __init__(self, payment_id: str, payment_document_id: str, document_id: str):
        self.payment_id = payment_id
        self.payment_document_id = payment_document_id
        self.document_id = document_id
        super().__init__(
            f"Payment {payment_id} belongs to document {payment_document_id}, "
            f"not {document_id}"
        )


class DuplicatePaymentIdError(PaymentError):
    """Payment id already stored on the document with different contents."""

    code: str = "DUPLICATE_PAYMENT_ID"

    def __init__(self, payment_id: str, document_id: str):
        self.payment_id = payment_id
        self.document_id = document_id
        super().__init__(
            f"Payment {payment_id} is already recorded on document {document_id} "
            f"with different details"
        )


class PaymentNotFoundError(PaymentError):
    """Payment with given ID was not found in the ledger."""

    code: str = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: str):
        self.payment_id = payment_id
        super().__init__(f"Payment not found: {payment_id}")


# Concurrency-related exceptions


class ConcurrencyError(BizdocsKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class StaleLedgerSnapshotError(ConcurrencyError):
    """The caller's view of a document's payments is no longer current."""

    code: str = "STALE_LEDGER_SNAPSHOT"

    def __init__(self, document_id: str, expected_revision: int, actual_revision: int):
        self.document_id = document_id
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision
        super().__init__(
            f"Ledger for document {document_id} is at revision {actual_revision}, "
            f"caller expected {expected_revision}"
        )


# Currency-related exceptions


class CurrencyError(BizdocsKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class UnsupportedCurrencyError(CurrencyError):
    """Currency code has no entry in the formatting table."""

    code: str = "UNSUPPORTED_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Unsupported currency code: '{currency}'")


# Template-related exceptions


class TemplateError(BizdocsKernelError):
    """Base exception for template configuration errors."""

    code: str = "TEMPLATE_ERROR"


class InvalidTemplateCatalogError(TemplateError):
    """Template catalog source could not be parsed into templates."""

    code: str = "INVALID_TEMPLATE_CATALOG"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid template catalog {source}: {reason}")
