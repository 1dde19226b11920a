"""
Values -- Immutable, self-validating monetary value object.

Responsibility:
    Provides ``Money``, which pairs a Decimal amount with its CurrencyCode so
    that amounts in different currencies are never summed or compared by
    accident.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except bizdocs_kernel.domain.currency.

Invariants enforced:
    - All monetary amounts are Decimal (never float).
    - Arithmetic and comparison require identical currencies.

Failure modes:
    - ValueError on construction with an unparseable amount.
    - UnsupportedCurrencyError for a currency missing from the format table.
    - ValueError when arithmetic mixes different currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from bizdocs_kernel.domain.currency import CurrencyCode, CurrencyRegistry, format_currency


def to_decimal(value: Decimal | int | float | str, what: str = "amount") -> Decimal:
    """Convert a primitive to Decimal via its string form (floats included)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid {what}: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {what}: {value!r}") from e


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its CurrencyCode -- they are NEVER
        separated.

    Guarantees:
        - Immutable and hashable.
        - amount is always a Decimal.
        - No silent currency mixing in addition, subtraction or comparison.

    Non-goals:
        - Does NOT perform currency conversion.
        - Does NOT auto-round -- callers must explicitly call .round().
    """

    amount: Decimal
    currency: CurrencyCode

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "currency", CurrencyCode.parse(self.currency))

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | CurrencyCode) -> Money:
        """Factory method for creating Money."""
        return cls(amount=to_decimal(amount), currency=CurrencyCode.parse(currency))

    @classmethod
    def zero(cls, currency: str | CurrencyCode) -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=Decimal("0"), currency=CurrencyCode.parse(currency))

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    @property
    def is_negative(self) -> bool:
        return self.amount < Decimal("0")

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's decimal places."""
        fmt = CurrencyRegistry.get_format(self.currency)
        rounded = self.amount.quantize(Decimal(fmt.quantize_string), rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def format(self) -> str:
        """Display string, e.g. ``$1,234.50``."""
        return format_currency(self.amount, self.currency)

    def _check_currency(self, other: Money, op: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {op} Money with different currencies: "
                f"{self.currency.value} and {other.currency.value}"
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency.value!r})"
