"""Currency -- closed currency enumeration and its formatting-rule table."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import ClassVar

from bizdocs_kernel.exceptions import UnsupportedCurrencyError


class CurrencyCode(str, Enum):
    """Currencies a document may be issued in."""

    USD = "USD"
    ZWL = "ZWL"

    @classmethod
    def parse(cls, value: "CurrencyCode | str") -> "CurrencyCode":
        """Coerce a code string (case-insensitive) to a CurrencyCode."""
        if isinstance(value, cls):
            return value
        normalized = value.upper().strip() if isinstance(value, str) else ""
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedCurrencyError(str(value)) from None


@dataclass(frozen=True)
class CurrencyFormat:
    """Display rules for a single currency."""

    code: CurrencyCode
    symbol: str
    decimal_places: int
    name: str
    group_separator: str = ","
    decimal_separator: str = "."

    @property
    def quantize_string(self) -> str:
        """String for Decimal.quantize() to round to this currency's precision."""
        if self.decimal_places == 0:
            return "1"
        return "0." + "0" * self.decimal_places


class CurrencyRegistry:
    """Formatting table keyed by CurrencyCode. Adding a currency is one row here."""

    _FORMATS: ClassVar[dict[CurrencyCode, CurrencyFormat]] = {
        CurrencyCode.USD: CurrencyFormat(CurrencyCode.USD, "$", 2, "US Dollar"),
        CurrencyCode.ZWL: CurrencyFormat(CurrencyCode.ZWL, "ZWL", 2, "Zimbabwean Dollar"),
    }

    @classmethod
    def get_format(cls, currency: CurrencyCode | str) -> CurrencyFormat:
        code = CurrencyCode.parse(currency)
        try:
            return cls._FORMATS[code]
        except KeyError:
            raise UnsupportedCurrencyError(code.value) from None

    @classmethod
    def get_decimal_places(cls, currency: CurrencyCode | str) -> int:
        return cls.get_format(currency).decimal_places

    @classmethod
    def supported(cls) -> tuple[CurrencyCode, ...]:
        return tuple(cls._FORMATS)


def _group_digits(digits: str, separator: str) -> str:
    groups: list[str] = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return separator.join(groups)


def format_currency(amount: Decimal | int | float | str, currency: CurrencyCode | str) -> str:
    """
    Format an amount for display, e.g. ``$1,234.50`` or ``ZWL1,234.50``.

    The amount is rounded half-up to the currency's decimal places and
    thousands-grouped; the symbol is prefixed with no separator. Negative
    amounts carry a leading minus sign before the symbol.
    """
    fmt = CurrencyRegistry.get_format(currency)
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    rounded = value.quantize(Decimal(fmt.quantize_string), rounding=ROUND_HALF_UP)

    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):f}"
    whole, _, fraction = text.partition(".")
    body = _group_digits(whole, fmt.group_separator)
    if fmt.decimal_places:
        body = f"{body}{fmt.decimal_separator}{fraction}"
    return f"{sign}{fmt.symbol}{body}"
