"""
Currency precision and minor-unit conversion helpers.

Every ledger computation runs on integer minor units (cents, fils, yen...)
so that sums reconcile exactly; ``Decimal`` major units only appear at the
boundary.
"""
from decimal import Decimal, ROUND_HALF_UP, ROUND_FLOOR, InvalidOperation
from typing import List, Union
from splitledger.core.errors import InvalidAmount, UnsupportedCurrency


SUPPORTED_CURRENCIES = (
    "USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "NZD", "SEK", "NOK",
    "DKK", "PLN", "CZK", "HUF", "RUB", "CNY", "HKD", "SGD", "KRW", "THB",
    "MYR", "IDR", "PHP", "VND", "INR", "PKR", "BDT", "LKR", "NPR", "MMK",
    "LAK", "KHR", "BND", "TWD", "MOP", "BRL", "ARS", "CLP", "COP", "PEN",
    "MXN", "ZAR", "EGP", "MAD", "TND", "NGN", "KES", "GHS", "XOF", "XAF",
    "ETB", "UGX", "PYG", "RWF", "KMF", "GNF", "MGA", "BHD", "IQD", "JOD",
    "KWD", "LYD", "OMR",
)

ZERO_DECIMAL_CURRENCIES = frozenset({
    "JPY", "KRW", "VND", "IDR", "CLP", "PYG", "UGX", "RWF", "KMF", "GNF",
    "MGA", "XOF", "XAF",
})

THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"})

CURRENCY_SYMBOLS = {
    "VND": "₫",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "KRW": "₩",
    "THB": "฿",
    "SGD": "S$",
    "MYR": "RM",
}

Number = Union[Decimal, int, str]


def is_valid_currency_code(code: str) -> bool:
    """Check that code is a 3-letter supported ISO 4217 code (case-insensitive)."""
    if not code or not isinstance(code, str):
        return False
    code = code.strip().upper()
    return len(code) == 3 and code in SUPPORTED_CURRENCIES


def normalize_currency_code(code: str) -> str:
    """Return the upper-cased code, raising UnsupportedCurrency when invalid."""
    if not is_valid_currency_code(code):
        raise UnsupportedCurrency(f"Unsupported currency code: {code!r}")
    return code.strip().upper()


def supported_currencies() -> List[str]:
    """Get list of supported currency codes."""
    return list(SUPPORTED_CURRENCIES)


def get_decimal_places(code: str) -> int:
    """Number of minor-unit digits for a currency (0, 2 or 3)."""
    code = normalize_currency_code(code)
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def to_decimal(amount: Number) -> Decimal:
    """Parse an amount into a finite Decimal, raising InvalidAmount otherwise."""
    if isinstance(amount, float):
        # Floats go through their shortest repr so 0.1 stays 0.1
        amount = repr(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Not a monetary amount: {amount!r}")
    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount!r}")
    return value


def to_minor_units(amount: Number, currency: str) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Rounds half away from zero to the currency precision, so
    ``to_minor_units("10.005", "USD") == 1001``.
    """
    places = get_decimal_places(currency)
    value = to_decimal(amount).scaleb(places)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor_units(units: int, currency: str) -> Decimal:
    """Convert integer minor units back to a quantized Decimal."""
    places = get_decimal_places(currency)
    return Decimal(int(units)).scaleb(-places).quantize(_quantum(places))


def round_amount(amount: Number, currency: str) -> Decimal:
    """Round an amount to the currency precision."""
    return from_minor_units(to_minor_units(amount, currency), currency)


def divide_minor_units(numerator: int, denominator: int, floor: bool = False) -> int:
    """Integer division of minor units, rounding half away from zero unless floor is set."""
    if denominator == 0:
        raise ZeroDivisionError("denominator must not be zero")
    quotient = Decimal(numerator) / Decimal(denominator)
    return int(quotient.quantize(Decimal(1), rounding=ROUND_FLOOR if floor else ROUND_HALF_UP))


def tolerance_units(currency: str, tolerance: Number = Decimal("0.01")) -> Decimal:
    """Express a major-unit tolerance in minor units (may be fractional for 0-digit currencies)."""
    return to_decimal(tolerance).scaleb(get_decimal_places(currency))


def get_currency_symbol(code: str) -> str:
    """Display symbol for a currency, falling back to the code itself."""
    code = code.strip().upper()
    return CURRENCY_SYMBOLS.get(code, code)


def format_amount(amount: Number, currency: str) -> str:
    """Format an amount with symbol, thousands separators and currency precision."""
    places = get_decimal_places(currency)
    value = round_amount(amount, currency)
    sign = "-" if value < 0 else ""
    formatted = f"{abs(value):,.{places}f}"
    return f"{sign}{get_currency_symbol(currency)}{formatted}"


def _quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)
