"""Money parsing and currency minor units.

Stored prices are ``Numeric(10, 2)``; anything that would not round-trip
through that column is rejected before it reaches the store.
"""

from decimal import Decimal, InvalidOperation

from app.errors import ValidationError

MAX_AMOUNT = Decimal("99999999.99")
CENT = Decimal("0.01")

# https://docs.stripe.com/currencies#zero-decimal
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
        "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
    }
)
# https://docs.stripe.com/currencies#three-decimal
THREE_DECIMAL_CURRENCIES = frozenset({"bhd", "jod", "kwd", "omr", "tnd"})


def parse_money(value, field_name: str) -> Decimal:
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field_name} must not exceed {MAX_AMOUNT}")
    if amount != amount.quantize(CENT):
        raise ValidationError(f"{field_name} must have at most 2 decimal places")
    return amount


def currency_exponent(currency: str) -> int:
    """Number of decimal digits in the currency's minor unit."""
    currency = currency.lower()
    if currency in ZERO_DECIMAL_CURRENCIES:
        return 0
    if currency in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def fits_currency(amount: Decimal, currency: str) -> bool:
    step = Decimal(1).scaleb(-currency_exponent(currency))
    return amount == amount.quantize(step)


def to_minor_units(amount: Decimal, currency: str) -> int:
    scaled = Decimal(str(amount)).scaleb(currency_exponent(currency))
    return int(scaled.quantize(Decimal("1")))
