"""Display formatting for money (EUR) and hours.

Amounts are stored as floats; formatting goes through Decimal so rounding
is half-up and never shows binary float noise.

    fmt_money(1200)      -> '€1,200.00'
    fmt_hours(9.0)       -> '9'
    fmt_hours(1.5)       -> '1.50'
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

from records import DEFAULT_COMMISSION_PCT, ClientService, PricingType

EUR_SYMBOL = "€"  # €
DECIMAL_PLACES = 2

Number = Union[Decimal, str, int, float]


def ensure_decimal(x: Number) -> Decimal:
    """Strict conversion to Decimal.

    Raises:
        ValueError: if the value cannot be converted
    """
    if isinstance(x, bool):
        raise ValueError(f"Invalid amount type: {type(x)}")
    try:
        if isinstance(x, Decimal):
            return x
        if isinstance(x, float):
            # repr() gives the shortest round-tripping form (0.1, not 0.1000000000000000055...)
            return Decimal(repr(x))
        if isinstance(x, (int, str)):
            return Decimal(str(x).strip())
    except InvalidOperation as e:
        raise ValueError(f"Cannot convert amount to Decimal: {x!r}") from e
    raise ValueError(f"Invalid amount type: {type(x)}")


def _group_thousands(integer_part: str) -> str:
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i + 3] for i in range(0, len(reversed_int), 3)]
    return ",".join(groups)[::-1]


def fmt_number(amount: Number, decimals: int = DECIMAL_PLACES) -> str:
    """Thousands separators, up to ``decimals`` places, trailing zeros dropped."""
    dec = ensure_decimal(amount).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    sign = "-" if dec < 0 else ""
    integer_part, _, decimal_part = str(abs(dec)).partition(".")
    decimal_part = decimal_part.rstrip("0")
    out = _group_thousands(integer_part)
    return f"{sign}{out}.{decimal_part}" if decimal_part else f"{sign}{out}"


def fmt_money(amount: Number) -> str:
    """
    Format monetary amount as EUR.

    Examples:
        >>> fmt_money(1200)
        '€1,200.00'
        >>> fmt_money(18.5)
        '€18.50'
        >>> fmt_money(-3)
        '-€3.00'
    """
    dec = ensure_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if dec < 0 else ""
    integer_part, _, decimal_part = str(abs(dec)).partition(".")
    decimal_part = decimal_part.ljust(DECIMAL_PLACES, "0")[:DECIMAL_PLACES]
    return f"{sign}{EUR_SYMBOL}{_group_thousands(integer_part)}.{decimal_part}"


def fmt_hours(hours: Number) -> str:
    """Whole numbers without decimals, anything else with exactly 2."""
    dec = ensure_decimal(hours)
    if dec == dec.to_integral_value():
        return str(int(dec))
    return str(dec.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def price_summary(client_service: ClientService) -> str:
    """Short pricing label, e.g. '€500.00/mo', '€40.00/hr', '€1,000.00', '30% commission'."""
    pricing_type = client_service.pricing_type
    if pricing_type == PricingType.FIXED_MONTHLY:
        return _price(client_service.monthly_fixed_price, "/mo")
    if pricing_type == PricingType.HOURLY:
        return _price(client_service.hourly_rate, "/hr")
    if pricing_type == PricingType.FIXED_ONE_TIME:
        return _price(client_service.one_time_price, "")
    if pricing_type == PricingType.COMMISSION:
        pct = client_service.commission_rate_pct
        if pct is None:
            pct = DEFAULT_COMMISSION_PCT
        return f"{fmt_number(pct)}% commission"
    return "—"


def _price(amount: Optional[float], suffix: str) -> str:
    if amount is None:
        return "—"
    return f"{fmt_money(amount)}{suffix}"
