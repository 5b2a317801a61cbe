"""Currency and percentage display strings.

Codes with a known locale symbol are rendered the way an en-US number
formatter would (``-$1,234.56``). Anything else, crypto codes included, goes
through a manual symbol + number fallback. Neither path raises.
"""

import math

# Currencies the locale formatter knows how to render.
ISO_SYMBOLS = {
    "usd": "$",
    "eur": "€",
    "inr": "₹",
    "gbp": "£",
    "jpy": "¥",
    "cny": "CN¥",
    "aud": "A$",
    "cad": "CA$",
    "chf": "CHF ",
    "krw": "₩",
    "brl": "R$",
}

# Manual fallback table, used when the locale path does not apply.
FALLBACK_SYMBOLS = {
    "usd": "$",
    "eur": "€",
    "inr": "₹",
    "btc": "₿",
    "eth": "Ξ",
}

DEFAULT_SYMBOL = "$"

_COMPACT_STEPS = (
    (1_000_000_000_000, "T"),
    (1_000_000_000, "B"),
    (1_000_000, "M"),
)


def _is_number(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def currency_symbol(currency: str) -> str:
    """Symbol from the fallback table; `$` for anything unknown."""
    return FALLBACK_SYMBOLS.get((currency or "").lower(), DEFAULT_SYMBOL)


def _compact(amount: float) -> str:
    for threshold, suffix in _COMPACT_STEPS:
        if amount >= threshold:
            return f"{amount / threshold:,.2f}{suffix}"
    return f"{amount:,.2f}"


def format_currency(amount, currency: str, compact: bool = False) -> str:
    """Format an amount in the given currency.

    None, NaN and infinities render as the zero value for the currency.
    ``compact`` only abbreviates amounts of one million and up.
    """
    code = (currency or "").lower()
    if not _is_number(amount):
        return f"{currency_symbol(code)}0.00"

    amount = float(amount)
    body = _compact(amount) if compact and amount >= 1_000_000 else f"{abs(amount):,.2f}"

    symbol = ISO_SYMBOLS.get(code)
    if symbol is None:
        # Manual rendering keeps the sign next to the number: "₿-1.00"
        if not (compact and amount >= 1_000_000):
            body = f"{amount:,.2f}"
        return f"{currency_symbol(code)}{body}"

    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{body}"


def format_percentage(value) -> str:
    if not _is_number(value):
        return "0.00%"
    return f"{float(value):.2f}%"
