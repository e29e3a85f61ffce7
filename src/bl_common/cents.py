"""Integer arithmetic utilities for cents-based balances.

All amounts and balances use int (cents, or the currency's minor unit).
No float, no Decimal.
"""

_SYMBOLS = {
    "usd": "$",
    "cad": "CA$",
    "aud": "A$",
    "gbp": "£",
    "eur": "€",
}

# Currencies whose smallest unit is the whole unit
_ZERO_DECIMAL = {"jpy"}


def cents_to_display(cents: int, currency: str = "usd") -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    code = currency.lower()
    sign = "-" if cents < 0 else ""
    abs_cents = -cents if cents < 0 else cents
    symbol = _SYMBOLS.get(code)
    if code in _ZERO_DECIMAL:
        number = f"{abs_cents:,}"
    else:
        number = f"{abs_cents // 100:,}.{abs_cents % 100:02d}"
    if symbol is None:
        return f"{sign}{number} {code.upper()}"
    return f"{sign}{symbol}{number}"
