"""Integer arithmetic utilities for 18-decimal token amounts.

All amounts, prices and share counts are int base units. No float, no Decimal.
"""

TOKEN_DECIMALS = 18
UNIT = 10**TOKEN_DECIMALS
BPS_DENOMINATOR = 10_000


def to_units(whole_tokens: int) -> int:
    """Convert whole tokens to base units: 50000 -> 50000 * 10**18."""
    return whole_tokens * UNIT


def validate_bps(bps: int) -> None:
    """Validate that a basis-point fraction is in the range [0, 10000]."""
    if not (0 <= bps <= BPS_DENOMINATOR):
        raise ValueError(f"Basis points must be between 0 and {BPS_DENOMINATOR}, got {bps}")


def bps_of(amount: int, bps: int) -> int:
    """Floor share of amount: amount * bps // 10000 (remainder stays with the caller)."""
    return amount * bps // BPS_DENOMINATOR


def units_to_display(amount: int, symbol: str = "CLAWD") -> str:
    """Convert base units to display string: 50000 * 10**18 -> '50,000 CLAWD'.

    Fractional digits are kept up to 4 places, trailing zeros trimmed.
    """
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    whole, frac = divmod(amount, UNIT)
    frac_str = f"{frac:0{TOKEN_DECIMALS}d}"[:4].rstrip("0")
    if frac_str:
        return f"{sign}{whole:,}.{frac_str} {symbol}"
    return f"{sign}{whole:,} {symbol}"
