"""Linear bonding curve: pure functions, no state.

    price(S)  = base_price + (S // UNIT) * price_increment
    shares    = stake * UNIT // price(S)

S is the submission's cumulative issued shares. Normalizing S to whole shares
keeps the increment independent of the 18-decimal share scale. Price never
decreases in S, so repeated equal stakes never yield more shares than the
previous one. There is no cap: at extreme S the floor division can issue zero
shares for a real stake, which is accepted degenerate behavior.
"""

from src.sm_common.units import UNIT


def price_at(total_shares: int, base_price: int, price_increment: int) -> int:
    """Price of one whole share given the shares already issued."""
    return base_price + (total_shares // UNIT) * price_increment


def shares_for_stake(
    total_shares: int, stake_amount: int, base_price: int, price_increment: int
) -> int:
    """Shares issued for one stake at the current curve position (floor)."""
    return stake_amount * UNIT // price_at(total_shares, base_price, price_increment)
