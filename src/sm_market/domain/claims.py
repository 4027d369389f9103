"""Claim settlement: proportional payout with last-claimer dust absorption."""

from src.sm_market.domain.models import ClaimSettlement


def claim_payout(settlement: ClaimSettlement, shares: int, is_last: bool) -> int:
    """Payout for a staker holding `shares` of the winning submission.

    The last eligible claimer receives whatever remains, which absorbs every
    floor-division remainder left by earlier claims.
    """
    if is_last:
        return settlement.remaining
    return settlement.distribution.staker_pool * shares // settlement.total_winning_shares


def is_eligible(settlement: ClaimSettlement | None, staker: str, shares: int) -> bool:
    return settlement is not None and staker not in settlement.claimed and shares > 0


def preview_payout(settlement: ClaimSettlement | None, staker: str, shares: int) -> int:
    """Amount `staker` would receive if they claimed now (0 when not eligible)."""
    if settlement is None or not is_eligible(settlement, staker, shares):
        return 0
    is_last = settlement.claimed_count + 1 == settlement.total_winning_stakers
    return claim_payout(settlement, shares, is_last)


def has_claimable_payout(settlement: ClaimSettlement | None, staker: str, shares: int) -> bool:
    """True exactly when claim() would pay `staker` something right now.

    An eligible non-last staker whose share floors to zero is excluded; as
    the last claimer they receive the remainder and become claimable again.
    """
    return preview_payout(settlement, staker, shares) > 0
