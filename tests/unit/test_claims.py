"""Unit tests for claim payout and rescue refund math."""
from src.sm_market.domain.claims import (
    claim_payout,
    has_claimable_payout,
    is_eligible,
    preview_payout,
)
from src.sm_market.domain.models import ClaimSettlement, Distribution
from src.sm_market.domain.rescue import rescue_available_at, rescue_refund


def _settlement(staker_pool: int = 100, shares: int = 3, stakers: int = 3) -> ClaimSettlement:
    return ClaimSettlement(
        winning_id=0,
        distribution=Distribution(pool=staker_pool, burn=0, bonus=0, staker_pool=staker_pool),
        total_winning_shares=shares,
        total_winning_stakers=stakers,
        remaining=staker_pool,
    )


class TestClaimPayout:
    def test_proportional_floor(self) -> None:
        assert claim_payout(_settlement(), shares=1, is_last=False) == 33

    def test_last_claimer_takes_remaining(self) -> None:
        s = _settlement()
        s.remaining = 34
        assert claim_payout(s, shares=1, is_last=True) == 34

    def test_payouts_sum_to_staker_pool(self) -> None:
        s = _settlement(staker_pool=1_000_001, shares=7, stakers=3)
        holdings = {"0xa": 1, "0xb": 2, "0xc": 4}
        paid = 0
        for staker, shares in holdings.items():
            s.claimed.add(staker)
            payout = claim_payout(s, shares, s.claimed_count == s.total_winning_stakers)
            s.remaining -= payout
            paid += payout
        assert paid == 1_000_001
        assert s.remaining == 0

    def test_tiny_position_floors_to_zero(self) -> None:
        s = _settlement(staker_pool=10, shares=1000, stakers=2)
        assert claim_payout(s, shares=1, is_last=False) == 0


class TestEligibilityAndPreview:
    def test_no_settlement(self) -> None:
        assert is_eligible(None, "0xa", 5) is False
        assert preview_payout(None, "0xa", 5) == 0

    def test_eligible(self) -> None:
        assert is_eligible(_settlement(), "0xa", 1) is True

    def test_no_shares(self) -> None:
        assert is_eligible(_settlement(), "0xa", 0) is False
        assert preview_payout(_settlement(), "0xa", 0) == 0

    def test_already_claimed(self) -> None:
        s = _settlement()
        s.claimed.add("0xa")
        assert is_eligible(s, "0xa", 1) is False
        assert preview_payout(s, "0xa", 1) == 0

    def test_preview_for_last_claimer_includes_dust(self) -> None:
        s = _settlement()
        s.claimed.update({"0xa", "0xb"})
        s.remaining = 34
        assert preview_payout(s, "0xc", 1) == 34

    def test_preview_for_non_last(self) -> None:
        assert preview_payout(_settlement(), "0xa", 1) == 33

    def test_floored_to_zero_is_not_claimable(self) -> None:
        s = _settlement(staker_pool=10, shares=1000, stakers=2)
        assert is_eligible(s, "0xa", 1) is True
        assert has_claimable_payout(s, "0xa", 1) is False

    def test_floored_to_zero_claimable_as_last(self) -> None:
        s = _settlement(staker_pool=10, shares=1000, stakers=2)
        s.claimed.add("0xb")
        s.remaining = 1
        assert has_claimable_payout(s, "0xa", 1) is True

    def test_positive_preview_is_claimable(self) -> None:
        assert has_claimable_payout(_settlement(), "0xa", 1) is True
        assert has_claimable_payout(None, "0xa", 1) is False


class TestRescueMath:
    def test_available_at(self) -> None:
        assert rescue_available_at(1000, 600) == 1600

    def test_proportional_refund(self) -> None:
        assert rescue_refund(300, shares=1, submission_total_shares=3) == 100

    def test_refund_floors(self) -> None:
        assert rescue_refund(100, shares=1, submission_total_shares=3) == 33

    def test_zero_total_shares(self) -> None:
        assert rescue_refund(100, shares=0, submission_total_shares=0) == 0
