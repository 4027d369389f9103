"""Market invariant verification (INV-1..INV-4)."""

import logging

from src.sm_common.enums import SubmissionStatus
from src.sm_market.domain.models import MarketState

logger = logging.getLogger(__name__)


def verify_market_invariants(state: MarketState) -> list[str]:
    """Check conservation invariants. Returns list of violation strings.

    INV-1: total_pool == sum(total_staked) over non-banned submissions
    INV-2: per submission, sum of share balances == total_shares
           (<= once rescue withdrawals have zeroed balances)
    INV-3: burn + bonus + staker_pool == pool at selection
    INV-4: paid claims + remaining == staker_pool
    """
    violations: list[str] = []

    live_staked = sum(
        s.total_staked for s in state.submissions if s.status is not SubmissionStatus.BANNED
    )
    if live_staked != state.total_pool:
        violations.append(
            f"INV-1 violated: total_pool={state.total_pool} != live staked={live_staked}"
        )

    for s in state.submissions:
        held = state.stakes.total_of(s.id)
        ok = held <= s.total_shares if state.rescue.triggered else held == s.total_shares
        if not ok:
            violations.append(
                f"INV-2 violated: submission {s.id} balances={held} total_shares={s.total_shares}"
            )

    settlement = state.settlement
    if settlement is not None:
        d = settlement.distribution
        if d.burn + d.bonus + d.staker_pool != d.pool:
            violations.append(
                f"INV-3 violated: burn({d.burn}) + bonus({d.bonus}) + "
                f"staker_pool({d.staker_pool}) != pool={d.pool}"
            )
        if settlement.total_paid + settlement.remaining != d.staker_pool:
            violations.append(
                f"INV-4 violated: paid({settlement.total_paid}) + "
                f"remaining({settlement.remaining}) != staker_pool={d.staker_pool}"
            )

    for msg in violations:
        logger.error(msg)
    return violations


def owed_by_custody(state: MarketState) -> int:
    """Value the custody account must still hold for outstanding obligations."""
    if state.settlement is not None:
        return state.settlement.remaining
    return state.total_pool - state.rescue.total_refunded
