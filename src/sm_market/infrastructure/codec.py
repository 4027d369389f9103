"""MarketState <-> JSON text.

Token and share amounts are written as JSON integers; they exceed 2**53, so
the text is only read back through `loads_state` (Python ints are unbounded).
Sets are written sorted so equal states encode to equal text.
"""

import json

from src.sm_common.enums import SubmissionStatus
from src.sm_market.domain.models import (
    ClaimSettlement,
    Distribution,
    MarketState,
    RescueState,
    Submission,
)
from src.sm_market.domain.stakes import StakeBook


def dumps_state(state: MarketState) -> str:
    settlement = state.settlement
    return json.dumps(
        {
            "admin": state.admin,
            "deadline": state.deadline,
            "total_pool": state.total_pool,
            "total_burned": state.total_burned,
            "submissions": [
                {
                    "id": s.id,
                    "submitter": s.submitter,
                    "content": s.content,
                    "total_staked": s.total_staked,
                    "total_shares": s.total_shares,
                    "status": s.status.value,
                }
                for s in state.submissions
            ],
            "submitted": sorted(state.submitted),
            "stakes": [list(position) for position in state.stakes.positions()],
            "settlement": None if settlement is None else {
                "winning_id": settlement.winning_id,
                "pool": settlement.distribution.pool,
                "burn": settlement.distribution.burn,
                "bonus": settlement.distribution.bonus,
                "staker_pool": settlement.distribution.staker_pool,
                "total_winning_shares": settlement.total_winning_shares,
                "total_winning_stakers": settlement.total_winning_stakers,
                "remaining": settlement.remaining,
                "claimed": sorted(settlement.claimed),
                "total_paid": settlement.total_paid,
            },
            "rescue": {
                "triggered": state.rescue.triggered,
                "triggered_at": state.rescue.triggered_at,
                "total_refunded": state.rescue.total_refunded,
            },
        }
    )


def loads_state(payload: str) -> MarketState:
    data = json.loads(payload)
    settlement = data["settlement"]
    return MarketState(
        admin=data["admin"],
        deadline=data["deadline"],
        total_pool=data["total_pool"],
        total_burned=data["total_burned"],
        submissions=[
            Submission(
                id=s["id"],
                submitter=s["submitter"],
                content=s["content"],
                total_staked=s["total_staked"],
                total_shares=s["total_shares"],
                status=SubmissionStatus(s["status"]),
            )
            for s in data["submissions"]
        ],
        submitted=set(data["submitted"]),
        stakes=StakeBook.from_positions(
            [(sid, staker, shares) for sid, staker, shares in data["stakes"]]
        ),
        settlement=None if settlement is None else ClaimSettlement(
            winning_id=settlement["winning_id"],
            distribution=Distribution(
                pool=settlement["pool"],
                burn=settlement["burn"],
                bonus=settlement["bonus"],
                staker_pool=settlement["staker_pool"],
            ),
            total_winning_shares=settlement["total_winning_shares"],
            total_winning_stakers=settlement["total_winning_stakers"],
            remaining=settlement["remaining"],
            claimed=set(settlement["claimed"]),
            total_paid=settlement["total_paid"],
        ),
        rescue=RescueState(**data["rescue"]),
    )
