"""Pydantic schemas for sm_market API requests and responses.

Token amounts are returned both as raw base units (int) and as a display
string; raw values exceed 2**53, clients should parse them as big integers.
"""

from pydantic import BaseModel, Field

from config.settings import settings
from src.sm_common.units import units_to_display
from src.sm_market.domain.models import SubmissionDetail
from src.sm_market.engine.engine import StakingMarketEngine


def _display(amount: int) -> str:
    return units_to_display(amount, settings.TOKEN_SYMBOL)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SubmitRequest(BaseModel):
    content: str = Field(..., max_length=2048, description="Opaque content reference (image URL)")


class WhitelistRequest(BaseModel):
    submission_ids: list[int] = Field(..., description="Pending submission ids to approve")


class PickWinnerRequest(BaseModel):
    submission_id: int = Field(..., ge=0)


class TransferAdminRequest(BaseModel):
    new_admin: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SubmissionOut(BaseModel):
    id: int
    submitter: str
    content: str
    total_staked: int
    total_staked_display: str
    total_shares: int
    status: str
    staker_count: int

    @classmethod
    def from_detail(cls, detail: SubmissionDetail) -> "SubmissionOut":
        return cls(
            id=detail.id,
            submitter=detail.submitter,
            content=detail.content,
            total_staked=detail.total_staked,
            total_staked_display=_display(detail.total_staked),
            total_shares=detail.total_shares,
            status=detail.status.value,
            staker_count=detail.staker_count,
        )


class SubmissionPageOut(BaseModel):
    submission_ids: list[int]
    offset: int
    limit: int


class MarketOverviewOut(BaseModel):
    admin: str
    token_address: str
    stake_amount: int
    stake_amount_display: str
    deadline: int
    time_remaining: int
    total_pool: int
    total_pool_display: str
    submission_count: int
    winner_picked: bool
    winning_id: int | None
    rescue_triggered: bool
    rescue_available_at: int

    @classmethod
    def from_engine(cls, engine: StakingMarketEngine) -> "MarketOverviewOut":
        return cls(
            admin=engine.admin,
            token_address=settings.TOKEN_ADDRESS,
            stake_amount=engine.config.stake_amount,
            stake_amount_display=_display(engine.config.stake_amount),
            deadline=engine.deadline,
            time_remaining=engine.time_remaining(),
            total_pool=engine.total_pool,
            total_pool_display=_display(engine.total_pool),
            submission_count=engine.submission_count,
            winner_picked=engine.winner_picked,
            winning_id=engine.winning_id,
            rescue_triggered=engine.rescue_triggered,
            rescue_available_at=engine.rescue_available_at,
        )


class ShareBalanceOut(BaseModel):
    submission_id: int
    address: str
    shares: int


class ClaimStatusOut(BaseModel):
    address: str
    can_claim: bool
    claim_amount: int
    claim_amount_display: str


class SubmitOut(BaseModel):
    submission_id: int


class StakeOut(BaseModel):
    submission_id: int
    shares: int


class PayoutOut(BaseModel):
    amount: int
    amount_display: str

    @classmethod
    def from_amount(cls, amount: int) -> "PayoutOut":
        return cls(amount=amount, amount_display=_display(amount))


class DistributionOut(BaseModel):
    submission_id: int
    pool: int
    burn: int
    bonus: int
    staker_pool: int
