"""Domain models for sm_market: pure dataclasses, no I/O."""

from dataclasses import dataclass, field

from src.sm_common.enums import MarketEventType, SubmissionStatus
from src.sm_common.errors import InvalidSubmissionStatusError
from src.sm_common.units import BPS_DENOMINATOR, UNIT, validate_bps
from src.sm_market.domain.stakes import StakeBook

# Only these transitions exist; WHITELISTED and BANNED are terminal.
_ALLOWED_TRANSITIONS: dict[SubmissionStatus, frozenset[SubmissionStatus]] = {
    SubmissionStatus.PENDING: frozenset(
        {SubmissionStatus.WHITELISTED, SubmissionStatus.BANNED}
    ),
    SubmissionStatus.WHITELISTED: frozenset(),
    SubmissionStatus.BANNED: frozenset(),
}


@dataclass(frozen=True)
class MarketConfig:
    """Deployment wiring, fixed for the lifetime of one round."""

    admin: str
    stake_amount: int                 # base units pulled per submit/stake
    round_duration: int               # seconds from construction to deadline
    burn_address: str = "0x000000000000000000000000000000000000dEaD"
    rescue_delay: int = 7 * 24 * 3600
    base_price: int = UNIT            # price of one share at zero supply
    price_increment: int = 10**12     # added per whole share already issued
    burn_bps: int = 2500
    bonus_bps: int = 1000
    allow_submitter_stake: bool = True

    def __post_init__(self) -> None:
        if not self.admin:
            raise ValueError("admin must not be empty")
        if not self.burn_address:
            raise ValueError("burn_address must not be empty")
        if self.stake_amount <= 0:
            raise ValueError(f"stake_amount must be positive, got {self.stake_amount}")
        if self.round_duration <= 0:
            raise ValueError(f"round_duration must be positive, got {self.round_duration}")
        if self.rescue_delay < 0:
            raise ValueError(f"rescue_delay must not be negative, got {self.rescue_delay}")
        if self.base_price <= 0:
            raise ValueError(f"base_price must be positive, got {self.base_price}")
        if self.price_increment < 0:
            raise ValueError(f"price_increment must not be negative, got {self.price_increment}")
        validate_bps(self.burn_bps)
        validate_bps(self.bonus_bps)
        if self.burn_bps + self.bonus_bps > BPS_DENOMINATOR:
            raise ValueError(
                f"burn_bps + bonus_bps must not exceed {BPS_DENOMINATOR}, "
                f"got {self.burn_bps + self.bonus_bps}"
            )


@dataclass
class Submission:
    id: int
    submitter: str
    content: str
    total_staked: int = 0     # base units
    total_shares: int = 0     # share units (18 decimals)
    status: SubmissionStatus = SubmissionStatus.PENDING

    def transition(self, target: SubmissionStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidSubmissionStatusError(
                self.id, self.status.value, SubmissionStatus.PENDING.value
            )
        self.status = target


@dataclass(frozen=True)
class SubmissionDetail:
    """Read-only copy of a submission handed to callers outside the engine."""

    id: int
    submitter: str
    content: str
    total_staked: int
    total_shares: int
    status: SubmissionStatus
    staker_count: int


@dataclass(frozen=True)
class Distribution:
    """Split of the pool at winner selection. burn + bonus + staker_pool == pool."""

    pool: int
    burn: int
    bonus: int
    staker_pool: int


@dataclass
class ClaimSettlement:
    """Post-selection pull-payment state. Created once by pick_winner."""

    winning_id: int
    distribution: Distribution
    total_winning_shares: int
    total_winning_stakers: int
    remaining: int
    claimed: set[str] = field(default_factory=set)
    total_paid: int = 0

    @property
    def claimed_count(self) -> int:
        return len(self.claimed)


@dataclass
class RescueState:
    triggered: bool = False
    triggered_at: int | None = None
    total_refunded: int = 0


@dataclass
class MarketState:
    """The single market of one engine. Mutated only inside engine operations."""

    admin: str
    deadline: int
    total_pool: int = 0
    total_burned: int = 0
    submissions: list[Submission] = field(default_factory=list)
    submitted: set[str] = field(default_factory=set)
    stakes: StakeBook = field(default_factory=StakeBook)
    settlement: ClaimSettlement | None = None
    rescue: RescueState = field(default_factory=RescueState)

    @property
    def winner_picked(self) -> bool:
        return self.settlement is not None


@dataclass(frozen=True)
class MarketEvent:
    event_type: MarketEventType
    timestamp: int
    payload: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredMarket:
    """A round as recorded by a MarketStateStore. `version` grows by one per committed operation."""

    version: int
    state: MarketState
