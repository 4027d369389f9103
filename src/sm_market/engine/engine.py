"""StakingMarketEngine: stateful orchestrator for one staking round."""
import asyncio
import copy
import logging
from collections import deque
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar

from src.sm_common.clock import Clock
from src.sm_common.enums import MarketEventType, SubmissionStatus
from src.sm_common.errors import (
    AlreadyClaimedError,
    AppError,
    InternalError,
    InvalidSubmissionStatusError,
    MarketSettledError,
    NoSharesError,
    ReentrantCallError,
    RescueAlreadyTriggeredError,
    RescueNotAvailableError,
    RescueNotTriggeredError,
    RoundClosedError,
    RoundNotClosedError,
    SelfStakeError,
    WinnerAlreadyPickedError,
    WinnerNotPickedError,
    ZeroPayoutError,
)
from src.sm_ledger.domain.repository import ValueLedgerProtocol
from src.sm_market.domain.access import require_admin, validate_new_admin
from src.sm_market.domain.claims import claim_payout, has_claimable_payout, preview_payout
from src.sm_market.domain.curve import shares_for_stake
from src.sm_market.domain.distribution import compute_distribution
from src.sm_market.domain.models import (
    ClaimSettlement,
    Distribution,
    MarketConfig,
    MarketEvent,
    MarketState,
    StoredMarket,
    Submission,
    SubmissionDetail,
)
from src.sm_market.domain.registry import (
    get_submission,
    pending_submissions,
    require_status,
    top_submissions,
    validate_new_submission,
)
from src.sm_market.domain.repository import MarketStateStore
from src.sm_market.domain.rescue import rescue_available_at, rescue_refund

logger = logging.getLogger(__name__)


class StakingMarketEngine:
    """Owns the MarketState of a single round.

    Every mutating operation runs inside `_operation()`:
      1. re-entrant calls (from inside a ledger transfer) are rejected
      2. independent callers are serialized on an asyncio.Lock
      3. the state is snapshotted and the ledger transaction opened
      4. with a store, the recorded round is loaded (and locked) and adopted
         if another engine advanced it; on success the result is saved
         under the next version in the same transaction
      5. on any failure the snapshot is restored and the ledger rolls back;
         buffered events are published only on success

    With a store, `restore()` must run once before serving operations.
    Reads reflect the state as of this engine's last operation or restore.
    """

    def __init__(
        self,
        config: MarketConfig,
        ledger: ValueLedgerProtocol,
        clock: Clock,
        store: MarketStateStore | None = None,
        event_log_limit: int = 10_000,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._clock = clock
        self._store = store
        self._state = MarketState(
            admin=config.admin, deadline=clock.now() + config.round_duration
        )
        self._version = 0
        self._lock = asyncio.Lock()
        self._in_operation: ContextVar[bool] = ContextVar(
            f"stake_market_engine_{id(self)}", default=False
        )
        # Oldest events are dropped past the limit; the store is the durable record
        self._events: deque[MarketEvent] = deque(maxlen=event_log_limit)
        self._pending_events: list[MarketEvent] = []
        logger.info(
            "Market created: admin=%s deadline=%d stake=%d custody=%s",
            config.admin, self._state.deadline, config.stake_amount, ledger.custody_address,
        )

    async def restore(self) -> None:
        """Adopt the recorded round, or record this one if there is none.

        Refuses to open a fresh round while custody already holds value: that
        value belongs to a round whose state is missing.
        """
        if self._store is None:
            return
        async with self._lock:
            async with self._ledger.transaction():
                stored = await self._store.load()
                if stored is None:
                    held = await self._ledger.balance_of(self._ledger.custody_address)
                    if held > 0:
                        logger.error("Custody holds %d with no round on record", held)
                        raise InternalError(
                            f"Custody holds {held} but no market round is recorded"
                        )
                    stored = await self._store.create(self._state)
                self._adopt(stored)
        logger.info(
            "Round restored: version=%d deadline=%d submissions=%d",
            self._version, self._state.deadline, len(self._state.submissions),
        )

    # ------------------------------------------------------------------
    # Operation scope
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[MarketState]:
        if self._in_operation.get():
            logger.warning("Re-entrant %s rejected", name)
            raise ReentrantCallError()
        async with self._lock:
            token = self._in_operation.set(True)
            snapshot = copy.deepcopy(self._state)
            version = self._version
            self._pending_events = []
            try:
                async with self._ledger.transaction():
                    await self._sync_from_store()
                    yield self._state
                    await self._save_to_store()
            except AppError as exc:
                self._rollback(snapshot, version)
                logger.info("%s rejected (code=%d): %s", name, exc.code, exc.message)
                raise
            except BaseException:
                self._rollback(snapshot, version)
                logger.error("%s failed, state restored", name)
                raise
            finally:
                self._in_operation.reset(token)
            self._publish_events()

    async def _sync_from_store(self) -> None:
        if self._store is None:
            return
        stored = await self._store.load()
        if stored is not None and stored.version != self._version:
            logger.info("Adopting round version %d (had %d)", stored.version, self._version)
            self._adopt(stored)

    async def _save_to_store(self) -> None:
        if self._store is None:
            return
        await self._store.save(self._state, self._version + 1)
        self._version += 1

    def _adopt(self, stored: StoredMarket) -> None:
        self._state = stored.state
        self._version = stored.version

    def _rollback(self, snapshot: MarketState, version: int) -> None:
        self._state = snapshot
        self._version = version
        self._pending_events = []

    def _emit(self, event_type: MarketEventType, **payload: object) -> None:
        self._pending_events.append(
            MarketEvent(event_type=event_type, timestamp=self._clock.now(), payload=payload)
        )

    def _publish_events(self) -> None:
        for event in self._pending_events:
            logger.info("Market event %s %s", event.event_type.value, event.payload)
        self._events.extend(self._pending_events)
        self._pending_events = []

    def _require_open(self) -> None:
        if self._clock.now() >= self._state.deadline:
            raise RoundClosedError()

    def _require_closed(self) -> None:
        if self._clock.now() < self._state.deadline:
            raise RoundNotClosedError()

    # ------------------------------------------------------------------
    # Submission registry
    # ------------------------------------------------------------------

    async def submit(self, caller: str, content: str) -> int:
        """Register caller's submission with an initial stake. Returns the new id."""
        stake = self._config.stake_amount
        async with self._operation("submit") as state:
            validate_new_submission(state, caller, content)
            self._require_open()
            await self._ledger.pull(caller, stake)

            shares = shares_for_stake(
                0, stake, self._config.base_price, self._config.price_increment
            )
            submission_id = len(state.submissions)
            state.submissions.append(
                Submission(
                    id=submission_id,
                    submitter=caller,
                    content=content,
                    total_staked=stake,
                    total_shares=shares,
                )
            )
            state.submitted.add(caller)
            state.total_pool += stake
            state.stakes.add_shares(submission_id, caller, shares)

            self._emit(
                MarketEventType.SUBMITTED,
                submission_id=submission_id, submitter=caller, content=content,
            )
            self._emit(
                MarketEventType.STAKED,
                submission_id=submission_id, staker=caller, amount=stake, shares=shares,
            )
        return submission_id

    async def whitelist_batch(self, caller: str, submission_ids: Sequence[int]) -> None:
        """Approve pending submissions. One bad id rejects the whole batch."""
        async with self._operation("whitelist_batch") as state:
            require_admin(state.admin, caller)
            for submission_id in submission_ids:
                submission = get_submission(state, submission_id)
                submission.transition(SubmissionStatus.WHITELISTED)
                self._emit(MarketEventType.WHITELISTED, submission_id=submission_id)

    async def ban_and_slash(self, caller: str, submission_id: int) -> int:
        """Ban a pending submission and burn everything staked on it. Returns the slashed amount."""
        async with self._operation("ban_and_slash") as state:
            require_admin(state.admin, caller)
            submission = get_submission(state, submission_id)
            require_status(submission, SubmissionStatus.PENDING)
            if state.winner_picked:
                raise MarketSettledError("winner already picked")
            if state.rescue.triggered:
                raise MarketSettledError("rescue triggered")

            submission.transition(SubmissionStatus.BANNED)
            slashed = submission.total_staked
            state.total_pool -= slashed
            state.total_burned += slashed
            if slashed > 0:
                await self._ledger.push(self._config.burn_address, slashed)

            self._emit(MarketEventType.BANNED, submission_id=submission_id, slashed=slashed)
        return slashed

    # ------------------------------------------------------------------
    # Pool accountant
    # ------------------------------------------------------------------

    async def stake(self, caller: str, submission_id: int) -> int:
        """Stake the fixed amount on a whitelisted submission. Returns shares issued."""
        stake = self._config.stake_amount
        async with self._operation("stake") as state:
            submission = get_submission(state, submission_id)
            require_status(submission, SubmissionStatus.WHITELISTED)
            self._require_open()
            if not self._config.allow_submitter_stake and caller == submission.submitter:
                raise SelfStakeError(submission_id)
            await self._ledger.pull(caller, stake)

            shares = shares_for_stake(
                submission.total_shares,
                stake,
                self._config.base_price,
                self._config.price_increment,
            )
            submission.total_staked += stake
            submission.total_shares += shares
            state.total_pool += stake
            state.stakes.add_shares(submission_id, caller, shares)

            self._emit(
                MarketEventType.STAKED,
                submission_id=submission_id, staker=caller, amount=stake, shares=shares,
            )
        return shares

    async def pick_winner(self, caller: str, submission_id: int) -> Distribution:
        """Split the pool once. Staker payouts are left to claim()."""
        async with self._operation("pick_winner") as state:
            require_admin(state.admin, caller)
            self._require_closed()
            if state.winner_picked:
                raise WinnerAlreadyPickedError()
            if state.rescue.triggered:
                raise MarketSettledError("rescue triggered")
            submission = get_submission(state, submission_id)
            require_status(submission, SubmissionStatus.WHITELISTED)

            distribution = compute_distribution(
                state.total_pool, self._config.burn_bps, self._config.bonus_bps
            )
            state.settlement = ClaimSettlement(
                winning_id=submission_id,
                distribution=distribution,
                total_winning_shares=submission.total_shares,
                total_winning_stakers=state.stakes.staker_count(submission_id),
                remaining=distribution.staker_pool,
            )
            state.total_burned += distribution.burn

            if distribution.burn > 0:
                await self._ledger.push(self._config.burn_address, distribution.burn)
            if distribution.bonus > 0:
                await self._ledger.push(submission.submitter, distribution.bonus)

            self._emit(
                MarketEventType.WINNER_PICKED,
                submission_id=submission_id,
                pool=distribution.pool,
                burn=distribution.burn,
                bonus=distribution.bonus,
                staker_pool=distribution.staker_pool,
            )
        return distribution

    # ------------------------------------------------------------------
    # Claim settlement
    # ------------------------------------------------------------------

    async def claim(self, caller: str) -> int:
        """Pay caller their share of the staker pool. Returns the payout."""
        async with self._operation("claim") as state:
            settlement = state.settlement
            if settlement is None:
                raise WinnerNotPickedError()
            if caller in settlement.claimed:
                raise AlreadyClaimedError(caller)
            shares = state.stakes.balance_of(settlement.winning_id, caller)
            if shares == 0:
                raise NoSharesError(settlement.winning_id)

            settlement.claimed.add(caller)
            is_last = settlement.claimed_count == settlement.total_winning_stakers
            payout = claim_payout(settlement, shares, is_last)
            if payout == 0:
                raise ZeroPayoutError()
            settlement.remaining -= payout
            settlement.total_paid += payout
            await self._ledger.push(caller, payout)

            self._emit(
                MarketEventType.CLAIMED,
                staker=caller, shares=shares, payout=payout, last=is_last,
            )
        return payout

    # ------------------------------------------------------------------
    # Emergency recovery
    # ------------------------------------------------------------------

    async def trigger_rescue(self, caller: str) -> None:
        """Unlock proportional refunds when no winner was picked in time. Callable by anyone."""
        async with self._operation("trigger_rescue") as state:
            opens_at = rescue_available_at(state.deadline, self._config.rescue_delay)
            now = self._clock.now()
            if now < opens_at:
                raise RescueNotAvailableError(opens_at)
            if state.winner_picked:
                raise WinnerAlreadyPickedError()
            if state.rescue.triggered:
                raise RescueAlreadyTriggeredError()

            state.rescue.triggered = True
            state.rescue.triggered_at = now
            self._emit(
                MarketEventType.RESCUE_TRIGGERED,
                triggered_by=caller, total_pool=state.total_pool,
            )

    async def withdraw_rescued(self, caller: str, submission_id: int) -> int:
        """Refund caller's stake on one submission after rescue. Returns the refund."""
        async with self._operation("withdraw_rescued") as state:
            if not state.rescue.triggered:
                raise RescueNotTriggeredError()
            submission = get_submission(state, submission_id)
            if submission.status is SubmissionStatus.BANNED:
                raise InvalidSubmissionStatusError(
                    submission_id, submission.status.value, "PENDING or WHITELISTED"
                )
            shares = state.stakes.clear(submission_id, caller)
            if shares == 0:
                raise NoSharesError(submission_id)

            refund = rescue_refund(submission.total_staked, shares, submission.total_shares)
            state.rescue.total_refunded += refund
            if refund > 0:
                await self._ledger.push(caller, refund)

            self._emit(
                MarketEventType.RESCUE_WITHDRAWN,
                submission_id=submission_id, staker=caller, shares=shares, refund=refund,
            )
        return refund

    # ------------------------------------------------------------------
    # Access controller
    # ------------------------------------------------------------------

    async def transfer_admin(self, caller: str, new_admin: str) -> None:
        async with self._operation("transfer_admin") as state:
            require_admin(state.admin, caller)
            validate_new_admin(new_admin)
            previous = state.admin
            state.admin = new_admin
            self._emit(
                MarketEventType.ADMIN_TRANSFERRED, previous=previous, new_admin=new_admin
            )

    # ------------------------------------------------------------------
    # Queries (read-only)
    # ------------------------------------------------------------------

    @property
    def config(self) -> MarketConfig:
        return self._config

    @property
    def custody_address(self) -> str:
        return self._ledger.custody_address

    @property
    def admin(self) -> str:
        return self._state.admin

    @property
    def deadline(self) -> int:
        return self._state.deadline

    def time_remaining(self) -> int:
        return max(0, self._state.deadline - self._clock.now())

    @property
    def total_pool(self) -> int:
        return self._state.total_pool

    @property
    def total_burned(self) -> int:
        return self._state.total_burned

    @property
    def winner_picked(self) -> bool:
        return self._state.winner_picked

    @property
    def winning_id(self) -> int | None:
        settlement = self._state.settlement
        return settlement.winning_id if settlement is not None else None

    @property
    def distribution(self) -> Distribution | None:
        settlement = self._state.settlement
        return settlement.distribution if settlement is not None else None

    @property
    def staker_pool_remaining(self) -> int:
        settlement = self._state.settlement
        return settlement.remaining if settlement is not None else 0

    @property
    def rescue_triggered(self) -> bool:
        return self._state.rescue.triggered

    @property
    def rescue_available_at(self) -> int:
        return rescue_available_at(self._state.deadline, self._config.rescue_delay)

    @property
    def submission_count(self) -> int:
        return len(self._state.submissions)

    @property
    def events(self) -> tuple[MarketEvent, ...]:
        return tuple(self._events)

    def has_submitted(self, address: str) -> bool:
        return address in self._state.submitted

    def get_submission(self, submission_id: int) -> SubmissionDetail:
        s = get_submission(self._state, submission_id)
        return SubmissionDetail(
            id=s.id,
            submitter=s.submitter,
            content=s.content,
            total_staked=s.total_staked,
            total_shares=s.total_shares,
            status=s.status,
            staker_count=self._state.stakes.staker_count(s.id),
        )

    def get_share_balance(self, submission_id: int, address: str) -> int:
        get_submission(self._state, submission_id)
        return self._state.stakes.balance_of(submission_id, address)

    def get_stakers(self, submission_id: int) -> list[str]:
        get_submission(self._state, submission_id)
        return self._state.stakes.stakers(submission_id)

    def get_top_submissions(self, offset: int, limit: int) -> list[int]:
        return top_submissions(self._state, offset, limit)

    def get_pending_submissions(self, offset: int, limit: int) -> list[int]:
        return pending_submissions(self._state, offset, limit)

    def _winning_shares(self, address: str) -> int:
        settlement = self._state.settlement
        if settlement is None:
            return 0
        return self._state.stakes.balance_of(settlement.winning_id, address)

    def can_claim(self, address: str) -> bool:
        return has_claimable_payout(
            self._state.settlement, address, self._winning_shares(address)
        )

    def get_claim_amount(self, address: str) -> int:
        return preview_payout(self._state.settlement, address, self._winning_shares(address))

    async def custody_balance(self) -> int:
        return await self._ledger.balance_of(self._ledger.custody_address)

    def snapshot(self) -> MarketState:
        """Deep copy of the current state, for invariant checks and diagnostics."""
        return copy.deepcopy(self._state)
