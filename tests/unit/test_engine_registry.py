"""StakingMarketEngine: submit, whitelist, ban and the registry views."""
import pytest

from src.sm_common.enums import MarketEventType, SubmissionStatus
from src.sm_common.errors import (
    AlreadySubmittedError,
    EmptyContentError,
    InsufficientAllowanceError,
    InvalidSubmissionStatusError,
    NotAdminError,
    RoundClosedError,
    SubmissionNotFoundError,
)
from src.sm_common.units import UNIT

STAKE = 50_000 * UNIT
DAY = 24 * 3600
ADMIN = "0xadmin"
BURN = "0x000000000000000000000000000000000000dEaD"


class TestSubmit:
    async def test_submit_pulls_stake_and_issues_shares(self, engine, ledger, fund) -> None:
        fund("0xalice")
        submission_id = await engine.submit("0xalice", "ipfs://cat.png")

        assert submission_id == 0
        detail = engine.get_submission(0)
        assert detail.submitter == "0xalice"
        assert detail.content == "ipfs://cat.png"
        assert detail.total_staked == STAKE
        assert detail.total_shares == 50_000 * UNIT
        assert detail.status is SubmissionStatus.PENDING
        assert detail.staker_count == 1
        assert engine.get_share_balance(0, "0xalice") == 50_000 * UNIT
        assert engine.get_stakers(0) == ["0xalice"]
        assert engine.total_pool == STAKE
        assert engine.has_submitted("0xalice")
        assert await ledger.balance_of("0xalice") == 0
        assert await engine.custody_balance() == STAKE

    async def test_ids_are_sequential(self, engine, fund) -> None:
        for i, who in enumerate(["0xa", "0xb", "0xc"]):
            fund(who)
            assert await engine.submit(who, f"ipfs://{i}") == i
        assert engine.submission_count == 3
        assert engine.get_pending_submissions(0, 50) == [0, 1, 2]

    async def test_one_submission_per_address(self, engine, fund) -> None:
        fund("0xalice", stakes=2)
        await engine.submit("0xalice", "first")
        with pytest.raises(AlreadySubmittedError):
            await engine.submit("0xalice", "second")
        assert engine.submission_count == 1
        assert engine.total_pool == STAKE

    async def test_empty_content_rejected(self, engine, fund) -> None:
        fund("0xalice")
        with pytest.raises(EmptyContentError):
            await engine.submit("0xalice", "")
        assert not engine.has_submitted("0xalice")

    async def test_submit_at_deadline_rejected(self, engine, clock, fund) -> None:
        fund("0xalice")
        clock.advance(DAY)
        with pytest.raises(RoundClosedError):
            await engine.submit("0xalice", "late")

    async def test_submit_just_before_deadline(self, engine, clock, fund) -> None:
        fund("0xalice")
        clock.advance(DAY - 1)
        assert await engine.submit("0xalice", "just in time") == 0

    def test_time_remaining_counts_down_to_zero(self, engine, clock) -> None:
        assert engine.time_remaining() == DAY
        clock.advance(DAY - 10)
        assert engine.time_remaining() == 10
        clock.advance(10)
        assert engine.time_remaining() == 0
        clock.advance(5)
        assert engine.time_remaining() == 0

    async def test_failed_pull_leaves_no_trace(self, engine, ledger) -> None:
        ledger.mint("0xalice", STAKE)  # no approval
        with pytest.raises(InsufficientAllowanceError):
            await engine.submit("0xalice", "ipfs://x")
        assert engine.submission_count == 0
        assert engine.total_pool == 0
        assert not engine.has_submitted("0xalice")
        assert engine.events == ()

    async def test_events(self, engine, fund) -> None:
        fund("0xalice")
        await engine.submit("0xalice", "ipfs://x")
        kinds = [e.event_type for e in engine.events]
        assert kinds == [MarketEventType.SUBMITTED, MarketEventType.STAKED]
        assert engine.events[1].payload["amount"] == STAKE

    async def test_event_log_keeps_most_recent(self, make_engine, fund) -> None:
        engine = make_engine(event_log_limit=3)
        for who in ["0xalice", "0xbob"]:
            fund(who)
            await engine.submit(who, f"ipfs://{who}")
        kinds = [e.event_type for e in engine.events]
        assert kinds == [
            MarketEventType.STAKED,
            MarketEventType.SUBMITTED,
            MarketEventType.STAKED,
        ]
        assert engine.events[-1].payload["staker"] == "0xbob"


class TestWhitelist:
    async def test_whitelist_batch(self, engine, fund) -> None:
        for who in ["0xa", "0xb", "0xc"]:
            fund(who)
            await engine.submit(who, who)
        await engine.whitelist_batch(ADMIN, [0, 2])
        assert engine.get_submission(0).status is SubmissionStatus.WHITELISTED
        assert engine.get_submission(1).status is SubmissionStatus.PENDING
        assert engine.get_pending_submissions(0, 50) == [1]
        assert engine.get_top_submissions(0, 10) == [0, 2]

    async def test_non_admin_rejected(self, engine, fund) -> None:
        fund("0xa")
        await engine.submit("0xa", "a")
        with pytest.raises(NotAdminError):
            await engine.whitelist_batch("0xa", [0])

    async def test_bad_id_rejects_whole_batch(self, engine, fund) -> None:
        fund("0xa")
        await engine.submit("0xa", "a")
        with pytest.raises(SubmissionNotFoundError):
            await engine.whitelist_batch(ADMIN, [0, 5])
        assert engine.get_submission(0).status is SubmissionStatus.PENDING

    async def test_whitelist_twice_rejected(self, engine, fund) -> None:
        fund("0xa")
        await engine.submit("0xa", "a")
        await engine.whitelist_batch(ADMIN, [0])
        with pytest.raises(InvalidSubmissionStatusError):
            await engine.whitelist_batch(ADMIN, [0])

    async def test_empty_batch_is_noop(self, engine) -> None:
        await engine.whitelist_batch(ADMIN, [])
        assert engine.events == ()


class TestBanAndSlash:
    async def test_ban_burns_stake(self, engine, ledger, fund) -> None:
        fund("0xa")
        fund("0xb")
        await engine.submit("0xa", "a")
        await engine.submit("0xb", "b")

        slashed = await engine.ban_and_slash(ADMIN, 0)

        assert slashed == STAKE
        assert engine.get_submission(0).status is SubmissionStatus.BANNED
        assert engine.total_pool == STAKE
        assert engine.total_burned == STAKE
        assert await ledger.balance_of(BURN) == STAKE
        assert await engine.custody_balance() == STAKE
        assert engine.get_pending_submissions(0, 50) == [1]

    async def test_banned_submitter_cannot_resubmit(self, engine, fund) -> None:
        fund("0xa", stakes=2)
        await engine.submit("0xa", "a")
        await engine.ban_and_slash(ADMIN, 0)
        with pytest.raises(AlreadySubmittedError):
            await engine.submit("0xa", "again")

    async def test_only_pending_can_be_banned(self, engine, fund) -> None:
        fund("0xa")
        await engine.submit("0xa", "a")
        await engine.whitelist_batch(ADMIN, [0])
        with pytest.raises(InvalidSubmissionStatusError):
            await engine.ban_and_slash(ADMIN, 0)

    async def test_non_admin_rejected(self, engine, fund) -> None:
        fund("0xa")
        await engine.submit("0xa", "a")
        with pytest.raises(NotAdminError):
            await engine.ban_and_slash("0xa", 0)

    async def test_missing_submission(self, engine) -> None:
        with pytest.raises(SubmissionNotFoundError):
            await engine.ban_and_slash(ADMIN, 0)

    async def test_ban_after_deadline_allowed(self, engine, clock, fund) -> None:
        fund("0xa")
        await engine.submit("0xa", "a")
        clock.advance(2 * DAY)
        assert await engine.ban_and_slash(ADMIN, 0) == STAKE
