"""StakingMarketEngine: winner selection and claims."""
import pytest

from src.sm_admin.application.service import AdminService
from src.sm_common.enums import MarketEventType
from src.sm_common.errors import (
    AlreadyClaimedError,
    InvalidSubmissionStatusError,
    MarketSettledError,
    NoSharesError,
    NotAdminError,
    RoundClosedError,
    RoundNotClosedError,
    SubmissionNotFoundError,
    WinnerAlreadyPickedError,
    WinnerNotPickedError,
    ZeroPayoutError,
)
from src.sm_common.units import UNIT

STAKE = 50_000 * UNIT
DAY = 24 * 3600
ADMIN = "0xadmin"
BURN = "0x000000000000000000000000000000000000dEaD"


@pytest.fixture
async def round_closed(engine, clock, fund):
    """alice(0) and bob(1) whitelisted; carol, dave back 0; erin backs 1; frank(2) pending."""
    for who in ["0xalice", "0xbob", "0xfrank"]:
        fund(who)
        await engine.submit(who, f"ipfs://{who}")
    await engine.whitelist_batch(ADMIN, [0, 1])
    for who, sid in [("0xcarol", 0), ("0xdave", 0), ("0xerin", 1)]:
        fund(who)
        await engine.stake(who, sid)
    clock.advance(DAY)
    return engine


class TestPickWinner:
    async def test_split_and_transfers(self, round_closed, ledger) -> None:
        engine = round_closed
        pool = 6 * STAKE
        assert engine.total_pool == pool

        d = await engine.pick_winner(ADMIN, 0)

        assert d.pool == pool
        assert d.burn == pool * 2500 // 10_000
        assert d.bonus == pool * 1000 // 10_000
        assert d.staker_pool == pool - d.burn - d.bonus
        assert engine.winner_picked
        assert engine.winning_id == 0
        assert engine.distribution == d
        assert engine.staker_pool_remaining == d.staker_pool
        assert await ledger.balance_of(BURN) == d.burn
        assert await ledger.balance_of("0xalice") == d.bonus
        assert await engine.custody_balance() == d.staker_pool
        assert engine.events[-1].event_type is MarketEventType.WINNER_PICKED

    async def test_before_deadline(self, engine, fund) -> None:
        fund("0xalice")
        await engine.submit("0xalice", "a")
        await engine.whitelist_batch(ADMIN, [0])
        with pytest.raises(RoundNotClosedError):
            await engine.pick_winner(ADMIN, 0)

    async def test_non_admin(self, round_closed) -> None:
        with pytest.raises(NotAdminError):
            await round_closed.pick_winner("0xalice", 0)

    async def test_pending_winner_rejected(self, round_closed) -> None:
        with pytest.raises(InvalidSubmissionStatusError):
            await round_closed.pick_winner(ADMIN, 2)

    async def test_missing_winner_rejected(self, round_closed) -> None:
        with pytest.raises(SubmissionNotFoundError):
            await round_closed.pick_winner(ADMIN, 42)

    async def test_only_once(self, round_closed) -> None:
        await round_closed.pick_winner(ADMIN, 0)
        with pytest.raises(WinnerAlreadyPickedError):
            await round_closed.pick_winner(ADMIN, 1)

    async def test_ban_after_winner_rejected(self, round_closed) -> None:
        await round_closed.pick_winner(ADMIN, 0)
        with pytest.raises(MarketSettledError):
            await round_closed.ban_and_slash(ADMIN, 2)

    async def test_no_new_value_after_deadline(self, round_closed, fund) -> None:
        await round_closed.pick_winner(ADMIN, 0)
        fund("0xlate")
        with pytest.raises(RoundClosedError):
            await round_closed.stake("0xlate", 0)


class TestClaim:
    async def test_before_winner(self, round_closed) -> None:
        with pytest.raises(WinnerNotPickedError):
            await round_closed.claim("0xcarol")

    async def test_all_claims_drain_staker_pool(self, round_closed, ledger) -> None:
        engine = round_closed
        d = await engine.pick_winner(ADMIN, 0)
        total_shares = engine.get_submission(0).total_shares

        alice_shares = engine.get_share_balance(0, "0xalice")
        alice = await engine.claim("0xalice")
        assert alice == d.staker_pool * alice_shares // total_shares

        carol = await engine.claim("0xcarol")
        dave_preview = engine.get_claim_amount("0xdave")
        dave = await engine.claim("0xdave")

        assert dave == dave_preview
        assert alice + carol + dave == d.staker_pool
        assert engine.staker_pool_remaining == 0
        assert await engine.custody_balance() == 0
        assert await ledger.balance_of("0xalice") == d.bonus + alice

    async def test_preview_matches_claim(self, round_closed) -> None:
        engine = round_closed
        await engine.pick_winner(ADMIN, 0)
        assert engine.can_claim("0xcarol")
        preview = engine.get_claim_amount("0xcarol")
        assert await engine.claim("0xcarol") == preview
        assert not engine.can_claim("0xcarol")
        assert engine.get_claim_amount("0xcarol") == 0

    async def test_double_claim(self, round_closed) -> None:
        await round_closed.pick_winner(ADMIN, 0)
        await round_closed.claim("0xcarol")
        with pytest.raises(AlreadyClaimedError):
            await round_closed.claim("0xcarol")

    async def test_loser_has_no_shares(self, round_closed) -> None:
        await round_closed.pick_winner(ADMIN, 0)
        assert not round_closed.can_claim("0xerin")
        with pytest.raises(NoSharesError):
            await round_closed.claim("0xerin")

    async def test_failed_claim_does_not_mark_claimed(self, round_closed) -> None:
        await round_closed.pick_winner(ADMIN, 0)
        with pytest.raises(NoSharesError):
            await round_closed.claim("0xstranger")
        assert round_closed.snapshot().settlement.claimed == set()

    async def test_invariants_hold_through_settlement(self, round_closed) -> None:
        service = AdminService(round_closed)
        assert (await service.verify_all_invariants(ADMIN))["ok"] is True
        await round_closed.pick_winner(ADMIN, 0)
        await round_closed.claim("0xcarol")
        report = await service.verify_all_invariants(ADMIN)
        assert report == {"ok": True, "violations": [], "owed": round_closed.staker_pool_remaining}


class TestZeroPayout:
    """Late stakers on a steep curve hold shares too small to earn a floored payout."""

    async def _settled(self, make_engine, clock, fund, late_stakers):
        engine = make_engine(stake_amount=100, base_price=1, price_increment=10**6)
        fund("0xalice")
        await engine.submit("0xalice", "ipfs://steep")
        await engine.whitelist_batch(ADMIN, [0])
        for who in late_stakers:
            fund(who)
            await engine.stake(who, 0)
        clock.advance(DAY)
        await engine.pick_winner(ADMIN, 0)
        return engine

    async def test_can_claim_agrees_with_claim(self, make_engine, clock, fund) -> None:
        engine = await self._settled(make_engine, clock, fund, ["0xbob", "0xcarol"])
        assert engine.get_share_balance(0, "0xbob") > 0
        assert engine.get_claim_amount("0xbob") == 0
        assert not engine.can_claim("0xbob")
        with pytest.raises(ZeroPayoutError):
            await engine.claim("0xbob")
        assert engine.snapshot().settlement.claimed == set()

    async def test_single_zero_payout_staker_collects_as_last(
        self, make_engine, clock, fund
    ) -> None:
        engine = await self._settled(make_engine, clock, fund, ["0xbob"])
        assert not engine.can_claim("0xbob")
        alice = await engine.claim("0xalice")
        assert engine.can_claim("0xbob")
        bob = await engine.claim("0xbob")
        assert alice + bob == engine.distribution.staker_pool
        assert bob > 0
        assert engine.staker_pool_remaining == 0

    async def test_two_zero_payout_stakers_leave_dust(self, make_engine, clock, fund) -> None:
        engine = await self._settled(make_engine, clock, fund, ["0xbob", "0xcarol"])
        await engine.claim("0xalice")
        for who in ["0xbob", "0xcarol"]:
            assert not engine.can_claim(who)
            with pytest.raises(ZeroPayoutError):
                await engine.claim(who)
        assert engine.staker_pool_remaining > 0


async def test_invariant_report_requires_admin(round_closed) -> None:
    with pytest.raises(NotAdminError):
        await AdminService(round_closed).verify_all_invariants("0xalice")
