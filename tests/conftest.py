"""Shared test fixtures."""

import os

# Settings() is built at import time and requires these two values
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("ADMIN_ADDRESS", "0xadmin")

from collections.abc import Callable  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.sm_common.units import UNIT  # noqa: E402
from src.sm_ledger.infrastructure.memory import InMemoryTokenLedger  # noqa: E402
from src.sm_market.domain.models import MarketConfig  # noqa: E402
from src.sm_market.domain.repository import MarketStateStore  # noqa: E402
from src.sm_market.engine.engine import StakingMarketEngine  # noqa: E402

T0 = 1_700_000_000
CUSTODY = "stake-market-custody"
STAKE = 50_000 * UNIT
DAY = 24 * 3600


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: int = T0) -> None:
        self.t = start

    def now(self) -> int:
        return self.t

    def advance(self, seconds: int) -> None:
        self.t += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    return InMemoryTokenLedger(CUSTODY)


@pytest.fixture
def fund(ledger: InMemoryTokenLedger) -> Callable[..., None]:
    """Mint `stakes` stake amounts to an address and approve custody for all of it."""

    def _fund(address: str, stakes: int = 1) -> None:
        ledger.mint(address, STAKE * stakes)
        ledger.approve(address, ledger.allowance(address) + STAKE * stakes)

    return _fund


@pytest.fixture
def make_engine(
    ledger: InMemoryTokenLedger, clock: FakeClock
) -> Callable[..., StakingMarketEngine]:
    def _make(
        store: MarketStateStore | None = None,
        event_log_limit: int = 10_000,
        **overrides: Any,
    ) -> StakingMarketEngine:
        """Engine sharing the ledger and clock fixtures; overrides go to MarketConfig."""
        params: dict[str, Any] = {
            "admin": "0xadmin",
            "stake_amount": STAKE,
            "round_duration": DAY,
        }
        params.update(overrides)
        return StakingMarketEngine(
            MarketConfig(**params), ledger, clock, store, event_log_limit
        )

    return _make


@pytest.fixture
def engine(make_engine: Callable[..., StakingMarketEngine]) -> StakingMarketEngine:
    return make_engine()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
