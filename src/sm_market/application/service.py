# src/sm_market/application/service.py
"""Engine wiring: settings -> MarketConfig + ledger -> process-wide engine."""
from config.settings import Settings, settings
from src.sm_common.clock import SystemClock
from src.sm_common.enums import LedgerBackend
from src.sm_ledger.domain.repository import ValueLedgerProtocol
from src.sm_ledger.infrastructure.memory import InMemoryTokenLedger
from src.sm_ledger.infrastructure.persistence import SqlTokenLedger
from src.sm_market.domain.models import MarketConfig
from src.sm_market.domain.repository import MarketStateStore
from src.sm_market.engine.engine import StakingMarketEngine
from src.sm_market.infrastructure.memory import InMemoryMarketStore
from src.sm_market.infrastructure.persistence import SqlMarketStateStore

_engine: StakingMarketEngine | None = None


def market_config_from_settings(cfg: Settings) -> MarketConfig:
    return MarketConfig(
        admin=cfg.ADMIN_ADDRESS,
        stake_amount=cfg.STAKE_AMOUNT,
        round_duration=cfg.ROUND_DURATION_SECONDS,
        burn_address=cfg.BURN_ADDRESS,
        rescue_delay=cfg.RESCUE_DELAY_SECONDS,
        base_price=cfg.BASE_PRICE,
        price_increment=cfg.PRICE_INCREMENT,
        burn_bps=cfg.BURN_BPS,
        bonus_bps=cfg.BONUS_BPS,
        allow_submitter_stake=cfg.ALLOW_SUBMITTER_STAKE,
    )


def build_ledger(cfg: Settings) -> ValueLedgerProtocol:
    if cfg.LEDGER_BACKEND is LedgerBackend.SQL:
        # Deferred: creates the asyncpg engine at import time
        from src.sm_common.database import async_session_factory

        return SqlTokenLedger(async_session_factory, cfg.ENGINE_ADDRESS)
    return InMemoryTokenLedger(cfg.ENGINE_ADDRESS)


def build_store(ledger: ValueLedgerProtocol) -> MarketStateStore:
    """Round store matching the ledger: the SQL store shares the ledger's transaction."""
    if isinstance(ledger, SqlTokenLedger):
        return SqlMarketStateStore(ledger)
    return InMemoryMarketStore()


def get_market_engine() -> StakingMarketEngine:
    """FastAPI dependency and process-wide accessor.

    The app lifespan calls `restore()` on it before serving, which adopts the
    recorded round or records a new one.
    """
    global _engine  # noqa: PLW0603
    if _engine is None:
        ledger = build_ledger(settings)
        _engine = StakingMarketEngine(
            market_config_from_settings(settings), ledger, SystemClock(), build_store(ledger)
        )
    return _engine
