"""SqlMarketStateStore: PostgreSQL implementation of MarketStateStore.

One row (id = 1) holds the encoded round. Statements run on the ledger's
active session, so the row and the token movements share one DB transaction.
`load()` takes a row lock; concurrent workers therefore apply operations one
at a time, each on top of the last committed version.
"""

from sqlalchemy import text

from src.sm_ledger.infrastructure.persistence import SqlTokenLedger
from src.sm_market.domain.models import MarketState, StoredMarket
from src.sm_market.infrastructure.codec import dumps_state, loads_state

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_ROUND_ID = 1

_LOCK_ROUND_SQL = text("""
    SELECT version, state
    FROM market_rounds
    WHERE id = :id
    FOR UPDATE
""")

_CREATE_ROUND_SQL = text("""
    INSERT INTO market_rounds (id, version, state)
    VALUES (:id, 1, :state)
    ON CONFLICT (id) DO NOTHING
""")

_SAVE_ROUND_SQL = text("""
    INSERT INTO market_rounds (id, version, state)
    VALUES (:id, :version, :state)
    ON CONFLICT (id) DO UPDATE
        SET version = EXCLUDED.version,
            state = EXCLUDED.state,
            updated_at = NOW()
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_stored(row: object) -> StoredMarket:
    return StoredMarket(
        version=int(row.version),  # type: ignore[attr-defined]
        state=loads_state(row.state),  # type: ignore[attr-defined]
    )


class SqlMarketStateStore:
    def __init__(self, ledger: SqlTokenLedger) -> None:
        self._ledger = ledger

    async def load(self) -> StoredMarket | None:
        db = self._ledger.active_session()
        row = (await db.execute(_LOCK_ROUND_SQL, {"id": _ROUND_ID})).fetchone()
        return _row_to_stored(row) if row is not None else None

    async def create(self, state: MarketState) -> StoredMarket:
        db = self._ledger.active_session()
        await db.execute(_CREATE_ROUND_SQL, {"id": _ROUND_ID, "state": dumps_state(state)})
        row = (await db.execute(_LOCK_ROUND_SQL, {"id": _ROUND_ID})).fetchone()
        return _row_to_stored(row)

    async def save(self, state: MarketState, version: int) -> None:
        db = self._ledger.active_session()
        await db.execute(
            _SAVE_ROUND_SQL,
            {"id": _ROUND_ID, "version": version, "state": dumps_state(state)},
        )
