"""Round store Protocol: where the engine records its MarketState.

Every call runs inside the ledger's `transaction()`, so a recorded state and
the token movements that produced it commit or roll back together.
"""

from typing import Protocol

from src.sm_market.domain.models import MarketState, StoredMarket


class MarketStateStore(Protocol):
    async def load(self) -> StoredMarket | None:
        """The recorded round, locked for the rest of the transaction. None if none yet."""
        ...

    async def create(self, state: MarketState) -> StoredMarket:
        """Record `state` as version 1 unless a round exists; return whichever is recorded."""
        ...

    async def save(self, state: MarketState, version: int) -> None: ...
