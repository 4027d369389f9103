"""InMemoryMarketStore: process-local MarketStateStore.

Keeps the encoded text rather than the object, so a loaded state never
aliases the engine's live one.
"""

from src.sm_market.domain.models import MarketState, StoredMarket
from src.sm_market.infrastructure.codec import dumps_state, loads_state


class InMemoryMarketStore:
    def __init__(self) -> None:
        self._record: tuple[int, str] | None = None

    async def load(self) -> StoredMarket | None:
        if self._record is None:
            return None
        version, payload = self._record
        return StoredMarket(version=version, state=loads_state(payload))

    async def create(self, state: MarketState) -> StoredMarket:
        if self._record is None:
            self._record = (1, dumps_state(state))
        version, payload = self._record
        return StoredMarket(version=version, state=loads_state(payload))

    async def save(self, state: MarketState, version: int) -> None:
        self._record = (version, dumps_state(state))
