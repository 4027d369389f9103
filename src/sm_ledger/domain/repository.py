"""Value ledger Protocol: the engine's only view of the fungible token.

The engine custody account is fixed per ledger instance: `pull` moves value
from a payer into custody (consuming the payer's allowance to custody), `push`
moves value out of custody. Both raise a 2xxx AppError on failure.

Unit tests inject an in-memory implementation; the PostgreSQL implementation
lives in the infrastructure layer.
"""

from contextlib import AbstractAsyncContextManager
from typing import Protocol


class ValueLedgerProtocol(Protocol):
    custody_address: str

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """All-or-nothing scope: every pull/push inside is undone if the block raises."""
        ...

    async def pull(self, payer: str, amount: int) -> None: ...

    async def push(self, recipient: str, amount: int) -> None: ...

    async def balance_of(self, address: str) -> int: ...
