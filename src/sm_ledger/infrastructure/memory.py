"""InMemoryTokenLedger: process-local implementation of ValueLedgerProtocol.

Behaves like an allowance-based token: `approve` grants the custody account a
spending allowance, `pull` consumes it. `transaction()` snapshots balances,
allowances and the journal and restores them if the block raises.
"""

import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.sm_common.enums import TransferType
from src.sm_common.errors import InsufficientAllowanceError, InsufficientBalanceError
from src.sm_ledger.domain.models import TransferRecord

logger = logging.getLogger(__name__)


class InMemoryTokenLedger:
    def __init__(self, custody_address: str) -> None:
        self.custody_address = custody_address
        self._balances: dict[str, int] = defaultdict(int)
        self._allowances: dict[tuple[str, str], int] = defaultdict(int)
        self._journal: list[TransferRecord] = []

    # --- token-side helpers (wallet operations, not part of the Protocol) ---

    def mint(self, address: str, amount: int) -> None:
        self._balances[address] += amount

    def approve(self, owner: str, amount: int, spender: str | None = None) -> None:
        self._allowances[(owner, spender or self.custody_address)] = amount

    def allowance(self, owner: str, spender: str | None = None) -> int:
        return self._allowances.get((owner, spender or self.custody_address), 0)

    @property
    def journal(self) -> list[TransferRecord]:
        return list(self._journal)

    # --- ValueLedgerProtocol ---

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        balances = dict(self._balances)
        allowances = dict(self._allowances)
        journal_len = len(self._journal)
        try:
            yield
        except BaseException:
            undone = len(self._journal) - journal_len
            self._balances = defaultdict(int, balances)
            self._allowances = defaultdict(int, allowances)
            del self._journal[journal_len:]
            logger.debug("Ledger transaction rolled back: %d transfers undone", undone)
            raise

    async def pull(self, payer: str, amount: int) -> None:
        approved = self.allowance(payer)
        if approved < amount:
            raise InsufficientAllowanceError(payer, amount, approved)
        self._move(payer, self.custody_address, amount)
        self._allowances[(payer, self.custody_address)] = approved - amount
        self._journal.append(
            TransferRecord(TransferType.PULL.value, payer, self.custody_address, amount)
        )

    async def push(self, recipient: str, amount: int) -> None:
        self._move(self.custody_address, recipient, amount)
        self._journal.append(
            TransferRecord(TransferType.PUSH.value, self.custody_address, recipient, amount)
        )

    async def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def _move(self, source: str, target: str, amount: int) -> None:
        available = self._balances.get(source, 0)
        if available < amount:
            raise InsufficientBalanceError(source, amount, available)
        self._balances[source] = available - amount
        self._balances[target] += amount
