"""SqlTokenLedger: PostgreSQL implementation of ValueLedgerProtocol.

All balance-mutating statements are guarded UPDATE ... RETURNING: zero rows
back means the constraint (balance or allowance) was violated.

Transaction ownership: `transaction()` opens one session and one DB transaction
per engine operation; pull/push must run inside it. The engine serializes
operations, so a single active session per ledger is sufficient.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.sm_common.enums import TransferType
from src.sm_common.errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InternalError,
)

logger = logging.getLogger(__name__)

_CONSUME_ALLOWANCE_SQL = text("""
    UPDATE token_allowances
    SET amount = amount - :amount, updated_at = NOW()
    WHERE owner = :owner AND spender = :spender AND amount >= :amount
    RETURNING amount
""")

_GET_ALLOWANCE_SQL = text(
    "SELECT amount FROM token_allowances WHERE owner = :owner AND spender = :spender"
)

_DEBIT_SQL = text("""
    UPDATE token_accounts
    SET balance = balance - :amount, updated_at = NOW()
    WHERE address = :address AND balance >= :amount
    RETURNING balance
""")

_CREDIT_SQL = text("""
    INSERT INTO token_accounts (address, balance)
    VALUES (:address, :amount)
    ON CONFLICT (address) DO UPDATE
        SET balance = token_accounts.balance + EXCLUDED.balance,
            updated_at = NOW()
    RETURNING balance
""")

_GET_BALANCE_SQL = text("SELECT balance FROM token_accounts WHERE address = :address")

_INSERT_TRANSFER_SQL = text("""
    INSERT INTO token_transfers (transfer_type, from_address, to_address, amount)
    VALUES (:transfer_type, :from_address, :to_address, :amount)
""")


class SqlTokenLedger:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        custody_address: str,
    ) -> None:
        self.custody_address = custody_address
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._session_factory() as session:
            async with session.begin():
                self._session = session
                try:
                    yield
                finally:
                    self._session = None

    async def pull(self, payer: str, amount: int) -> None:
        db = self.active_session()
        consumed = (
            await db.execute(
                _CONSUME_ALLOWANCE_SQL,
                {"owner": payer, "spender": self.custody_address, "amount": amount},
            )
        ).fetchone()
        if consumed is None:
            approved = (
                await db.execute(
                    _GET_ALLOWANCE_SQL, {"owner": payer, "spender": self.custody_address}
                )
            ).scalar_one_or_none()
            raise InsufficientAllowanceError(payer, amount, int(approved or 0))
        await self._debit(db, payer, amount)
        await db.execute(_CREDIT_SQL, {"address": self.custody_address, "amount": amount})
        await self._journal(db, TransferType.PULL, payer, self.custody_address, amount)

    async def push(self, recipient: str, amount: int) -> None:
        db = self.active_session()
        await self._debit(db, self.custody_address, amount)
        await db.execute(_CREDIT_SQL, {"address": recipient, "amount": amount})
        await self._journal(db, TransferType.PUSH, self.custody_address, recipient, amount)

    async def balance_of(self, address: str) -> int:
        if self._session is not None:
            balance = (
                await self._session.execute(_GET_BALANCE_SQL, {"address": address})
            ).scalar_one_or_none()
            return int(balance or 0)
        async with self._session_factory() as session:
            balance = (
                await session.execute(_GET_BALANCE_SQL, {"address": address})
            ).scalar_one_or_none()
            return int(balance or 0)

    def active_session(self) -> AsyncSession:
        if self._session is None:
            raise InternalError("Ledger transfer attempted outside a transaction")
        return self._session

    async def _debit(self, db: AsyncSession, address: str, amount: int) -> None:
        row = (await db.execute(_DEBIT_SQL, {"address": address, "amount": amount})).fetchone()
        if row is None:
            available = (
                await db.execute(_GET_BALANCE_SQL, {"address": address})
            ).scalar_one_or_none()
            raise InsufficientBalanceError(address, amount, int(available or 0))

    async def _journal(
        self,
        db: AsyncSession,
        transfer_type: TransferType,
        from_address: str,
        to_address: str,
        amount: int,
    ) -> None:
        await db.execute(
            _INSERT_TRANSFER_SQL,
            {
                "transfer_type": transfer_type.value,
                "from_address": from_address,
                "to_address": to_address,
                "amount": amount,
            },
        )
        logger.debug("Ledger %s %s -> %s: %d", transfer_type.value, from_address, to_address, amount)
