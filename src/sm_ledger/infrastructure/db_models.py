"""SQLAlchemy ORM models for sm_ledger.

These map to tables created by Alembic migrations.
DO NOT add/remove columns here without a corresponding migration.
Amounts are NUMERIC(78, 0): 18-decimal token units overflow BIGINT.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.sm_common.database import Base

_AMOUNT = Numeric(78, 0)


class TokenAccountORM(Base):
    __tablename__ = "token_accounts"

    address: Mapped[str] = mapped_column(String(66), primary_key=True)
    balance: Mapped[int] = mapped_column(_AMOUNT, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TokenAllowanceORM(Base):
    __tablename__ = "token_allowances"

    owner: Mapped[str] = mapped_column(String(66), primary_key=True)
    spender: Mapped[str] = mapped_column(String(66), primary_key=True)
    amount: Mapped[int] = mapped_column(_AMOUNT, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TokenTransferORM(Base):
    __tablename__ = "token_transfers"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    transfer_type: Mapped[str] = mapped_column(String(10), nullable=False)
    from_address: Mapped[str] = mapped_column(String(66), nullable=False)
    to_address: Mapped[str] = mapped_column(String(66), nullable=False)
    amount: Mapped[int] = mapped_column(_AMOUNT, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    # NOTE: No updated_at, token_transfers is append-only
