"""SQLAlchemy ORM model for the recorded market round.

Maps to the table created by migration 004; only Alembic metadata uses it.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, SmallInteger, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.sm_common.database import Base


class MarketRoundORM(Base):
    __tablename__ = "market_rounds"

    id: Mapped[int] = mapped_column(SmallInteger, primary_key=True, default=1)
    version: Mapped[int] = mapped_column(BigInteger, nullable=False)
    state: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
