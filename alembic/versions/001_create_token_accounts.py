"""001: create token_accounts table

Revision ID: 001
Revises:
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE token_accounts (
            address     VARCHAR(66)     PRIMARY KEY,
            balance     NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_token_accounts_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE token_accounts IS 'Token balances in 18-decimal base units';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS token_accounts CASCADE;")
