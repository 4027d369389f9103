"""002: create token_allowances table

Revision ID: 002
Revises: 001
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE token_allowances (
            owner       VARCHAR(66)     NOT NULL,
            spender     VARCHAR(66)     NOT NULL,
            amount      NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (owner, spender),
            CONSTRAINT ck_token_allowances_amount_gte_0 CHECK (amount >= 0)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS token_allowances CASCADE;")
