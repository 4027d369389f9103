"""003: create token_transfers table

Revision ID: 003
Revises: 002
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE token_transfers (
            id              BIGSERIAL       PRIMARY KEY,
            transfer_type   VARCHAR(10)     NOT NULL,
            from_address    VARCHAR(66)     NOT NULL,
            to_address      VARCHAR(66)     NOT NULL,
            amount          NUMERIC(78, 0)  NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_token_transfers_type CHECK (transfer_type IN ('PULL', 'PUSH')),
            CONSTRAINT ck_token_transfers_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_token_transfers_from ON token_transfers (from_address, created_at DESC);")
    op.execute("CREATE INDEX idx_token_transfers_to ON token_transfers (to_address, created_at DESC);")
    op.execute("COMMENT ON TABLE token_transfers IS 'Token movements in/out of custody: Append-Only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS token_transfers CASCADE;")
