"""004: create market_rounds table

Revision ID: 004
Revises: 003
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_rounds (
            id          SMALLINT        PRIMARY KEY DEFAULT 1,
            version     BIGINT          NOT NULL,
            state       TEXT            NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_rounds_single CHECK (id = 1),
            CONSTRAINT ck_market_rounds_version_gt_0 CHECK (version > 0)
        );
    """)
    op.execute("COMMENT ON TABLE market_rounds IS 'The single round, JSON-encoded, one version per committed operation';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_rounds CASCADE;")
