"""002: create merchant_accounts table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE merchant_accounts (
            id                   VARCHAR(64) PRIMARY KEY,
            user_id              VARCHAR(64),
            currency             VARCHAR(3)  NOT NULL DEFAULT 'usd',
            charge_processor_id  VARCHAR(30) NOT NULL DEFAULT 'stripe',
            created_at           TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_merchant_accounts_user ON merchant_accounts (user_id);")
    op.execute(
        "COMMENT ON TABLE merchant_accounts IS "
        "'Accounts funds are held in — user_id NULL means held by the platform';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS merchant_accounts CASCADE;")
