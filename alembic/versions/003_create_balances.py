"""003: create balances table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE balances (
            id                    BIGSERIAL   PRIMARY KEY,
            user_id               VARCHAR(64) NOT NULL,
            merchant_account_id   VARCHAR(64) NOT NULL REFERENCES merchant_accounts (id),
            date                  DATE        NOT NULL,
            state                 VARCHAR(20) NOT NULL DEFAULT 'unpaid',
            currency              VARCHAR(3)  NOT NULL DEFAULT 'usd',
            amount_cents          BIGINT      NOT NULL DEFAULT 0,
            holding_currency      VARCHAR(3)  NOT NULL DEFAULT 'usd',
            holding_amount_cents  BIGINT      NOT NULL DEFAULT 0,
            reopened_at           TIMESTAMPTZ,
            created_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_balances_state CHECK (
                state IN ('unpaid', 'processing', 'paid', 'forfeited')
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_balances_user_merchant_account_date
        ON balances (user_id, merchant_account_id, date);
    """)
    # At most one ledger-created unpaid row per day and currency pair. Rows a
    # failed or returned payout moved back to unpaid carry reopened_at and
    # may sit beside it.
    op.execute("""
        CREATE UNIQUE INDEX uq_balances_unpaid_per_day
        ON balances (user_id, merchant_account_id, date, currency, holding_currency)
        WHERE state = 'unpaid' AND reopened_at IS NULL;
    """)
    op.execute("""
        CREATE TRIGGER trg_balances_updated_at
            BEFORE UPDATE ON balances
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE balances IS "
        "'Per-day running balance per user and merchant account — amounts in cents, may be negative';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS balances CASCADE;")
