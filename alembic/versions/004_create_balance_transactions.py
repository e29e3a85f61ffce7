"""004: create balance_transactions table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE balance_transactions (
            id                          BIGSERIAL   PRIMARY KEY,
            external_id                 VARCHAR(32) NOT NULL,
            user_id                     VARCHAR(64) NOT NULL,
            merchant_account_id         VARCHAR(64) NOT NULL REFERENCES merchant_accounts (id),
            balance_id                  BIGINT      REFERENCES balances (id),
            purchase_id                 VARCHAR(64),
            refund_id                   VARCHAR(64),
            dispute_id                  VARCHAR(64),
            credit_id                   VARCHAR(64),
            issued_amount_currency      VARCHAR(3)  NOT NULL,
            issued_amount_gross_cents   BIGINT      NOT NULL,
            issued_amount_net_cents     BIGINT      NOT NULL,
            holding_amount_currency     VARCHAR(3)  NOT NULL,
            holding_amount_gross_cents  BIGINT      NOT NULL,
            holding_amount_net_cents    BIGINT      NOT NULL,
            created_at                  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_balance_transactions_external_id UNIQUE (external_id),
            CONSTRAINT ck_balance_transactions_one_source CHECK (
                num_nonnulls(purchase_id, refund_id, dispute_id, credit_id) = 1
            )
        );
    """)
    op.execute("CREATE INDEX idx_bt_user ON balance_transactions (user_id, created_at DESC);")
    op.execute("CREATE INDEX idx_bt_balance ON balance_transactions (balance_id);")
    op.execute("CREATE INDEX idx_bt_purchase ON balance_transactions (purchase_id) WHERE purchase_id IS NOT NULL;")
    op.execute("CREATE INDEX idx_bt_refund ON balance_transactions (refund_id) WHERE refund_id IS NOT NULL;")
    op.execute("CREATE INDEX idx_bt_dispute ON balance_transactions (dispute_id) WHERE dispute_id IS NOT NULL;")
    op.execute("CREATE INDEX idx_bt_credit ON balance_transactions (credit_id) WHERE credit_id IS NOT NULL;")
    op.execute("""
        CREATE TRIGGER trg_balance_transactions_guard
            BEFORE UPDATE OR DELETE ON balance_transactions
            FOR EACH ROW EXECUTE FUNCTION fn_guard_balance_transaction();
    """)
    op.execute(
        "COMMENT ON TABLE balance_transactions IS "
        "'Ledger of balance changes — Append-Only, amounts in cents';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS balance_transactions CASCADE;")
