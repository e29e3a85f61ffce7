"""001: create common functions

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # balance_transactions: no DELETE, and UPDATE may only set balance_id once
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_guard_balance_transaction()
        RETURNS TRIGGER AS $$
        BEGIN
            IF TG_OP = 'DELETE' THEN
                RAISE EXCEPTION 'balance_transactions is append-only';
            END IF;
            IF OLD.balance_id IS NOT NULL
               OR (to_jsonb(NEW) - 'balance_id') <> (to_jsonb(OLD) - 'balance_id') THEN
                RAISE EXCEPTION 'balance_transactions rows are immutable';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_guard_balance_transaction();")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
