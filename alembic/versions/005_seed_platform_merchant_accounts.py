"""005: seed the platform's own merchant accounts

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # user_id NULL: funds collected into accounts the platform owns
    op.execute("""
        INSERT INTO merchant_accounts (id, user_id, currency, charge_processor_id)
        VALUES
            ('platform-stripe', NULL, 'usd', 'stripe'),
            ('platform-braintree', NULL, 'usd', 'braintree'),
            ('platform-paypal', NULL, 'usd', 'paypal')
        ON CONFLICT (id) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("""
        DELETE FROM merchant_accounts
        WHERE id IN ('platform-stripe', 'platform-braintree', 'platform-paypal');
    """)
