"""BalanceTransactionRepository — append-only writes to balance_transactions.

The only UPDATE ever issued is the one-time link to the balance the
transaction was applied to (balance_id IS NULL guard).
"""

from dataclasses import replace

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.errors import InternalError
from src.bl_ledger.domain.models import BalanceTransaction

_INSERT_SQL = text("""
    INSERT INTO balance_transactions
        (external_id, user_id, merchant_account_id,
         purchase_id, refund_id, dispute_id, credit_id,
         issued_amount_currency, issued_amount_gross_cents, issued_amount_net_cents,
         holding_amount_currency, holding_amount_gross_cents, holding_amount_net_cents)
    VALUES
        (:external_id, :user_id, :merchant_account_id,
         :purchase_id, :refund_id, :dispute_id, :credit_id,
         :issued_amount_currency, :issued_amount_gross_cents, :issued_amount_net_cents,
         :holding_amount_currency, :holding_amount_gross_cents, :holding_amount_net_cents)
    RETURNING id, created_at
""")

_ATTACH_BALANCE_SQL = text("""
    UPDATE balance_transactions
    SET balance_id = :balance_id
    WHERE id = :transaction_id AND balance_id IS NULL
    RETURNING id
""")


def _insert_params(transaction: BalanceTransaction) -> dict[str, object]:
    column, source_id = transaction.source_column()
    params: dict[str, object] = {
        "external_id": transaction.external_id,
        "user_id": transaction.user_id,
        "merchant_account_id": transaction.merchant_account_id,
        "purchase_id": None,
        "refund_id": None,
        "dispute_id": None,
        "credit_id": None,
        "issued_amount_currency": transaction.issued_amount_currency,
        "issued_amount_gross_cents": transaction.issued_amount_gross_cents,
        "issued_amount_net_cents": transaction.issued_amount_net_cents,
        "holding_amount_currency": transaction.holding_amount_currency,
        "holding_amount_gross_cents": transaction.holding_amount_gross_cents,
        "holding_amount_net_cents": transaction.holding_amount_net_cents,
    }
    params[column] = source_id
    return params


class BalanceTransactionRepository:
    async def insert(
        self, db: AsyncSession, transaction: BalanceTransaction
    ) -> BalanceTransaction:
        result = await db.execute(_INSERT_SQL, _insert_params(transaction))
        row = result.fetchone()
        if row is None:
            raise InternalError("Balance transaction insert returned no rows")
        return replace(transaction, id=row.id, created_at=row.created_at)

    async def attach_balance(
        self, db: AsyncSession, transaction_id: int, balance_id: int
    ) -> None:
        result = await db.execute(
            _ATTACH_BALANCE_SQL,
            {"transaction_id": transaction_id, "balance_id": balance_id},
        )
        if result.fetchone() is None:
            raise InternalError(
                f"Balance transaction {transaction_id} is missing or already linked to a balance"
            )
