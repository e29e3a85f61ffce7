"""SQLAlchemy ORM model for bl_ledger.

Maps to the table created by Alembic migration 004.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.bl_common.database import Base


class BalanceTransactionORM(Base):
    __tablename__ = "balance_transactions"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    merchant_account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("merchant_accounts.id"), nullable=False
    )
    balance_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("balances.id"), nullable=True
    )
    # Exactly one of these is set (CHECK constraint in the migration)
    purchase_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    refund_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    dispute_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    credit_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    issued_amount_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    issued_amount_gross_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    issued_amount_net_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    holding_amount_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    holding_amount_gross_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    holding_amount_net_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    # NOTE: No updated_at, balance_transactions is append-only
