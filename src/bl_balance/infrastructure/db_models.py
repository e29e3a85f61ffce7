"""SQLAlchemy ORM models for bl_balance.

These map to existing tables created by Alembic migrations.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import date as calendar_date
from datetime import datetime

from sqlalchemy import BigInteger, Date, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.bl_common.database import Base


class MerchantAccountORM(Base):
    __tablename__ = "merchant_accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # NULL user_id: the platform's own merchant account
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")
    charge_processor_id: Mapped[str] = mapped_column(
        String(30), nullable=False, default="stripe"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class BalanceORM(Base):
    __tablename__ = "balances"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    merchant_account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("merchant_accounts.id"), nullable=False
    )
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default="unpaid")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    holding_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")
    holding_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    reopened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
