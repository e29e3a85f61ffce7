"""Repository Protocol for balance transactions."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_ledger.domain.models import BalanceTransaction


class BalanceTransactionRepositoryProtocol(Protocol):
    async def insert(
        self, db: AsyncSession, transaction: BalanceTransaction
    ) -> BalanceTransaction: ...

    async def attach_balance(
        self, db: AsyncSession, transaction_id: int, balance_id: int
    ) -> None: ...
