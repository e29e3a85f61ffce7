"""MoneyBalanceService — the user aggregate's view of its balances.

Unpaid totals are derived from balance rows on every read; nothing here is a
second source of truth. The Redis path is a cache-aside shortcut that always
falls back to SQL.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_balance.application.schemas import CurrencyTotal, UnpaidBalanceSummary
from src.bl_balance.domain.models import Balance
from src.bl_balance.domain.repository import BalanceRepositoryProtocol
from src.bl_balance.infrastructure.cache import UnpaidBalanceCache
from src.bl_balance.infrastructure.persistence import BalanceRepository

logger = logging.getLogger(__name__)


class MoneyBalanceService:
    def __init__(
        self,
        repo: BalanceRepositoryProtocol | None = None,
        cache: UnpaidBalanceCache | None = None,
    ) -> None:
        self._repo: BalanceRepositoryProtocol = repo or BalanceRepository()
        self._cache = cache or UnpaidBalanceCache()

    async def unpaid_balance_cents(
        self, db: AsyncSession, user_id: str, via: str = "sql"
    ) -> int:
        if via == "cache":
            try:
                cached = await self._cache.get(user_id)
                if cached is not None:
                    return cached
                cents = await self._repo.sum_unpaid_amount_cents(db, user_id)
                await self._cache.set(user_id, cents)
                return cents
            except Exception:
                # Redis is an optimisation; SQL below is authoritative
                logger.exception("Unpaid balance cache failed for user %s", user_id)
        elif via != "sql":
            raise ValueError(f"via must be 'sql' or 'cache', got {via!r}")
        return await self._repo.sum_unpaid_amount_cents(db, user_id)

    async def unpaid_balance_cents_up_to_date(
        self, db: AsyncSession, user_id: str, up_to: date
    ) -> int:
        return await self._repo.sum_unpaid_amount_cents(db, user_id, up_to=up_to)

    async def unpaid_balances_up_to_date(
        self, db: AsyncSession, user_id: str, up_to: date
    ) -> list[Balance]:
        return await self._repo.list_unpaid_balances(db, user_id, up_to=up_to)

    async def unpaid_balance_cents_up_to_date_held_by_platform(
        self, db: AsyncSession, user_id: str, up_to: date
    ) -> int:
        return await self._repo.sum_unpaid_amount_cents(
            db, user_id, up_to=up_to, held_by_platform=True
        )

    async def unpaid_balance_holding_cents_up_to_date_held_by_merchant_account(
        self, db: AsyncSession, user_id: str, up_to: date
    ) -> int:
        """Holding-currency cents sitting in the seller's own merchant accounts."""
        return await self._repo.sum_unpaid_holding_amount_cents(
            db, user_id, up_to=up_to, held_by_platform=False
        )

    async def forfeit_unpaid_balances(
        self, db: AsyncSession, user_id: str
    ) -> list[Balance]:
        try:
            forfeited = await self._repo.forfeit_unpaid_balances(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if forfeited:
            logger.info(
                "Forfeited %d balances for user %s totalling %d cents",
                len(forfeited), user_id, sum(b.amount_cents for b in forfeited),
            )
        await self.invalidate_cache(user_id)
        return forfeited

    async def invalidate_cache(self, user_id: str) -> None:
        try:
            await self._cache.invalidate(user_id)
        except Exception:
            # Entry expires on its own after the TTL
            logger.exception("Could not invalidate unpaid balance cache for user %s", user_id)

    async def summary(self, db: AsyncSession, user_id: str) -> UnpaidBalanceSummary:
        """Unpaid totals grouped by issued currency."""
        balances = await self._repo.list_unpaid_balances(db, user_id)
        unpaid = await self._repo.sum_unpaid_amount_cents_by_currency(db, user_id)
        held_by_platform = await self._repo.sum_unpaid_amount_cents_by_currency(
            db, user_id, held_by_platform=True
        )
        return UnpaidBalanceSummary(
            user_id=user_id,
            balance_count=len(balances),
            totals=[
                CurrencyTotal.from_cents(currency, cents, held_by_platform.get(currency, 0))
                for currency, cents in unpaid.items()
            ],
        )
