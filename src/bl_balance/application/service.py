"""BalanceService — unpaid balance selection and balance state transitions.

find_or_create_unpaid_balance runs inside the caller's transaction: the advisory
lock and the FOR UPDATE row locks it takes are held until the caller commits.
The mark_* transitions own their transaction and commit themselves.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bl_balance.domain.models import (
    Balance,
    BalanceTarget,
    can_transition,
    states_transitioning_to,
)
from src.bl_balance.domain.repository import BalanceRepositoryProtocol
from src.bl_balance.domain.selection import select_unpaid_balance
from src.bl_balance.infrastructure.persistence import BalanceRepository
from src.bl_common.enums import BalanceState
from src.bl_common.errors import (
    BalanceCouldNotBeFoundOrCreatedError,
    BalanceNotFoundError,
    BalanceStateTransitionError,
)

logger = logging.getLogger(__name__)


class BalanceService:
    def __init__(
        self,
        repo: BalanceRepositoryProtocol | None = None,
        match_by_currency: bool | None = None,
    ) -> None:
        self._repo: BalanceRepositoryProtocol = repo or BalanceRepository()
        self._match_by_currency = (
            settings.BALANCE_MATCH_BY_CURRENCY
            if match_by_currency is None
            else match_by_currency
        )

    async def find_or_create_unpaid_balance(
        self,
        db: AsyncSession,
        user_id: str,
        merchant_account_id: str,
        currency: str,
        holding_currency: str,
        target: BalanceTarget,
        transaction_id: int = 0,
    ) -> Balance:
        """Return the unpaid balance a transaction should adjust, creating it if needed."""
        await self._repo.lock_user_merchant_account(db, user_id, merchant_account_id)

        currency_filter = currency if self._match_by_currency else None
        holding_filter = holding_currency if self._match_by_currency else None
        candidates = await self._repo.list_unpaid_balances_for_update(
            db, user_id, merchant_account_id, currency_filter, holding_filter
        )

        balance = select_unpaid_balance(candidates, target)
        if balance is not None:
            logger.debug(
                "Transaction %s matched balance %s dated %s",
                transaction_id, balance.id, balance.date,
            )
            return balance

        balance = await self._repo.create_unpaid_balance(
            db,
            user_id,
            merchant_account_id,
            currency,
            holding_currency,
            target.occurred_on,
        )
        if balance is not None:
            logger.debug(
                "Transaction %s created balance %s dated %s",
                transaction_id, balance.id, balance.date,
            )
            return balance

        # Another writer created the unpaid row for this date first
        logger.info(
            "Creating balance for transaction %s: balance already exists for %s, "
            "not duplicating it",
            transaction_id, target.occurred_on,
        )
        candidates = await self._repo.list_unpaid_balances_for_update(
            db, user_id, merchant_account_id, currency_filter, holding_filter
        )
        for candidate in candidates:
            if candidate.date == target.occurred_on:
                return candidate
        raise BalanceCouldNotBeFoundOrCreatedError(transaction_id)

    async def add_amounts(
        self,
        db: AsyncSession,
        balance_id: int,
        amount_cents: int,
        holding_amount_cents: int,
    ) -> Balance | None:
        """Add signed deltas to both running sums. None if the balance is no longer unpaid."""
        return await self._repo.add_amounts(db, balance_id, amount_cents, holding_amount_cents)

    async def mark_processing(self, db: AsyncSession, balance_id: int) -> Balance:
        return await self._transition(db, balance_id, BalanceState.PROCESSING)

    async def mark_paid(self, db: AsyncSession, balance_id: int) -> Balance:
        return await self._transition(db, balance_id, BalanceState.PAID)

    async def mark_unpaid(self, db: AsyncSession, balance_id: int) -> Balance:
        return await self._transition(db, balance_id, BalanceState.UNPAID)

    async def mark_forfeited(self, db: AsyncSession, balance_id: int) -> Balance:
        return await self._transition(db, balance_id, BalanceState.FORFEITED)

    async def _transition(
        self, db: AsyncSession, balance_id: int, to_state: BalanceState
    ) -> Balance:
        try:
            current = await self._repo.get_balance(db, balance_id)
            if current is None:
                raise BalanceNotFoundError(balance_id)
            if not can_transition(current.state, to_state):
                raise BalanceStateTransitionError(balance_id, current.state, to_state.value)
            if to_state == BalanceState.UNPAID:
                # The row becomes a matching candidate again; serialize with
                # find_or_create_unpaid_balance for the same account
                await self._repo.lock_user_merchant_account(
                    db, current.user_id, current.merchant_account_id
                )
            updated = await self._repo.transition_state(
                db, balance_id, states_transitioning_to(to_state), to_state.value
            )
            if updated is None:
                # State changed between the read and the conditional update
                latest = await self._repo.get_balance(db, balance_id)
                raise BalanceStateTransitionError(
                    balance_id, latest.state if latest else current.state, to_state.value
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Balance %s is now %s", balance_id, to_state.value)
        return updated
