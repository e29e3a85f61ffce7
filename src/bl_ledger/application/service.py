"""BalanceTransactionService — records money movements and applies them to balances.

The transaction row is inserted and committed first; balance selection then
runs in its own short transaction so the only locks held are the per-user
advisory lock and the chosen balance row.
"""

import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bl_balance.application.money_balance import MoneyBalanceService
from src.bl_balance.application.service import BalanceService
from src.bl_common.errors import BalanceNotMutableError
from src.bl_common.id_generator import generate_external_id
from src.bl_ledger.domain.models import BalanceTransaction, BalanceTransactionAmount
from src.bl_ledger.domain.repository import BalanceTransactionRepositoryProtocol
from src.bl_ledger.domain.source_events import (
    Credit,
    Dispute,
    Purchase,
    Refund,
    balance_target_for,
    source_event_from,
)
from src.bl_ledger.infrastructure.persistence import BalanceTransactionRepository

logger = logging.getLogger(__name__)


class BalanceTransactionService:
    def __init__(
        self,
        repo: BalanceTransactionRepositoryProtocol | None = None,
        balance_service: BalanceService | None = None,
        money_balance: MoneyBalanceService | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self._repo: BalanceTransactionRepositoryProtocol = (
            repo or BalanceTransactionRepository()
        )
        self._balances = balance_service or BalanceService()
        self._money_balance = money_balance or MoneyBalanceService()
        self._max_attempts = max_attempts or settings.BALANCE_UPDATE_MAX_ATTEMPTS

    async def create(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        merchant_account_id: str,
        issued_amount: BalanceTransactionAmount,
        holding_amount: BalanceTransactionAmount,
        purchase: Purchase | None = None,
        refund: Refund | None = None,
        dispute: Dispute | None = None,
        credit: Credit | None = None,
        update_user_balance: bool = True,
    ) -> BalanceTransaction:
        """Record a balance transaction for a user and apply it to their balance.

        merchant_account_id is the account the funds are held in; for a purchase
        it is the purchase's own merchant account. issued_amount is what the
        issuer charged or got back; holding_amount is what is held in the
        merchant account, in that account's currency.

        Returns the transaction with balance_id and balance set, unless
        update_user_balance is False.
        """
        source_event = source_event_from(purchase, refund, dispute, credit)
        transaction = BalanceTransaction(
            id=0,
            external_id=generate_external_id(),
            user_id=user_id,
            merchant_account_id=merchant_account_id,
            source_event=source_event,
            issued_amount=issued_amount,
            holding_amount=holding_amount,
        )

        try:
            transaction = await self._repo.insert(db, transaction)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if update_user_balance:
            transaction = await self.update_balance(db, transaction)
        return transaction

    async def update_balance(
        self, db: AsyncSession, transaction: BalanceTransaction
    ) -> BalanceTransaction:
        """Apply the transaction's net cents to the most appropriate unpaid balance.

        The selected balance can leave the unpaid state between selection and
        update (a payout picking it up); selection is then retried, up to
        max_attempts in total, before BalanceNotMutableError is raised.
        """
        target = balance_target_for(transaction.source_event)
        attempt = 1
        while True:
            try:
                balance = await self._balances.find_or_create_unpaid_balance(
                    db,
                    transaction.user_id,
                    transaction.merchant_account_id,
                    transaction.issued_amount_currency,
                    transaction.holding_amount_currency,
                    target,
                    transaction_id=transaction.id,
                )
                updated = await self._balances.add_amounts(
                    db,
                    balance.id,
                    transaction.issued_amount_net_cents,
                    transaction.holding_amount_net_cents,
                )
                if updated is None:
                    raise BalanceNotMutableError(balance.id)
                await self._repo.attach_balance(db, transaction.id, updated.id)
                await db.commit()
            except BalanceNotMutableError as exc:
                await db.rollback()
                logger.info(
                    "Updating balance for transaction %s: %s. Failed count: %d",
                    transaction.id, exc.message, attempt,
                )
                if attempt >= self._max_attempts:
                    raise
                attempt += 1
                continue
            except Exception:
                await db.rollback()
                raise
            break

        await self._money_balance.invalidate_cache(transaction.user_id)
        return replace(transaction, balance_id=updated.id, balance=updated)
