"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_balance.domain.models import Balance


class BalanceRepositoryProtocol(Protocol):
    async def lock_user_merchant_account(
        self, db: AsyncSession, user_id: str, merchant_account_id: str
    ) -> None: ...

    async def list_unpaid_balances_for_update(
        self,
        db: AsyncSession,
        user_id: str,
        merchant_account_id: str,
        currency: str | None,
        holding_currency: str | None,
    ) -> list[Balance]: ...

    async def create_unpaid_balance(
        self,
        db: AsyncSession,
        user_id: str,
        merchant_account_id: str,
        currency: str,
        holding_currency: str,
        on_date: date,
    ) -> Balance | None: ...

    async def add_amounts(
        self,
        db: AsyncSession,
        balance_id: int,
        amount_cents: int,
        holding_amount_cents: int,
    ) -> Balance | None: ...

    async def get_balance(self, db: AsyncSession, balance_id: int) -> Balance | None: ...

    async def transition_state(
        self,
        db: AsyncSession,
        balance_id: int,
        from_states: list[str],
        to_state: str,
    ) -> Balance | None: ...

    async def forfeit_unpaid_balances(
        self, db: AsyncSession, user_id: str
    ) -> list[Balance]: ...

    async def sum_unpaid_amount_cents(
        self,
        db: AsyncSession,
        user_id: str,
        up_to: date | None = None,
        held_by_platform: bool | None = None,
    ) -> int: ...

    async def sum_unpaid_holding_amount_cents(
        self,
        db: AsyncSession,
        user_id: str,
        up_to: date | None = None,
        held_by_platform: bool | None = None,
    ) -> int: ...

    async def list_unpaid_balances(
        self, db: AsyncSession, user_id: str, up_to: date | None = None
    ) -> list[Balance]: ...

    async def sum_unpaid_amount_cents_by_currency(
        self,
        db: AsyncSession,
        user_id: str,
        held_by_platform: bool | None = None,
    ) -> dict[str, int]: ...
