"""Shared test fixtures.

In-memory repositories conform to the repository Protocols so reconciliation
scenarios can run end to end without PostgreSQL. They mimic the SQL layer:
rows are returned as copies, ledger-created unpaid rows are unique per day and
currency pair (the partial unique index), reopening a row stamps reopened_at,
and amount updates only succeed while a balance is unpaid.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.bl_balance.application.money_balance import MoneyBalanceService
from src.bl_balance.application.service import BalanceService
from src.bl_balance.domain.models import Balance
from src.bl_ledger.application.service import BalanceTransactionService
from src.bl_ledger.domain.models import BalanceTransaction


class InMemoryBalanceRepository:
    def __init__(self) -> None:
        self.balances: dict[int, Balance] = {}
        self.platform_accounts: set[str] = set()
        self.locked: list[tuple[str, str]] = []
        self.before_add_amounts: Callable[[int], None] | None = None
        self._next_id = 1

    def seed(
        self,
        *,
        on_date: date,
        user_id: str = "user-1",
        merchant_account_id: str = "ma-1",
        state: str = "unpaid",
        currency: str = "usd",
        amount_cents: int = 0,
        holding_currency: str = "usd",
        holding_amount_cents: int = 0,
        reopened_at: datetime | None = None,
    ) -> Balance:
        balance = Balance(
            id=self._next_id,
            user_id=user_id,
            merchant_account_id=merchant_account_id,
            date=on_date,
            state=state,
            currency=currency,
            amount_cents=amount_cents,
            holding_currency=holding_currency,
            holding_amount_cents=holding_amount_cents,
            reopened_at=reopened_at,
            created_at=datetime.now(UTC),
            updated_at=datetime.now(UTC),
        )
        self.balances[balance.id] = balance
        self._next_id += 1
        return replace(balance)

    def get(self, balance_id: int) -> Balance:
        return replace(self.balances[balance_id])

    def set_state(self, balance_id: int, state: str) -> None:
        self.balances[balance_id].state = state

    def for_user(self, user_id: str = "user-1") -> list[Balance]:
        return [replace(b) for b in self.balances.values() if b.user_id == user_id]

    async def lock_user_merchant_account(self, db, user_id, merchant_account_id) -> None:
        self.locked.append((user_id, merchant_account_id))

    async def list_unpaid_balances_for_update(
        self, db, user_id, merchant_account_id, currency, holding_currency
    ) -> list[Balance]:
        rows = [
            b for b in self.balances.values()
            if b.user_id == user_id
            and b.merchant_account_id == merchant_account_id
            and b.state == "unpaid"
            and (currency is None or b.currency == currency)
            and (holding_currency is None or b.holding_currency == holding_currency)
        ]
        return [replace(b) for b in sorted(rows, key=lambda b: (b.date, b.id))]

    @staticmethod
    def _unique_key(b: Balance) -> tuple | None:
        if b.state != "unpaid" or b.reopened_at is not None:
            return None
        return (b.user_id, b.merchant_account_id, b.date, b.currency, b.holding_currency)

    def _check_unique_unpaid(self) -> None:
        keys = [k for k in map(self._unique_key, self.balances.values()) if k is not None]
        if len(keys) != len(set(keys)):
            raise IntegrityError(
                "UPDATE balances", {}, Exception("uq_balances_unpaid_per_day")
            )

    async def create_unpaid_balance(
        self, db, user_id, merchant_account_id, currency, holding_currency, on_date
    ) -> Balance | None:
        key = (user_id, merchant_account_id, on_date, currency, holding_currency)
        if any(self._unique_key(b) == key for b in self.balances.values()):
            return None
        return self.seed(
            on_date=on_date,
            user_id=user_id,
            merchant_account_id=merchant_account_id,
            currency=currency,
            holding_currency=holding_currency,
        )

    async def add_amounts(self, db, balance_id, amount_cents, holding_amount_cents) -> Balance | None:
        if self.before_add_amounts is not None:
            self.before_add_amounts(balance_id)
        balance = self.balances.get(balance_id)
        if balance is None or balance.state != "unpaid":
            return None
        balance.amount_cents += amount_cents
        balance.holding_amount_cents += holding_amount_cents
        return replace(balance)

    async def get_balance(self, db, balance_id) -> Balance | None:
        balance = self.balances.get(balance_id)
        return replace(balance) if balance else None

    async def transition_state(self, db, balance_id, from_states, to_state) -> Balance | None:
        balance = self.balances.get(balance_id)
        if balance is None or balance.state not in from_states:
            return None
        previous = replace(balance)
        balance.state = to_state
        if to_state == "unpaid":
            balance.reopened_at = datetime.now(UTC)
        try:
            self._check_unique_unpaid()
        except IntegrityError:
            self.balances[balance_id] = previous
            raise
        return replace(balance)

    async def forfeit_unpaid_balances(self, db, user_id) -> list[Balance]:
        forfeited = []
        for b in self.balances.values():
            if b.user_id == user_id and b.state == "unpaid":
                b.state = "forfeited"
                forfeited.append(replace(b))
        return forfeited

    def _unpaid(self, user_id, up_to, held_by_platform) -> list[Balance]:
        rows = []
        for b in self.balances.values():
            if b.user_id != user_id or b.state != "unpaid":
                continue
            if up_to is not None and b.date > up_to:
                continue
            if held_by_platform is not None:
                is_platform = b.merchant_account_id in self.platform_accounts
                if is_platform != held_by_platform:
                    continue
            rows.append(b)
        return sorted(rows, key=lambda b: (b.date, b.id))

    async def sum_unpaid_amount_cents(self, db, user_id, up_to=None, held_by_platform=None) -> int:
        return sum(b.amount_cents for b in self._unpaid(user_id, up_to, held_by_platform))

    async def sum_unpaid_holding_amount_cents(
        self, db, user_id, up_to=None, held_by_platform=None
    ) -> int:
        return sum(b.holding_amount_cents for b in self._unpaid(user_id, up_to, held_by_platform))

    async def list_unpaid_balances(self, db, user_id, up_to=None) -> list[Balance]:
        return [replace(b) for b in self._unpaid(user_id, up_to, None)]

    async def sum_unpaid_amount_cents_by_currency(
        self, db, user_id, held_by_platform=None
    ) -> dict[str, int]:
        totals: dict[str, int] = {}
        for b in self._unpaid(user_id, None, held_by_platform):
            totals[b.currency] = totals.get(b.currency, 0) + b.amount_cents
        return dict(sorted(totals.items()))


class InMemoryBalanceTransactionRepository:
    def __init__(self) -> None:
        self.rows: dict[int, BalanceTransaction] = {}
        self._next_id = 1

    async def insert(self, db, transaction: BalanceTransaction) -> BalanceTransaction:
        stored = replace(transaction, id=self._next_id, created_at=datetime.now(UTC))
        self.rows[stored.id] = stored
        self._next_id += 1
        return stored

    async def attach_balance(self, db, transaction_id, balance_id) -> None:
        self.rows[transaction_id] = replace(self.rows[transaction_id], balance_id=balance_id)


class InMemoryUnpaidBalanceCache:
    def __init__(self) -> None:
        self.values: dict[str, int] = {}
        self.invalidated: list[str] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("redis unavailable")

    async def get(self, user_id: str) -> int | None:
        self._check()
        return self.values.get(user_id)

    async def set(self, user_id: str, cents: int) -> None:
        self._check()
        self.values[user_id] = cents

    async def invalidate(self, user_id: str) -> None:
        self._check()
        self.values.pop(user_id, None)
        self.invalidated.append(user_id)


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def balance_repo() -> InMemoryBalanceRepository:
    return InMemoryBalanceRepository()


@pytest.fixture
def transaction_repo() -> InMemoryBalanceTransactionRepository:
    return InMemoryBalanceTransactionRepository()


@pytest.fixture
def unpaid_cache() -> InMemoryUnpaidBalanceCache:
    return InMemoryUnpaidBalanceCache()


@pytest.fixture
def balance_service(balance_repo: InMemoryBalanceRepository) -> BalanceService:
    return BalanceService(repo=balance_repo, match_by_currency=False)


@pytest.fixture
def money_balance(
    balance_repo: InMemoryBalanceRepository, unpaid_cache: InMemoryUnpaidBalanceCache
) -> MoneyBalanceService:
    return MoneyBalanceService(repo=balance_repo, cache=unpaid_cache)  # type: ignore[arg-type]


@pytest.fixture
def ledger(
    transaction_repo: InMemoryBalanceTransactionRepository,
    balance_service: BalanceService,
    money_balance: MoneyBalanceService,
) -> BalanceTransactionService:
    return BalanceTransactionService(
        repo=transaction_repo,
        balance_service=balance_service,
        money_balance=money_balance,
        max_attempts=2,
    )
