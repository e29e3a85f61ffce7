"""BalanceRepository — concrete implementation of BalanceRepositoryProtocol.

Amount changes use a conditional UPDATE ... WHERE state = 'unpaid' RETURNING.
A result of 0 rows means the balance left the unpaid state after it was selected.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back the session.
"""

from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_balance.domain.models import Balance
from src.bl_common.enums import BalanceState

_BALANCE_COLUMNS = """
    id, user_id, merchant_account_id, date, state,
    currency, amount_cents, holding_currency, holding_amount_cents,
    reopened_at, created_at, updated_at
"""

# Serializes reconciliation per (user, merchant account) until the transaction ends
_LOCK_SQL = text("SELECT pg_advisory_xact_lock(hashtextextended(:lock_key, 0))")

_LIST_UNPAID_FOR_UPDATE_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM balances
    WHERE user_id = :user_id
      AND merchant_account_id = :merchant_account_id
      AND state = 'unpaid'
      AND (CAST(:currency AS VARCHAR) IS NULL OR currency = :currency)
      AND (CAST(:holding_currency AS VARCHAR) IS NULL OR holding_currency = :holding_currency)
    ORDER BY date ASC, id ASC
    FOR UPDATE
""")

_INSERT_UNPAID_SQL = text(f"""
    INSERT INTO balances
        (user_id, merchant_account_id, date, state,
         currency, amount_cents, holding_currency, holding_amount_cents)
    VALUES
        (:user_id, :merchant_account_id, :date, 'unpaid',
         :currency, 0, :holding_currency, 0)
    ON CONFLICT DO NOTHING
    RETURNING {_BALANCE_COLUMNS}
""")

_ADD_AMOUNTS_SQL = text(f"""
    UPDATE balances
    SET amount_cents         = amount_cents + :amount_cents,
        holding_amount_cents = holding_amount_cents + :holding_amount_cents,
        updated_at = NOW()
    WHERE id = :balance_id AND state = 'unpaid'
    RETURNING {_BALANCE_COLUMNS}
""")

_GET_BALANCE_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM balances
    WHERE id = :balance_id
""")

# Moving back to unpaid stamps reopened_at, which takes the row out of
# uq_balances_unpaid_per_day so it can sit beside a newer unpaid row
_TRANSITION_SQL = text(f"""
    UPDATE balances
    SET state = CAST(:to_state AS VARCHAR),
        reopened_at = CASE WHEN CAST(:to_state AS VARCHAR) = 'unpaid'
                           THEN NOW() ELSE reopened_at END,
        updated_at = NOW()
    WHERE id = :balance_id
      AND state = ANY(CAST(:from_states AS VARCHAR[]))
    RETURNING {_BALANCE_COLUMNS}
""")

_FORFEIT_SQL = text(f"""
    UPDATE balances
    SET state = 'forfeited',
        updated_at = NOW()
    WHERE user_id = :user_id AND state = 'unpaid'
    RETURNING {_BALANCE_COLUMNS}
""")

_UNPAID_FILTERS = """
    WHERE b.user_id = :user_id
      AND b.state = 'unpaid'
      AND (CAST(:up_to AS DATE) IS NULL OR b.date <= :up_to)
      AND (CAST(:held_by_platform AS BOOLEAN) IS NULL
           OR (ma.user_id IS NULL) = :held_by_platform)
"""

_SUM_UNPAID_AMOUNT_SQL = text(f"""
    SELECT COALESCE(SUM(b.amount_cents), 0)
    FROM balances b
    JOIN merchant_accounts ma ON ma.id = b.merchant_account_id
    {_UNPAID_FILTERS}
""")

_SUM_UNPAID_HOLDING_AMOUNT_SQL = text(f"""
    SELECT COALESCE(SUM(b.holding_amount_cents), 0)
    FROM balances b
    JOIN merchant_accounts ma ON ma.id = b.merchant_account_id
    {_UNPAID_FILTERS}
""")

_SUM_UNPAID_BY_CURRENCY_SQL = text(f"""
    SELECT b.currency, COALESCE(SUM(b.amount_cents), 0) AS cents
    FROM balances b
    JOIN merchant_accounts ma ON ma.id = b.merchant_account_id
    {_UNPAID_FILTERS}
    GROUP BY b.currency
    ORDER BY b.currency
""")

_LIST_UNPAID_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM balances
    WHERE user_id = :user_id
      AND state = 'unpaid'
      AND (CAST(:up_to AS DATE) IS NULL OR date <= :up_to)
    ORDER BY date ASC, id ASC
""")


def _row_to_balance(row: object) -> Balance:
    return Balance(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        merchant_account_id=row.merchant_account_id,  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        state=row.state,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        holding_currency=row.holding_currency,  # type: ignore[attr-defined]
        holding_amount_cents=row.holding_amount_cents,  # type: ignore[attr-defined]
        reopened_at=row.reopened_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def lock_key_for(user_id: str, merchant_account_id: str) -> str:
    return f"balances:{user_id}:{merchant_account_id}"


class BalanceRepository:
    """Concrete repository — all mutations atomic at the SQL level."""

    async def lock_user_merchant_account(
        self, db: AsyncSession, user_id: str, merchant_account_id: str
    ) -> None:
        await db.execute(
            _LOCK_SQL, {"lock_key": lock_key_for(user_id, merchant_account_id)}
        )

    async def list_unpaid_balances_for_update(
        self,
        db: AsyncSession,
        user_id: str,
        merchant_account_id: str,
        currency: str | None,
        holding_currency: str | None,
    ) -> list[Balance]:
        result = await db.execute(
            _LIST_UNPAID_FOR_UPDATE_SQL,
            {
                "user_id": user_id,
                "merchant_account_id": merchant_account_id,
                "currency": currency,
                "holding_currency": holding_currency,
            },
        )
        return [_row_to_balance(row) for row in result.fetchall()]

    async def create_unpaid_balance(
        self,
        db: AsyncSession,
        user_id: str,
        merchant_account_id: str,
        currency: str,
        holding_currency: str,
        on_date: date,
    ) -> Balance | None:
        result = await db.execute(
            _INSERT_UNPAID_SQL,
            {
                "user_id": user_id,
                "merchant_account_id": merchant_account_id,
                "date": on_date,
                "currency": currency,
                "holding_currency": holding_currency,
            },
        )
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def add_amounts(
        self,
        db: AsyncSession,
        balance_id: int,
        amount_cents: int,
        holding_amount_cents: int,
    ) -> Balance | None:
        result = await db.execute(
            _ADD_AMOUNTS_SQL,
            {
                "balance_id": balance_id,
                "amount_cents": amount_cents,
                "holding_amount_cents": holding_amount_cents,
            },
        )
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def get_balance(self, db: AsyncSession, balance_id: int) -> Balance | None:
        result = await db.execute(_GET_BALANCE_SQL, {"balance_id": balance_id})
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def transition_state(
        self,
        db: AsyncSession,
        balance_id: int,
        from_states: list[str],
        to_state: str,
    ) -> Balance | None:
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "balance_id": balance_id,
                "from_states": from_states,
                "to_state": BalanceState(to_state).value,
            },
        )
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def forfeit_unpaid_balances(
        self, db: AsyncSession, user_id: str
    ) -> list[Balance]:
        result = await db.execute(_FORFEIT_SQL, {"user_id": user_id})
        return [_row_to_balance(row) for row in result.fetchall()]

    async def sum_unpaid_amount_cents(
        self,
        db: AsyncSession,
        user_id: str,
        up_to: date | None = None,
        held_by_platform: bool | None = None,
    ) -> int:
        result = await db.execute(
            _SUM_UNPAID_AMOUNT_SQL,
            {"user_id": user_id, "up_to": up_to, "held_by_platform": held_by_platform},
        )
        return int(result.scalar_one())

    async def sum_unpaid_holding_amount_cents(
        self,
        db: AsyncSession,
        user_id: str,
        up_to: date | None = None,
        held_by_platform: bool | None = None,
    ) -> int:
        result = await db.execute(
            _SUM_UNPAID_HOLDING_AMOUNT_SQL,
            {"user_id": user_id, "up_to": up_to, "held_by_platform": held_by_platform},
        )
        return int(result.scalar_one())

    async def list_unpaid_balances(
        self, db: AsyncSession, user_id: str, up_to: date | None = None
    ) -> list[Balance]:
        result = await db.execute(_LIST_UNPAID_SQL, {"user_id": user_id, "up_to": up_to})
        return [_row_to_balance(row) for row in result.fetchall()]

    async def sum_unpaid_amount_cents_by_currency(
        self,
        db: AsyncSession,
        user_id: str,
        held_by_platform: bool | None = None,
    ) -> dict[str, int]:
        result = await db.execute(
            _SUM_UNPAID_BY_CURRENCY_SQL,
            {"user_id": user_id, "up_to": None, "held_by_platform": held_by_platform},
        )
        return {row.currency: int(row.cents) for row in result.fetchall()}
