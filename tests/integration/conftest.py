"""Integration-test fixtures.

Requires running PostgreSQL with migrations applied (alembic upgrade head).
Tests are skipped when the database in settings.DATABASE_URL is unreachable.

Every test gets a fresh user and merchant account, so rows left behind by
earlier runs never match. balance_transactions is append-only, so nothing is
cleaned up.
"""

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from config.settings import settings


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory on a NullPool engine so no connection outlives the test's loop."""
    engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM balances LIMIT 1"))
    except (OSError, DBAPIError) as exc:
        await engine.dispose()
        pytest.skip(f"PostgreSQL with migrated schema not available: {exc}")
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def seller(session_factory: async_sessionmaker[AsyncSession]) -> tuple[str, str]:
    """(user_id, merchant_account_id) of a seller with their own merchant account."""
    uid = uuid.uuid4().hex[:12]
    user_id = f"user-{uid}"
    merchant_account_id = f"ma-{uid}"
    async with session_factory() as db:
        await db.execute(
            text(
                "INSERT INTO merchant_accounts (id, user_id, currency) "
                "VALUES (:id, :user_id, 'cad')"
            ),
            {"id": merchant_account_id, "user_id": user_id},
        )
        await db.commit()
    return user_id, merchant_account_id
