"""Declarative base shared by the ORM mirrors of the migrated tables.

Services take an AsyncSession from the caller; engines and session factories
belong to the host application.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
