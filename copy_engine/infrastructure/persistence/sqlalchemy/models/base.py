"""SQLAlchemy Base model."""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

# BIGINT in production; SQLite only autoincrements INTEGER PRIMARY KEY
BigIntId = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all ORM models (SQLAlchemy 2.0 declarative mapping)."""

    pass
