"""
Database configuration and session management with SQLAlchemy.

Uses async SQLAlchemy for non-blocking database operations.
Every evaluated transaction is persisted as a row in the orders table.

Design Decisions:
- AsyncSession for non-blocking operations
- Database objects are created by the caller and passed in, never held
  as module state
- Explicit transaction management: repositories stage rows, callers commit
- Sessions always closed, rolled back on error
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncGenerator, Iterable

from sqlalchemy import Date, Double, Integer, Text, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from discount_engine.domain.models import OrderRecord

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class Order(Base):
    """
    An evaluated transaction with its applied discount and final price.

    Prices and the discount are stored as double precision, unrounded, so a
    stored row reads back exactly as it was evaluated.
    """
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_date: Mapped[date] = mapped_column(Date)
    product_name: Mapped[str] = mapped_column(Text)
    expiry_date: Mapped[date] = mapped_column(Date)
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[float] = mapped_column(Double)
    discount: Mapped[float] = mapped_column(Double)
    final_price: Mapped[float] = mapped_column(Double)

    @classmethod
    def from_record(cls, record: OrderRecord) -> "Order":
        return cls(
            order_date=record.order_date,
            product_name=record.product_name,
            expiry_date=record.expiry_date,
            quantity=record.quantity,
            unit_price=record.unit_price,
            discount=record.discount,
            final_price=record.final_price,
        )


class Database:
    """
    Async engine plus session factory for one database URL.

    Usage:
        database = Database(settings.database_url)
        try:
            await database.init_db()
            async with database.session() as session:
                ...
        finally:
            await database.close()
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Database engine created for {self.engine.url.host or self.engine.url.database}")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a database session.

        Usage:
            async with database.session() as session:
                session.add(record)
                await session.commit()
        """
        session = self.session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def init_db(self) -> None:
        """
        Create the orders table if it does not exist.

        In production, use Alembic migrations instead.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables initialized")

    async def close(self) -> None:
        """Dispose of pooled connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")


class OrderRepository:
    """Stages and reads orders within a caller-owned session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, record: OrderRecord) -> None:
        self.session.add(Order.from_record(record))

    async def add_many(self, records: Iterable[OrderRecord]) -> None:
        self.session.add_all([Order.from_record(r) for r in records])

    async def commit(self) -> None:
        await self.session.commit()

    async def list_orders(self) -> list[Order]:
        """All persisted orders in insertion order."""
        result = await self.session.execute(select(Order).order_by(Order.id))
        return list(result.scalars().all())
