"""
FastAPI dependencies for database and trace log access.

Override these in tests through app.dependency_overrides.
"""

import logging
from collections.abc import AsyncGenerator, Iterator

from fastapi import HTTPException, Request, status

from discount_engine.config import Settings, get_settings
from discount_engine.infrastructure.database import Database, OrderRepository
from discount_engine.logging_config import trace_log


def get_database(request: Request) -> Database:
    """Database created by the application lifespan."""
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not available",
        )
    return database


async def get_order_repository(request: Request) -> AsyncGenerator[OrderRepository, None]:
    """Repository bound to a session that lives for the request."""
    database = get_database(request)
    async with database.session() as session:
        yield OrderRepository(session)


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_trace_logger(request: Request) -> Iterator[logging.Logger]:
    """Trace logger writing to the configured file for the request."""
    with trace_log(get_app_settings(request).trace_log_path) as trace:
        yield trace
