"""
Read-side queries: the menu and the active orders board.

Both prefer the reporting views the database may define
(``menu_with_categories``, ``active_orders``) and fall back to querying the
tables directly when a view is not installed.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from order_desk.models import ACTIVE_ORDER_STATUSES, Category, MenuItem, Order
from order_desk.services.errors import PersistenceFailure

logger = logging.getLogger(__name__)


async def _read_view(session: AsyncSession, view_name: str) -> Optional[list[dict[str, Any]]]:
    """Rows of a reporting view, or None when the view cannot be read."""
    try:
        result = await session.execute(text(f"SELECT * FROM {view_name}"))
        return [dict(row) for row in result.mappings()]
    except SQLAlchemyError as e:
        logger.warning(f"View {view_name} unavailable, querying tables instead: {e}")
        # Postgres aborts the transaction after a failed statement
        await session.rollback()
        return None


async def fetch_menu(session: AsyncSession) -> list[dict[str, Any]]:
    """Available dishes with their category name and slug."""
    rows = await _read_view(session, "menu_with_categories")
    if rows is not None:
        return rows

    query = (
        select(
            *MenuItem.__table__.columns,
            Category.name_en.label("category_en"),
            Category.slug.label("category_slug"),
        )
        .outerjoin(Category, MenuItem.category_id == Category.id)
        .where(MenuItem.is_available.is_(True))
        .order_by(MenuItem.id)
    )
    try:
        result = await session.execute(query)
    except SQLAlchemyError as e:
        logger.exception(f"Menu query failed: {e}")
        raise PersistenceFailure("Failed to fetch menu") from e
    return [dict(row) for row in result.mappings()]


async def fetch_active_orders(session: AsyncSession) -> list[dict[str, Any]]:
    """Orders still in progress, oldest first."""
    rows = await _read_view(session, "active_orders")
    if rows is not None:
        return rows

    query = (
        select(*Order.__table__.columns)
        .where(Order.status.in_(ACTIVE_ORDER_STATUSES))
        .order_by(Order.created_at, Order.id)
    )
    try:
        result = await session.execute(query)
    except SQLAlchemyError as e:
        logger.exception(f"Active orders query failed: {e}")
        raise PersistenceFailure("Failed to fetch active orders") from e
    return [dict(row) for row in result.mappings()]
