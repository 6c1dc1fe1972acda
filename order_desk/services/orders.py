"""
Order Submission Service

Writes one order and all of its lines as a single transaction:

    1. INSERT the order header with a zero total
    2. INSERT each line, in the order the client sent them
    3. UPDATE the header total to the sum of the line totals
    4. COMMIT

Any failure after the session is opened rolls everything back, so readers of
the active orders board never see a header without its lines or a header
whose total disagrees with them.

Known gaps (tracked, not handled here):
    - menu item existence, price sanity and quantity bounds are not checked
    - order numbers are not re-checked for collisions; a duplicate is only
      caught by the unique constraint on ``orders.order_number`` and is not
      retried
"""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from order_desk.core.config import OrderDefaults
from order_desk.database import Database
from order_desk.models import Order, OrderItem
from order_desk.schemas import OrderCreate, OrderItemCreate
from order_desk.services.errors import InvalidRequest, PersistenceFailure

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "ORD-"


@dataclass(frozen=True)
class OrderReceipt:
    """What the caller gets back for a stored order."""
    order_id: int
    order_number: str


class OrderSubmissionService:
    """
    Persists orders through an injected store handle.

    Args:
        database: Store handle providing one session per submission
        defaults: Fallbacks for fields the client left out
        token_factory: Source of random unique tokens for order numbers
        clock: Returns the current time in seconds, used for session ids
        trust_client_totals: Keep a client-sent line ``total_price`` instead
            of recomputing it from unit price and quantity
    """

    def __init__(
        self,
        database: Database,
        defaults: Optional[OrderDefaults] = None,
        token_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        clock: Callable[[], float] = time.time,
        trust_client_totals: bool = True,
    ):
        self.database = database
        self.defaults = defaults or OrderDefaults()
        self.token_factory = token_factory
        self.clock = clock
        self.trust_client_totals = trust_client_totals

    def generate_order_number(self) -> str:
        """ORD- followed by the first 8 characters of a fresh token, uppercased."""
        token = str(self.token_factory()).split("-")[0]
        return f"{ORDER_NUMBER_PREFIX}{token.upper()}"

    def fallback_session_id(self) -> str:
        return f"{self.defaults.session_prefix}{int(self.clock() * 1000)}"

    def line_total(self, item: OrderItemCreate) -> float:
        """
        Total for one line: the client's ``total_price`` when present and
        trusted, otherwise unit price x quantity. Always rounded to cents so
        the header total is exactly the sum of the stored lines.
        """
        quantity = item.quantity or self.defaults.quantity

        if item.total_price is not None:
            if item.unit_price is not None:
                computed = round(item.unit_price * quantity, 2)
                if abs(computed - item.total_price) >= 0.01:
                    logger.warning(
                        f"Client total_price {item.total_price} for menu item "
                        f"{item.menu_item_id} differs from computed {computed}"
                    )
                    if not self.trust_client_totals:
                        return computed
            return round(float(item.total_price), 2)

        # unit_price None raises TypeError here and aborts the transaction
        return round(item.unit_price * quantity, 2)

    async def submit(self, order_data: OrderCreate) -> OrderReceipt:
        """
        Store an order and its lines atomically.

        Raises:
            InvalidRequest: ``items`` is missing or empty
            PersistenceFailure: anything went wrong while writing; nothing
                from this order is left in the database
        """
        if not order_data.items:
            raise InvalidRequest("Order must include items")

        try:
            async with self.database.session() as session:
                async with session.begin():
                    receipt = await self._write_order(session, order_data)
        except Exception as e:
            logger.exception(f"Order creation failed, transaction rolled back: {e}")
            raise PersistenceFailure("Failed to create order") from e

        logger.info(
            f"Order #{receipt.order_id} ({receipt.order_number}) created "
            f"with {len(order_data.items)} item(s)"
        )
        return receipt

    async def _write_order(self, session: AsyncSession, order_data: OrderCreate) -> OrderReceipt:
        defaults = self.defaults
        order_number = self.generate_order_number()

        order = Order(
            order_number=order_number,
            session_id=order_data.session_id or self.fallback_session_id(),
            table_id=order_data.table_id or defaults.table_id,
            total_amount=0.0,
            queue_number=order_data.queue_number or defaults.queue_number,
            special_instructions=order_data.special_instructions or None,
        )
        session.add(order)
        await session.flush()

        order_total = 0.0
        for item in order_data.items:
            total_price = self.line_total(item)
            order_total += total_price
            session.add(OrderItem(
                order_id=order.id,
                customer_id=item.customer_id or None,
                menu_item_id=item.menu_item_id,
                quantity=item.quantity or defaults.quantity,
                unit_price=item.unit_price,
                total_price=total_price,
                spicy_level=item.spicy_level or defaults.spicy_level,
                protein_choice=item.protein_choice or defaults.protein_choice,
                special_notes=item.special_notes or None,
            ))
            # One INSERT per line keeps the client's ordering
            await session.flush()

        order.total_amount = round(order_total, 2)
        await session.flush()

        return OrderReceipt(order_id=order.id, order_number=order_number)
