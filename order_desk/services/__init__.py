"""
                        Services Module

Business logic behind the HTTP routes. Each service receives the store
handle it works with instead of importing a global pool.

Services:
    - orders: atomic order submission
    - menu: menu and active-order reads
    - staff: staff account registration
"""

from order_desk.services.errors import (
    InvalidRequest,
    OrderServiceError,
    PersistenceFailure,
)
from order_desk.services.orders import OrderReceipt, OrderSubmissionService
from order_desk.services.staff import StaffAccountService

__all__ = [
    "OrderServiceError",
    "InvalidRequest",
    "PersistenceFailure",
    "OrderReceipt",
    "OrderSubmissionService",
    "StaffAccountService",
]
