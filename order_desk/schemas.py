"""
Pydantic Schemas for Request/Response Validation

Order payloads are deliberately loose: fields are only checked for type,
the presence of items is checked by the submission service, and everything
else (menu item existence, price sanity) is left to the database.

Author: Order Desk Team
Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderItemCreate(BaseModel):
    """Single line in an order."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    menu_item_id: Optional[int] = Field(None, examples=[5])
    customer_id: Optional[str] = Field(None, examples=["C1"])
    quantity: Optional[int] = Field(None, examples=[2])
    unit_price: Optional[float] = Field(None, examples=[12.50])
    total_price: Optional[float] = Field(None, examples=[25.00])
    spicy_level: Optional[int] = Field(None, examples=[2])
    protein_choice: Optional[str] = Field(None, examples=["Chicken"])
    special_notes: Optional[str] = Field(None, examples=["No peanuts"])


class OrderCreate(BaseModel):
    """Request schema for placing an order from a table.

    Fields are type-checked only: a value of the wrong type (e.g.
    ``quantity: 2.5``) is rejected as 400 "Invalid request body" before it
    reaches the database. Presence of ``items`` is checked by the service.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    items: Optional[List[OrderItemCreate]] = None
    session_id: Optional[str] = Field(None, examples=["S1718000000000"])
    table_id: Optional[int] = Field(None, examples=[4])
    queue_number: Optional[str] = Field(None, examples=["A12"])
    special_instructions: Optional[str] = Field(None, examples=["Birthday table"])


class UserRegister(BaseModel):
    """Staff registration payload."""
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderCreateResponse(BaseModel):
    """Response after successfully creating an order."""
    order_id: int
    order_number: str


class UserRegisterResponse(BaseModel):
    """Response after registering a staff account."""
    id: int
    username: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
