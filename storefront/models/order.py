from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field, Relationship

from storefront.models.order_item import OrderItem
from storefront.models.types import UTCDateTime
from storefront.utils.clock import utcnow


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    order_reference: str = Field(index=True, unique=True)

    status: str = Field(default="pending", index=True)
    payment_status: str = Field(default="pending", index=True)
    payment_method: str

    total_amount: Decimal = Field(max_digits=10, decimal_places=2)

    customer_name: str
    customer_email: str
    customer_phone: str

    order_type: str = Field(default="pickup")
    delivery_address: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    delivery_instructions: Optional[str] = None

    # set once at creation, never recomputed
    expires_at: datetime = Field(sa_type=UTCDateTime, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"order_by": "OrderItem.id"},
    )
