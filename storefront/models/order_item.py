from datetime import datetime
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from sqlmodel import SQLModel, Field, Relationship

from storefront.models.types import UTCDateTime
from storefront.utils.clock import utcnow

if TYPE_CHECKING:
    from storefront.models.order import Order


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)

    # snapshot of the cart line, not a catalog reference
    product_name: str
    product_price: Decimal = Field(max_digits=10, decimal_places=2)
    quantity: int
    product_image: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    order: Optional["Order"] = Relationship(back_populates="items")
