from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON

from storefront.models.types import UTCDateTime
from storefront.utils.clock import utcnow


class OrderEvent(SQLModel, table=True):
    __tablename__ = "order_events"
    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: str = Field(foreign_key="orders.id", index=True)
    event_type: str = Field(index=True)

    label: str
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    created_by: str = Field(default="system")
