from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from storefront.constants.order_status import (
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
)


class DeliveryAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    street: str
    city: str
    state: str
    zip_code: str = Field(alias="zipCode")


class OrderItemCreate(BaseModel):
    # accepts the cart shape sent by the storefront (name/price/image)
    model_config = ConfigDict(populate_by_name=True)

    product_name: str = Field(alias="name", min_length=1)
    product_price: Decimal = Field(alias="price", ge=0)
    quantity: int = Field(gt=0)
    product_image: Optional[str] = Field(default=None, alias="image")


class OrderCreate(BaseModel):
    customer_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(min_length=1)
    payment_method: PaymentMethod
    order_type: OrderType = OrderType.pickup
    delivery_address: Optional[DeliveryAddress] = None
    delivery_instructions: Optional[str] = None
    items: List[OrderItemCreate]

    @model_validator(mode="after")
    def check_delivery_address(self):
        if self.order_type == OrderType.delivery and self.delivery_address is None:
            raise ValueError("delivery_address is required for delivery orders")
        if self.order_type == OrderType.pickup:
            self.delivery_address = None
            self.delivery_instructions = None
        return self


class OrderCreated(BaseModel):
    order_id: str
    order_reference: str
    total_amount: float
    expires_at: datetime


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_name: str
    product_price: float
    quantity: int
    product_image: Optional[str] = None


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_reference: str
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    total_amount: float
    customer_name: str
    customer_email: str
    customer_phone: str
    order_type: OrderType
    delivery_address: Optional[dict] = None
    delivery_instructions: Optional[str] = None
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead] = []
    seconds_remaining: Optional[int] = None


class PaymentStatusUpdate(BaseModel):
    order_reference: str
    payment_status: PaymentStatus
    status: Optional[OrderStatus] = None


class PaymentUpdateResult(BaseModel):
    updated: bool
    order: OrderRead


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class ExpiredOrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_reference: str
    customer_name: str
    customer_email: Optional[str] = None


class SweepSummary(BaseModel):
    cancelled_count: int = 0
    notified_count: int = 0
    cancelled_orders: List[ExpiredOrderSummary] = []


class OrderPage(BaseModel):
    total_items: int
    total_pages: int
    page: int
    limit: int
    results: List[OrderRead]


class OrderEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_type: str
    label: str
    meta: Optional[dict] = None
    created_by: str
    created_at: datetime
