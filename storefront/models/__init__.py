from storefront.models.order_item import OrderItem
from storefront.models.order import Order
from storefront.models.order_event import OrderEvent

__all__ = ["Order", "OrderItem", "OrderEvent"]
