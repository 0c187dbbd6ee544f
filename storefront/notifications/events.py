from enum import Enum


class OrderEvent(str, Enum):
    ORDER_PLACED = "order_placed"
    PAYMENT_RECEIVED = "payment_received"
    ORDER_EXPIRED = "order_expired"
    STATUS_CHANGED = "status_changed"
