from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    ready = "ready"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    expired = "expired"


class PaymentMethod(str, Enum):
    zelle = "zelle"
    cashapp = "cashapp"


class OrderType(str, Enum):
    pickup = "pickup"
    delivery = "delivery"


# Fulfillment moves for paid orders; cancellation only comes from payment expiry
ALLOWED_TRANSITIONS = {
    "pending": ["confirmed", "preparing"],
    "confirmed": ["preparing"],
    "preparing": ["ready"],
    "ready": ["delivered"],
    "delivered": [],
    "cancelled": []
}
