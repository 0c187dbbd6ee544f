from .events import OrderEvent
from .dispatcher import NotificationDispatcher

__all__ = [
    "OrderEvent",
    "NotificationDispatcher",
]
