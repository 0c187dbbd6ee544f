class OrderError(Exception):
    """Base class for order lifecycle errors."""


class OrderValidationError(OrderError):
    pass


class OrderNotFoundError(OrderError):
    def __init__(self, order_reference: str):
        self.order_reference = order_reference
        super().__init__(f"Order {order_reference} not found")


class InvalidTransitionError(OrderError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current} to {requested}")


class StoreUnavailableError(OrderError):
    """The order store could not be reached or rejected the write."""
