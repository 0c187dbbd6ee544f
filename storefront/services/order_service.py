import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from storefront.constants.order_status import (
    ALLOWED_TRANSITIONS,
    OrderStatus,
    PaymentStatus,
)
from storefront.exceptions import (
    InvalidTransitionError,
    OrderNotFoundError,
    OrderValidationError,
    StoreUnavailableError,
)
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.notifications import NotificationDispatcher, OrderEvent
from storefront.repositories.order_repository import OrderStore
from storefront.schemas.order_schemas import (
    ExpiredOrderSummary,
    OrderCreate,
    OrderCreated,
    OrderEventRead,
    OrderPage,
    OrderRead,
    PaymentUpdateResult,
    SweepSummary,
)
from storefront.utils.clock import utcnow
from storefront.utils.order_reference import generate_order_reference

logger = logging.getLogger(__name__)

# Optional deferral hook, e.g. BackgroundTasks.add_task
Scheduler = Callable[..., None]

PAID_STATUSES = {OrderStatus.pending, OrderStatus.confirmed}


class OrderService:
    """
    Order payment lifecycle.

    An order is created ``pending`` with a fixed ``expires_at``. It then
    reaches exactly one terminal payment state: ``paid`` through
    ``update_payment_status`` or ``expired`` through ``run_expiry_sweep``.
    Both paths write with ``payment_status = 'pending'`` in the UPDATE
    predicate, so the database decides which one wins.
    """

    def __init__(
        self,
        store: OrderStore,
        dispatcher: NotificationDispatcher,
        payment_window: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.payment_window = payment_window
        self.clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def create_order(
        self,
        payload: OrderCreate,
        schedule: Optional[Scheduler] = None,
    ) -> OrderCreated:
        if not payload.items:
            raise OrderValidationError("Order must contain at least one item")

        now = self.clock()
        total = sum(
            (item.product_price * item.quantity for item in payload.items),
            Decimal("0"),
        ).quantize(Decimal("0.01"))

        order = Order(
            order_reference=generate_order_reference(now),
            status=OrderStatus.pending.value,
            payment_status=PaymentStatus.pending.value,
            payment_method=payload.payment_method.value,
            total_amount=total,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            customer_phone=payload.customer_phone,
            order_type=payload.order_type.value,
            delivery_address=(
                payload.delivery_address.model_dump(by_alias=True)
                if payload.delivery_address else None
            ),
            delivery_instructions=payload.delivery_instructions,
            expires_at=now + self.payment_window,
            created_at=now,
            updated_at=now,
        )

        order = self.store.insert_order(order, event={
            "event_type": OrderEvent.ORDER_PLACED.value,
            "label": "Order placed",
            "created_by": "customer",
            "created_at": now,
            "meta": {"total_amount": str(total), "expires_at": order.expires_at.isoformat()},
        })
        logger.info(f"Order {order.order_reference} created, expires at {order.expires_at}")

        items = [
            OrderItem(
                product_name=item.product_name,
                product_price=item.product_price,
                quantity=item.quantity,
                product_image=item.product_image,
                created_at=now,
            )
            for item in payload.items
        ]
        try:
            self.store.insert_items(order.id, items)
        except StoreUnavailableError:
            # order stays valid without items; flagged for manual reconciliation
            logger.error(
                f"Order {order.order_reference} created but its {len(items)} items "
                f"were not saved"
            )

        self._after_commit(schedule, self.notify, OrderEvent.ORDER_PLACED, order.order_reference)

        return OrderCreated(
            order_id=order.id,
            order_reference=order.order_reference,
            total_amount=float(total),
            expires_at=order.expires_at,
        )

    # ------------------------------------------------------------------
    # Payment path
    # ------------------------------------------------------------------
    def update_payment_status(
        self,
        order_reference: str,
        payment_status: PaymentStatus,
        status: Optional[OrderStatus] = None,
        schedule: Optional[Scheduler] = None,
    ) -> PaymentUpdateResult:
        payment_status = PaymentStatus(payment_status)
        if payment_status == PaymentStatus.pending:
            raise OrderValidationError("payment_status must be 'paid' or 'expired'")

        if payment_status == PaymentStatus.expired:
            if status not in (None, OrderStatus.cancelled):
                raise OrderValidationError("An expired order can only be cancelled")
            status = OrderStatus.cancelled
        elif status is not None and status not in PAID_STATUSES:
            raise OrderValidationError(f"Cannot mark a paid order as {status.value}")

        now = self.clock()
        values = {"payment_status": payment_status.value, "updated_at": now}
        if status is not None:
            values["status"] = status.value

        event_type = (
            OrderEvent.PAYMENT_RECEIVED if payment_status == PaymentStatus.paid
            else OrderEvent.ORDER_EXPIRED
        )
        rows = self.store.update_where(
            Order.order_reference == order_reference,
            Order.payment_status == PaymentStatus.pending.value,
            values=values,
            event={
                "event_type": event_type.value,
                "label": f"Payment marked {payment_status.value}",
                "created_by": "admin",
                "created_at": now,
            },
        )

        if not rows:
            order = self.store.get_by_reference(order_reference)
            if order is None:
                raise OrderNotFoundError(order_reference)
            logger.info(
                f"Payment update to {payment_status.value} ignored for "
                f"{order_reference}: already {order.payment_status}"
            )
            return PaymentUpdateResult(updated=False, order=self._to_read(order, now))

        logger.info(f"Order {order_reference} payment marked {payment_status.value}")
        self._after_commit(schedule, self.notify, event_type, order_reference)

        order = self.store.get_by_reference(order_reference)
        return PaymentUpdateResult(updated=True, order=self._to_read(order, now))

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------
    def run_expiry_sweep(self) -> SweepSummary:
        now = self.clock()

        candidates = self.store.select_where(
            Order.payment_status == PaymentStatus.pending.value,
            Order.expires_at < now,
        )
        if not candidates:
            logger.info("No expired orders found")
            return SweepSummary()

        logger.info(f"Found {len(candidates)} expired orders, cancelling...")

        # payment_status is re-asserted at write time; orders paid since the
        # read are not matched
        rows = self.store.update_where(
            Order.id.in_([order.id for order in candidates]),
            Order.payment_status == PaymentStatus.pending.value,
            values={
                "payment_status": PaymentStatus.expired.value,
                "status": OrderStatus.cancelled.value,
                "updated_at": now,
            },
            event={
                "event_type": OrderEvent.ORDER_EXPIRED.value,
                "label": "Payment window elapsed, order cancelled",
                "created_by": "cron",
                "created_at": now,
            },
        )

        cancelled = [ExpiredOrderSummary.model_validate(row) for row in rows]
        cancelled_ids = {order.id for order in cancelled}
        for order in candidates:
            if order.id not in cancelled_ids:
                logger.warning(
                    f"Order {order.order_reference} left pending state before it "
                    f"could be expired"
                )

        logger.info(f"Cancelled {len(cancelled)} expired orders")

        notified = 0
        for order in cancelled:
            if not order.customer_email:
                continue
            if self.dispatcher.dispatch(OrderEvent.ORDER_EXPIRED, order):
                notified += 1

        logger.info(f"Sent {notified} expiration emails")

        return SweepSummary(
            cancelled_count=len(cancelled),
            notified_count=notified,
            cancelled_orders=cancelled,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_order(self, order_reference: str) -> OrderRead:
        order = self.store.get_by_reference(order_reference)
        if order is None:
            raise OrderNotFoundError(order_reference)
        return self._to_read(order, self.clock())

    def list_orders(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> OrderPage:
        criteria = []
        if status:
            criteria.append(Order.status == status.value)
        if payment_status:
            criteria.append(Order.payment_status == payment_status.value)

        data = self.store.list_orders(*criteria, page=page, limit=limit)
        now = self.clock()
        data["results"] = [self._to_read(order, now) for order in data["results"]]
        return OrderPage(**data)

    def get_order_events(self, order_reference: str) -> List[OrderEventRead]:
        order = self.store.get_by_reference(order_reference)
        if order is None:
            raise OrderNotFoundError(order_reference)
        return [OrderEventRead.model_validate(e) for e in self.store.list_events(order.id)]

    # ------------------------------------------------------------------
    # Fulfillment
    # ------------------------------------------------------------------
    def update_order_status(self, order_reference: str, status: OrderStatus) -> OrderRead:
        order = self.store.get_by_reference(order_reference)
        if order is None:
            raise OrderNotFoundError(order_reference)

        status = OrderStatus(status)
        current = order.status
        if order.payment_status != PaymentStatus.paid.value:
            raise InvalidTransitionError(current, status.value)
        if status.value not in ALLOWED_TRANSITIONS.get(current, []):
            raise InvalidTransitionError(current, status.value)

        now = self.clock()
        rows = self.store.update_where(
            Order.order_reference == order_reference,
            Order.payment_status == PaymentStatus.paid.value,
            Order.status == current,
            values={"status": status.value, "updated_at": now},
            event={
                "event_type": OrderEvent.STATUS_CHANGED.value,
                "label": f"Status changed from {current} to {status.value}",
                "created_by": "admin",
                "created_at": now,
                "meta": {"from": current, "to": status.value},
            },
        )
        if not rows:
            # another admin moved it first
            latest = self.store.get_by_reference(order_reference)
            raise InvalidTransitionError(latest.status, status.value)

        logger.info(f"Order {order_reference} status {current} -> {status.value}")
        return self.get_order(order_reference)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def notify(self, event: OrderEvent, order_reference: str) -> bool:
        """Post-commit hook; reloads the order so the email reflects stored state."""
        try:
            order = self.get_order(order_reference)
        except (OrderNotFoundError, StoreUnavailableError):
            logger.exception(f"Could not load {order_reference} for {event.value} email")
            return False
        return self.dispatcher.dispatch(event, order)

    def _after_commit(self, schedule: Optional[Scheduler], fn, *args):
        if schedule is not None:
            schedule(fn, *args)
        else:
            fn(*args)

    def _to_read(self, order: Order, now: datetime) -> OrderRead:
        data = OrderRead.model_validate(order)
        if order.payment_status == PaymentStatus.pending.value:
            remaining = (order.expires_at - now).total_seconds()
            data.seconds_remaining = max(0, int(remaining))
        return data
