# storefront/services/order_event_service.py

from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from storefront.models.order_event import OrderEvent
from storefront.utils.clock import utcnow


def log_order_event(
    session: Session,
    order_id: str,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
    created_at: Optional[datetime] = None,
):
    """
    Append-only event log for the order timeline.

    Added to the caller's session so the event commits together with the
    transition it describes. ``created_at`` should be the transition's own
    timestamp so the timeline matches ``orders.updated_at``.
    """

    event = OrderEvent(
        order_id=order_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=created_at or utcnow(),
    )

    session.add(event)


def list_order_events(session: Session, order_id: str):
    return session.exec(
        select(OrderEvent)
        .where(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at, OrderEvent.id)
    ).all()
