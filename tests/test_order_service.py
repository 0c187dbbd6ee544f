from datetime import timedelta

import pytest
from pydantic import ValidationError
from sqlmodel import Session, select

from storefront.constants.order_status import OrderStatus, PaymentStatus
from storefront.exceptions import (
    InvalidTransitionError,
    OrderNotFoundError,
    OrderValidationError,
    StoreUnavailableError,
)
from storefront.models import OrderEvent, OrderItem
from storefront.schemas.order_schemas import OrderCreate

from tests.conftest import ADMIN_EMAIL, order_payload


def test_new_order_is_pending_and_not_swept(service, make_order, clock):
    created = make_order()

    assert created.order_reference.startswith("ORDER-")
    assert created.total_amount == 10.00
    assert created.expires_at == clock.now + timedelta(minutes=5)

    order = service.get_order(created.order_reference)
    assert order.payment_status == PaymentStatus.pending
    assert order.status == OrderStatus.pending
    assert order.seconds_remaining == 300
    assert len(order.items) == 2

    summary = service.run_expiry_sweep()
    assert summary.cancelled_count == 0
    assert service.get_order(created.order_reference).payment_status == PaymentStatus.pending


def test_empty_item_list_is_rejected_without_writing(service):
    with pytest.raises(OrderValidationError):
        service.create_order(OrderCreate(**order_payload(items=[])))

    assert service.store.select_where() == []


def test_delivery_order_requires_address():
    with pytest.raises(ValidationError):
        OrderCreate(**order_payload(order_type="delivery"))


def test_delivery_address_is_stored(service, make_order):
    address = {
        "name": "Jane Doe",
        "street": "12 Main St",
        "city": "Austin",
        "state": "TX",
        "zipCode": "78701",
    }
    created = make_order(
        order_type="delivery",
        delivery_address=address,
        delivery_instructions="Leave at the door",
    )

    order = service.get_order(created.order_reference)
    assert order.delivery_address == address
    assert order.delivery_instructions == "Leave at the door"


def test_order_references_are_unique(make_order):
    references = {make_order().order_reference for _ in range(20)}
    assert len(references) == 20


def test_items_are_a_snapshot_of_the_cart(service, make_order):
    created = make_order()
    items = service.get_order(created.order_reference).items

    assert [(i.product_name, i.product_price, i.quantity) for i in items] == [
        ("Chocolate Chip Cookie", 2.50, 2),
        ("Sugar Cookie", 5.00, 1),
    ]


def test_order_survives_item_insert_failure(service, make_order, monkeypatch):
    def broken_insert(order_id, items):
        raise StoreUnavailableError("order_items unavailable")

    monkeypatch.setattr(service.store, "insert_items", broken_insert)

    created = make_order()

    order = service.get_order(created.order_reference)
    assert order.items == []
    assert order.payment_status == PaymentStatus.pending


def test_unreachable_store_fails_creation(service, monkeypatch):
    def broken_insert(order, event=None):
        raise StoreUnavailableError("connection refused")

    monkeypatch.setattr(service.store, "insert_order", broken_insert)

    with pytest.raises(StoreUnavailableError):
        service.create_order(OrderCreate(**order_payload()))


def test_creation_sends_customer_and_admin_emails(make_order, notifier):
    created = make_order()

    assert notifier.subjects_to("jane@example.com") == [
        f"Order Confirmation - {created.order_reference}"
    ]
    assert notifier.subjects_to((ADMIN_EMAIL,)) == [
        f"New Order Received - {created.order_reference}"
    ]
    html = notifier.sent[0][2]
    assert created.order_reference in html
    assert "$10.00" in html
    assert "5 minutes" in html


def test_email_failure_does_not_fail_creation(service, make_order, notifier):
    notifier.raise_for.add("jane@example.com")

    created = make_order()

    assert service.get_order(created.order_reference).payment_status == PaymentStatus.pending


def test_unknown_reference_is_not_found(service):
    with pytest.raises(OrderNotFoundError):
        service.get_order("ORDER-0-MISSING")


def test_mark_paid_then_sweep_leaves_order_paid(service, make_order, clock, notifier):
    created = make_order()

    result = service.update_payment_status(created.order_reference, PaymentStatus.paid)
    assert result.updated is True
    assert result.order.payment_status == PaymentStatus.paid
    assert notifier.subjects_to("jane@example.com")[-1] == (
        f"Payment Received - {created.order_reference}"
    )

    clock.advance(minutes=10)
    summary = service.run_expiry_sweep()

    assert summary.cancelled_count == 0
    order = service.get_order(created.order_reference)
    assert order.payment_status == PaymentStatus.paid
    assert order.status == OrderStatus.pending


def test_payment_after_expiry_does_not_overwrite(service, make_order, clock, notifier):
    created = make_order()
    clock.advance(minutes=6)
    service.run_expiry_sweep()

    result = service.update_payment_status(created.order_reference, PaymentStatus.paid)

    assert result.updated is False
    assert result.order.payment_status == PaymentStatus.expired
    assert result.order.status == OrderStatus.cancelled
    assert not any(
        subject.startswith("Payment Received")
        for subject in notifier.subjects_to("jane@example.com")
    )


def test_repeated_paid_update_is_a_noop(service, make_order, notifier):
    created = make_order()

    first = service.update_payment_status(created.order_reference, PaymentStatus.paid)
    second = service.update_payment_status(created.order_reference, PaymentStatus.paid)

    assert first.updated is True
    assert second.updated is False
    payment_emails = [
        s for s in notifier.subjects_to("jane@example.com") if s.startswith("Payment Received")
    ]
    assert len(payment_emails) == 1


def test_paid_update_can_confirm_the_order(service, make_order):
    created = make_order()

    result = service.update_payment_status(
        created.order_reference, PaymentStatus.paid, OrderStatus.confirmed
    )

    assert result.order.status == OrderStatus.confirmed


def test_paid_update_rejects_cancelled_status(service, make_order):
    created = make_order()

    with pytest.raises(OrderValidationError):
        service.update_payment_status(
            created.order_reference, PaymentStatus.paid, OrderStatus.cancelled
        )


def test_manual_expiry_always_cancels(service, make_order):
    created = make_order()

    result = service.update_payment_status(created.order_reference, PaymentStatus.expired)

    assert result.order.payment_status == PaymentStatus.expired
    assert result.order.status == OrderStatus.cancelled


def test_update_back_to_pending_is_rejected(service, make_order):
    created = make_order()

    with pytest.raises(OrderValidationError):
        service.update_payment_status(created.order_reference, PaymentStatus.pending)


def test_update_unknown_reference_is_not_found(service):
    with pytest.raises(OrderNotFoundError):
        service.update_payment_status("ORDER-0-MISSING", PaymentStatus.paid)


def test_fulfillment_moves_forward_for_paid_orders(service, make_order):
    created = make_order()
    service.update_payment_status(created.order_reference, PaymentStatus.paid)

    for status in (OrderStatus.confirmed, OrderStatus.preparing, OrderStatus.ready, OrderStatus.delivered):
        order = service.update_order_status(created.order_reference, status)
        assert order.status == status

    with pytest.raises(InvalidTransitionError):
        service.update_order_status(created.order_reference, OrderStatus.preparing)


def test_fulfillment_requires_payment(service, make_order):
    created = make_order()

    with pytest.raises(InvalidTransitionError):
        service.update_order_status(created.order_reference, OrderStatus.confirmed)


def test_list_orders_filters_by_payment_status(service, make_order, clock):
    paid = make_order()
    service.update_payment_status(paid.order_reference, PaymentStatus.paid)
    clock.advance(seconds=1)
    make_order()

    page = service.list_orders(payment_status=PaymentStatus.pending)
    assert page.total_items == 1

    page = service.list_orders()
    assert page.total_items == 2
    assert page.results[0].created_at > page.results[1].created_at


def test_transitions_are_recorded_as_events(service, make_order, engine):
    created = make_order()
    service.update_payment_status(created.order_reference, PaymentStatus.paid)

    events = service.get_order_events(created.order_reference)
    assert [e.event_type for e in events] == ["order_placed", "payment_received"]

    with Session(engine) as session:
        assert len(session.exec(select(OrderItem)).all()) == 2
        assert len(session.exec(select(OrderEvent)).all()) == 2


def test_events_use_the_transition_time(service, make_order, clock):
    created = make_order()
    clock.advance(minutes=2)
    service.update_payment_status(created.order_reference, PaymentStatus.paid)

    order = service.get_order(created.order_reference)
    placed, paid = service.get_order_events(created.order_reference)

    assert placed.created_at == order.created_at
    assert paid.created_at == order.updated_at == clock.now
