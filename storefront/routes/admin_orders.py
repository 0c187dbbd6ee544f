# -------- ADMIN ORDERS --------
from typing import Optional

from fastapi import APIRouter, Depends, Query

from storefront.constants.order_status import OrderStatus, PaymentStatus
from storefront.dependencies.guards import require_admin_key
from storefront.dependencies.services import get_order_service
from storefront.exceptions import OrderError
from storefront.routes.errors import http_error
from storefront.schemas.order_schemas import OrderStatusUpdate
from storefront.services.order_service import OrderService

router = APIRouter(dependencies=[Depends(require_admin_key)])


@router.get("")
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    service: OrderService = Depends(get_order_service),
):
    try:
        return service.list_orders(
            page=page,
            limit=limit,
            status=status,
            payment_status=payment_status,
        )
    except OrderError as e:
        raise http_error(e)


@router.patch("/{order_reference}/status")
def update_order_status(
    order_reference: str,
    payload: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service),
):
    try:
        order = service.update_order_status(order_reference, payload.status)
    except OrderError as e:
        raise http_error(e)

    return {"success": True, "order": order}


@router.get("/{order_reference}/events")
def get_order_events(
    order_reference: str,
    service: OrderService = Depends(get_order_service),
):
    try:
        events = service.get_order_events(order_reference)
    except OrderError as e:
        raise http_error(e)

    return {"order_reference": order_reference, "events": events}
