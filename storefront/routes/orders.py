from fastapi import APIRouter, BackgroundTasks, Depends

from storefront.dependencies.guards import require_admin_key
from storefront.dependencies.services import get_order_service
from storefront.exceptions import OrderError
from storefront.routes.errors import http_error
from storefront.schemas.order_schemas import OrderCreate, PaymentStatusUpdate
from storefront.services.order_service import OrderService

router = APIRouter()


@router.post("/create-order")
def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    service: OrderService = Depends(get_order_service),
):
    try:
        created = service.create_order(payload, schedule=background_tasks.add_task)
    except OrderError as e:
        raise http_error(e)

    return {
        "success": True,
        "order_id": created.order_id,
        "order_reference": created.order_reference,
        "total_amount": created.total_amount,
        "expires_at": created.expires_at,
        "message": "Order created successfully",
    }


@router.post("/update-payment-status", dependencies=[Depends(require_admin_key)])
def update_payment_status(
    payload: PaymentStatusUpdate,
    background_tasks: BackgroundTasks,
    service: OrderService = Depends(get_order_service),
):
    try:
        result = service.update_payment_status(
            payload.order_reference,
            payload.payment_status,
            payload.status,
            schedule=background_tasks.add_task,
        )
    except OrderError as e:
        raise http_error(e)

    message = (
        "Payment status updated successfully" if result.updated
        else f"Order already {result.order.payment_status.value}, no change made"
    )
    return {
        "success": True,
        "updated": result.updated,
        "order": result.order,
        "message": message,
    }


@router.get("/order/{order_reference}")
def get_order(
    order_reference: str,
    service: OrderService = Depends(get_order_service),
):
    try:
        order = service.get_order(order_reference)
    except OrderError as e:
        raise http_error(e)

    return {"success": True, "order": order}
