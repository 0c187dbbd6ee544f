from fastapi import APIRouter, Depends

from storefront.dependencies.guards import require_cron_secret
from storefront.dependencies.services import get_order_service
from storefront.exceptions import OrderError
from storefront.routes.errors import http_error
from storefront.services.order_service import OrderService

router = APIRouter(dependencies=[Depends(require_cron_secret)])


def _sweep(service: OrderService):
    try:
        summary = service.run_expiry_sweep()
    except OrderError as e:
        raise http_error(e)

    if not summary.cancelled_count:
        return {
            "success": True,
            "message": "No expired orders found",
            "cancelled_count": 0,
            "emails_sent": 0,
            "cancelled_orders": [],
        }

    return {
        "success": True,
        "message": f"{summary.cancelled_count} expired orders cancelled",
        "cancelled_count": summary.cancelled_count,
        "emails_sent": summary.notified_count,
        "cancelled_orders": summary.cancelled_orders,
    }


# Called by the scheduler only, not manually
@router.post("/cancel-expired-orders")
def cancel_expired_orders(service: OrderService = Depends(get_order_service)):
    return _sweep(service)


# Vercel cron jobs send GET
@router.get("/cron/cancel-expired-orders")
def cron_cancel_expired_orders(service: OrderService = Depends(get_order_service)):
    return _sweep(service)
