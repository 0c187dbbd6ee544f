from fastapi import APIRouter, Depends

from storefront.dependencies.services import get_order_service
from storefront.exceptions import StoreUnavailableError
from storefront.services.order_service import OrderService
from storefront.utils.clock import utcnow

router = APIRouter()


@router.get("/")
def root():
    return {"message": "Sweets by Bella Backend API"}


@router.get("/health")
def health_check(service: OrderService = Depends(get_order_service)):
    db_status = "ok"

    try:
        service.store.ping()
    except StoreUnavailableError:
        db_status = "failed"

    return {
        "status": "OK",
        "database": db_status,
        "timestamp": utcnow().isoformat()
    }
