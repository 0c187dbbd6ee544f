from fastapi import Request

from storefront.services.order_service import OrderService


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def get_settings(request: Request):
    return request.app.state.settings
