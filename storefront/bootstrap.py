import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.engine import Engine

from storefront.config import Settings
from storefront.notifications import NotificationDispatcher
from storefront.repositories.order_repository import OrderStore
from storefront.services.email_service import EmailNotifier
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_order_service(
    settings: Settings,
    engine: Engine,
    notifier: Optional[EmailNotifier] = None,
) -> OrderService:
    """Wire store, notifier and dispatcher for one process."""
    notifier = notifier or EmailNotifier(
        api_key=settings.BREVO_API_KEY,
        mail_from=settings.MAIL_FROM,
        store_name=settings.STORE_NAME,
    )
    if not notifier.configured:
        logger.warning("BREVO_API_KEY not set, order emails are disabled")

    dispatcher = NotificationDispatcher(
        notifier,
        store_name=settings.STORE_NAME,
        contact_email=settings.CONTACT_EMAIL,
        payment_window_minutes=settings.PAYMENT_WINDOW_MINUTES,
        admin_emails=settings.ADMIN_EMAILS,
        payment_handles={
            "zelle": settings.ZELLE_HANDLE,
            "cashapp": settings.CASHAPP_HANDLE,
        },
    )

    return OrderService(
        store=OrderStore(engine),
        dispatcher=dispatcher,
        payment_window=timedelta(minutes=settings.PAYMENT_WINDOW_MINUTES),
    )
