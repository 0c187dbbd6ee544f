"""
Expire unpaid orders once.

Meant for a system scheduler when the HTTP cron route is not used, e.g.

    * * * * * python -m storefront.jobs.order_expiry
"""
import logging
import sys

from storefront.config import settings
from storefront.database import build_engine
from storefront.exceptions import StoreUnavailableError
from storefront.bootstrap import build_order_service, configure_logging

logger = logging.getLogger(__name__)


def expire_unpaid_orders() -> int:
    engine = build_engine(settings.database_url)
    try:
        service = build_order_service(settings, engine)
        summary = service.run_expiry_sweep()
    finally:
        engine.dispose()

    logger.info(
        f"Expired {summary.cancelled_count} unpaid orders, "
        f"{summary.notified_count} emails sent"
    )
    return summary.cancelled_count


def main() -> int:
    configure_logging(settings.LOG_LEVEL)
    try:
        expire_unpaid_orders()
    except StoreUnavailableError:
        logger.error("Expiry sweep aborted, will retry on the next run")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
