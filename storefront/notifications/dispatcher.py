import logging
from typing import Dict, List, Optional

from storefront.constants.order_status import PaymentMethod
from storefront.notifications.channels import Channel
from storefront.notifications.events import OrderEvent
from storefront.notifications.rules import NOTIFICATION_RULES
from storefront.services.email_service import EmailNotifier
from storefront.utils.template import render_template

logger = logging.getLogger(__name__)

PAYMENT_METHOD_LABELS = {
    PaymentMethod.zelle.value: "Zelle",
    PaymentMethod.cashapp.value: "Cash App",
}


class NotificationDispatcher:
    """
    Central notification dispatcher.

    Runs after the state transition it reports has committed. Every channel
    is attempted independently and no failure escapes ``dispatch``.
    """

    def __init__(
        self,
        notifier: EmailNotifier,
        *,
        store_name: str,
        contact_email: str,
        payment_window_minutes: int,
        admin_emails: Optional[List[str]] = None,
        payment_handles: Optional[Dict[str, str]] = None,
    ):
        self.notifier = notifier
        self.store_name = store_name
        self.contact_email = contact_email
        self.payment_window_minutes = payment_window_minutes
        self.admin_emails = admin_emails or []
        self.payment_handles = payment_handles or {}

    def _context(self, order) -> dict:
        method = getattr(order, "payment_method", None)
        method = getattr(method, "value", method)
        return {
            "order": order,
            "store_name": self.store_name,
            "contact_email": self.contact_email,
            "payment_window_minutes": self.payment_window_minutes,
            "payment_method_label": PAYMENT_METHOD_LABELS.get(method, method),
            "payment_handle": self.payment_handles.get(method, ""),
        }

    def dispatch(self, event: OrderEvent, order) -> bool:
        """Send every email the rules attach to ``event``.

        Returns True when the customer email went out.
        """
        rules = NOTIFICATION_RULES.get(event, {})
        reference = order.order_reference
        customer_sent = False

        # -------------------------
        # CUSTOMER EMAIL
        # -------------------------
        rule = rules.get(Channel.EMAIL_CUSTOMER)
        if rule and order.customer_email:
            customer_sent = self._send(order.customer_email, rule, order)
            if customer_sent:
                logger.info(f"{event.value} email sent for {reference}")
            else:
                logger.warning(f"{event.value} email not sent for {reference}")

        # -------------------------
        # ADMIN EMAIL
        # -------------------------
        rule = rules.get(Channel.EMAIL_ADMIN)
        if rule and self.admin_emails:
            self._send(self.admin_emails, rule, order)

        return customer_sent

    def _send(self, to, rule: dict, order) -> bool:
        try:
            html = render_template(rule["template"], **self._context(order))
            result = self.notifier.send(
                to,
                rule["subject"].format(reference=order.order_reference),
                html,
            )
        except Exception:
            logger.exception(f"Email to {to} failed for {order.order_reference}")
            return False

        if not result.success:
            logger.info(f"Email to {to} failed for {order.order_reference}: {result.error}")
        return result.success
