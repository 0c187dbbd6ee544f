from storefront.notifications.events import OrderEvent
from storefront.notifications.channels import Channel


NOTIFICATION_RULES = {

    OrderEvent.ORDER_PLACED: {
        Channel.EMAIL_CUSTOMER: {
            "template": "emails/order_confirmation.html",
            "subject": "Order Confirmation - {reference}",
        },
        Channel.EMAIL_ADMIN: {
            "template": "emails/admin_new_order.html",
            "subject": "New Order Received - {reference}",
        },
    },

    OrderEvent.PAYMENT_RECEIVED: {
        Channel.EMAIL_CUSTOMER: {
            "template": "emails/payment_received.html",
            "subject": "Payment Received - {reference}",
        },
    },

    OrderEvent.ORDER_EXPIRED: {
        Channel.EMAIL_CUSTOMER: {
            "template": "emails/order_expired.html",
            "subject": "Order Expired - {reference}",
        },
    },

}
