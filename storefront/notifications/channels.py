from enum import Enum


class Channel(str, Enum):
    EMAIL_CUSTOMER = "email_customer"
    EMAIL_ADMIN = "email_admin"
