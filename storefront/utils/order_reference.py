import secrets
from datetime import datetime


def generate_order_reference(now: datetime) -> str:
    """``ORDER-<epoch ms>-<8 hex>``; the random suffix separates orders placed in the same millisecond."""
    millis = int(now.timestamp() * 1000)
    return f"ORDER-{millis}-{secrets.token_hex(4).upper()}"
