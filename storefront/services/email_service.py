import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Union

import requests

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


@dataclass
class SendResult:
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None


def is_valid_email(email):
    if isinstance(email, list):
        return all(is_valid_email(e) for e in email)

    if not email:
        return False

    return re.match(r"[^@]+@[^@]+\.[^@]+", email) is not None


class EmailNotifier:
    """
    Transactional email through Brevo.

    Without an API key the notifier runs in degraded mode: every send is
    skipped and reported as unsuccessful, nothing is raised.
    """

    def __init__(
        self,
        api_key: Optional[str],
        mail_from: str,
        store_name: str,
        timeout: int = 10,
    ):
        self.api_key = api_key
        self.mail_from = mail_from
        self.store_name = store_name
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, to: Union[str, List[str]], subject: str, html: str) -> SendResult:
        if not self.configured:
            logger.info(f"Email not configured, skipping '{subject}'")
            return SendResult(success=False, error="Email not configured")

        # Normalize recipients into a list of valid addresses
        if isinstance(to, list):
            valid_emails = [e for e in to if is_valid_email(e)]
        else:
            valid_emails = [to] if is_valid_email(to) else []

        if not valid_emails:
            logger.warning(f"No valid emails found: {to}")
            return SendResult(success=False, error="No valid recipient")

        payload = {
            "sender": {
                "email": self.mail_from,
                "name": self.store_name,
            },
            "to": [{"email": email} for email in valid_emails],
            "subject": subject,
            "htmlContent": html,
        }

        headers = {
            "api-key": self.api_key,
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                BREVO_API_URL,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.exception("Brevo email exception")
            return SendResult(success=False, error=str(e))

        if response.status_code >= 400:
            logger.error(
                f"Brevo email failed ({response.status_code}): {response.text}"
            )
            return SendResult(
                success=False,
                error=f"Brevo returned {response.status_code}",
            )

        message_id = response.json().get("messageId") if response.content else None

        logger.info(f"Brevo email sent to {valid_emails}")
        return SendResult(success=True, message_id=message_id)
