import logging
from typing import List, Optional, Union

import requests

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"
TIMEOUT = 10


class EmailDeliveryError(Exception):
    pass


class EmailClient:
    """Sends transactional email through the Resend HTTP API."""

    def __init__(self, api_key: Optional[str], session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.session = session or requests.Session()

    def send(self, sender: str, to: Union[str, List[str]], subject: str, html: str) -> str:
        if not self.api_key:
            raise EmailDeliveryError("Email provider is not configured")

        payload = {
            "from": sender,
            "to": [to] if isinstance(to, str) else list(to),
            "subject": subject,
            "html": html,
        }
        try:
            resp = self.session.post(
                RESEND_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=TIMEOUT,
            )
        except requests.RequestException as e:
            raise EmailDeliveryError(f"Email provider unreachable: {e}") from e

        if resp.status_code >= 400:
            raise EmailDeliveryError(f"Email provider returned {resp.status_code}: {resp.text[:200]}")

        try:
            message_id = resp.json().get("id", "")
        except ValueError:
            message_id = ""
        logger.info("sent email %r (%s)", subject, message_id)
        return message_id
