"""
Marketing email platform (ConvertKit v3)

The platform is optional: when its keys are not configured every call logs a
warning and does nothing, so the newsletter still works off the local
subscriber records.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

API_BASE = "https://api.convertkit.com/v3"
TIMEOUT = 6


class MarketingPlatformError(Exception):
    pass


class MarketingClient:
    def __init__(
        self,
        api_key: Optional[str],
        form_id: Optional[str],
        api_secret: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.form_id = form_id
        self.api_secret = api_secret
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.form_id)

    def _request(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.session.request(method, f"{API_BASE}{path}", json=payload, timeout=TIMEOUT)
        except requests.RequestException as e:
            raise MarketingPlatformError(f"Marketing platform unreachable: {e}") from e
        if resp.status_code >= 400:
            raise MarketingPlatformError(f"Marketing platform returned {resp.status_code}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError:
            return {}

    def _upsert(self, email: str, first_name: Optional[str] = None, fields: Optional[Dict[str, Any]] = None) -> None:
        # Posting to the form again updates the existing subscriber's fields
        payload: Dict[str, Any] = {"api_key": self.api_key, "email": email}
        if first_name:
            payload["first_name"] = first_name
        if fields:
            payload["fields"] = {k: v for k, v in fields.items() if v is not None}
        self._request("POST", f"/forms/{self.form_id}/subscribe", payload)

    def subscribe(
        self,
        email: str,
        first_name: Optional[str] = None,
        interests: Optional[List[str]] = None,
        source: Optional[str] = None,
    ) -> None:
        if not self.configured:
            logger.warning("ConvertKit not configured, skipping subscribe")
            return
        self._upsert(
            email,
            first_name,
            {
                "interests": ",".join(interests) if interests else None,
                "source": source,
                "newsletter_status": "pending",
            },
        )

    def set_status(self, email: str, status: str) -> None:
        if not self.configured:
            logger.warning("ConvertKit not configured, skipping status update")
            return
        self._upsert(email, fields={"newsletter_status": status})

    def update_preferences(
        self, email: str, interests: Optional[List[str]] = None, frequency: Optional[str] = None
    ) -> None:
        if not self.configured:
            logger.warning("ConvertKit not configured, skipping preferences update")
            return
        self._upsert(
            email,
            fields={
                "interests": ",".join(interests) if interests is not None else None,
                "frequency": frequency,
            },
        )

    def unsubscribe(self, email: str) -> None:
        if not self.api_secret:
            logger.warning("ConvertKit API secret not configured, skipping unsubscribe")
            return
        self._request("PUT", "/unsubscribe", {"api_secret": self.api_secret, "email": email})
