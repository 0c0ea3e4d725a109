"""
Content store client

Thin wrapper over the headless CMS's HTTP query API. Queries are GROQ
strings; caller values are always passed as ``$name`` parameters, which the
API expects JSON-encoded in the query string.
"""
import json
import logging
from typing import Any, Dict, Optional

import requests

from config import Settings

logger = logging.getLogger(__name__)

TIMEOUT = 10


class ContentStoreError(Exception):
    pass


class ContentClient:
    def __init__(
        self,
        project_id: str,
        dataset: str = "production",
        api_version: str = "2024-01-01",
        token: Optional[str] = None,
        use_cdn: bool = False,
        session: Optional[requests.Session] = None,
    ):
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version
        self.token = token
        self.use_cdn = use_cdn
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentClient":
        return cls(
            project_id=settings.sanity_project_id,
            dataset=settings.sanity_dataset,
            api_version=settings.sanity_api_version,
            token=settings.sanity_api_token,
            use_cdn=settings.sanity_use_cdn,
        )

    @property
    def query_url(self) -> str:
        host = "apicdn" if self.use_cdn else "api"
        return f"https://{self.project_id}.{host}.sanity.io/v{self.api_version}/data/query/{self.dataset}"

    def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Run a query and return its ``result`` member."""
        args = {"query": query}
        for name, value in (params or {}).items():
            args[f"${name}"] = json.dumps(value, default=str)

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            resp = self.session.get(self.query_url, params=args, headers=headers, timeout=TIMEOUT)
        except requests.RequestException as e:
            raise ContentStoreError(f"Content store unreachable: {e}") from e

        if resp.status_code >= 400:
            raise ContentStoreError(
                f"Content store returned {resp.status_code}: {resp.text[:200]}"
            )
        try:
            payload = resp.json()
        except ValueError as e:
            raise ContentStoreError("Content store returned invalid JSON") from e

        logger.debug("content query took %sms", payload.get("ms"))
        return payload.get("result")
