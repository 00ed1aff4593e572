"""HTTP client for webhook actions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urljoin

import requests

logger = logging.getLogger(__name__)


def is_absolute_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


class WebhookClient:
    """POST the trigger context as JSON to a webhook URL.

    Relative URLs (``/api/notifications/...``) are resolved against
    ``base_url``. Non-2xx responses raise ``requests.HTTPError``.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._base_url = base_url.rstrip("/") + "/" if base_url.strip() else ""
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "User-Agent": "crm-workflow-automation",
            }
        )

    @property
    def has_base_url(self) -> bool:
        return bool(self._base_url)

    def resolve_url(self, url: str) -> str:
        if not url.strip():
            raise ValueError("Webhook URL is required")
        if is_absolute_url(url):
            return url
        if not self._base_url:
            raise ValueError(f"Relative webhook URL requires a base URL: {url}")
        return urljoin(self._base_url, url.lstrip("/"))

    def post(self, url: str, payload: Mapping[str, Any]) -> int:
        target = self.resolve_url(url)
        resp = self._session.post(target, json=dict(payload), timeout=self._timeout)
        resp.raise_for_status()
        logger.info("Webhook delivered", extra={"url": target, "status_code": resp.status_code})
        return resp.status_code

    def close(self) -> None:
        self._session.close()
