from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from civicwatch.errors import SourceUnavailable

logger = logging.getLogger(__name__)

USER_AGENT = "CivicWatchBot/1.0 (+https://civicwatch.example)"


class SourceFetcher:
    """Rate-limited GET helper bound to a single source.

    Waits ``request_delay`` seconds between consecutive requests and retries a
    failed request once after ``retry_backoff`` seconds before giving up with
    ``SourceUnavailable``.
    """

    def __init__(
        self,
        client: httpx.Client,
        source_key: str,
        *,
        request_delay: float = 2.0,
        retry_backoff: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.source_key = source_key
        self.request_delay = request_delay
        self.retry_backoff = retry_backoff
        self._sleep = sleep
        self._last_request_at: float | None = None
        self.requests_made = 0

    def get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        last_error: Exception | None = None
        for attempt in range(2):
            if attempt:
                logger.warning("%s: retrying %s after %s", self.source_key, url, last_error)
                self._sleep(self.retry_backoff)
            self._respect_rate_limit()
            try:
                response = self.client.get(url, params=params)
                self.requests_made += 1
                return response.raise_for_status()
            except httpx.HTTPError as exc:
                last_error = exc
        raise SourceUnavailable(self.source_key, self._describe(last_error))

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = self.get(url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise SourceUnavailable(self.source_key, f"unparseable JSON payload: {exc}") from exc

    def get_text(self, url: str, params: dict[str, Any] | None = None) -> str:
        text = self.get(url, params=params).text
        if not text or not text.strip():
            raise SourceUnavailable(self.source_key, f"empty response from {url}")
        return text

    def _respect_rate_limit(self) -> None:
        if self._last_request_at is not None and self.request_delay > 0:
            elapsed = time.monotonic() - self._last_request_at
            if elapsed < self.request_delay:
                self._sleep(self.request_delay - elapsed)
        self._last_request_at = time.monotonic()

    @staticmethod
    def _describe(error: Exception | None) -> str:
        if isinstance(error, httpx.HTTPStatusError):
            return f"HTTP {error.response.status_code} from {error.request.url}"
        if isinstance(error, httpx.TimeoutException):
            return f"timeout: {error}"
        return str(error) or error.__class__.__name__


def build_client(timeout: float, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    return httpx.Client(
        timeout=timeout,
        transport=transport,
        follow_redirects=True,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json, application/rss+xml, application/xml, text/xml, */*",
        },
    )
