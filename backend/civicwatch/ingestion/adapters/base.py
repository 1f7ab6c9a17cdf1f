from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urljoin

from civicwatch.config.sources import SourceConfig
from civicwatch.errors import MalformedRecord, SourceUnavailable
from civicwatch.ingestion.http import SourceFetcher
from civicwatch.records import CanonicalRecord, NormalizationResult

logger = logging.getLogger(__name__)


def parse_datetime(value: Any) -> datetime | None:
    """Parse an upstream timestamp into a naive UTC datetime."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip().replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise MalformedRecord(f"unparseable timestamp {value!r}") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def require_text(item: dict[str, Any], *names: str) -> str:
    """First non-empty string among ``names``; raises MalformedRecord when none is present."""
    value = first_text(item, *names)
    if value is None:
        raise MalformedRecord(f"missing required field, tried {', '.join(names)}")
    return value


def first_text(item: dict[str, Any], *names: str) -> str | None:
    for name in names:
        value = item.get(name)
        if isinstance(value, dict):
            value = value.get("en")
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


class SourceAdapter:
    """Fetch and normalize one external source.

    ``fetch`` raises ``SourceUnavailable`` for transport or payload-level
    failures. ``normalize`` never raises for a single bad item: the item is
    skipped and counted.
    """

    source_format = "json"

    def __init__(self, config: SourceConfig, *, max_pages: int = 1) -> None:
        self.config = config
        self.max_pages = max(1, max_pages)

    @property
    def source_key(self) -> str:
        return self.config.key

    def fetch(self, fetcher: SourceFetcher) -> Any:
        return fetcher.get_json(self.config.endpoint)

    def iter_items(self, payload: Any) -> Iterable[Any]:
        raise NotImplementedError

    def map_item(self, item: Any) -> CanonicalRecord:
        raise NotImplementedError

    def normalize(self, payload: Any) -> NormalizationResult:
        result = NormalizationResult()
        for item in self.iter_items(payload):
            try:
                if not isinstance(item, dict):
                    raise MalformedRecord(f"expected an object, got {type(item).__name__}")
                result.records.append(self.map_item(item))
            except (MalformedRecord, KeyError, TypeError, ValueError) as exc:
                result.skipped += 1
                logger.debug("%s: skipped malformed record: %s", self.source_key, exc)
        return result


class PaginatedJSONAdapter(SourceAdapter):
    """JSON list endpoints that return ``objects`` plus a relative next-page link."""

    items_key = "objects"

    def fetch(self, fetcher: SourceFetcher) -> list[Any]:
        pages: list[Any] = []
        url: str | None = self.config.endpoint
        while url and len(pages) < self.max_pages:
            page = fetcher.get_json(url)
            if not isinstance(page, dict):
                raise SourceUnavailable(self.source_key, "unexpected payload shape")
            pages.append(page)
            next_link = self.next_link(page)
            url = urljoin(self.config.endpoint, next_link) if next_link else None
        return pages

    def next_link(self, page: dict[str, Any]) -> str | None:
        raise NotImplementedError

    def iter_items(self, payload: list[Any]) -> Iterable[Any]:
        for page in payload:
            items = page.get(self.items_key) or []
            if isinstance(items, list):
                yield from items
