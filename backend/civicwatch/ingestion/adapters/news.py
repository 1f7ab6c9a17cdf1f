from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

import feedparser

from civicwatch.errors import SourceUnavailable
from civicwatch.ingestion.adapters.base import SourceAdapter, require_text
from civicwatch.ingestion.http import SourceFetcher
from civicwatch.records import ArticleRecord
from civicwatch.services.content_cleaner import ContentCleaner


class NewsFeedAdapter(SourceAdapter):
    """RSS/Atom outlet feed; articles inherit the outlet's declared credibility and bias."""

    source_format = "rss"
    max_entries = 50

    def __init__(self, config, *, max_pages: int = 1, cleaner: ContentCleaner | None = None) -> None:
        super().__init__(config, max_pages=max_pages)
        self.cleaner = cleaner or ContentCleaner()

    def fetch(self, fetcher: SourceFetcher) -> Any:
        feed = feedparser.parse(fetcher.get_text(self.config.endpoint))
        if feed.bozo and not feed.entries:
            raise SourceUnavailable(self.source_key, f"unparseable feed: {feed.get('bozo_exception')}")
        return feed

    def iter_items(self, payload: Any) -> Iterable[Any]:
        return list(payload.entries)[: self.max_entries]

    def map_item(self, item: dict[str, Any]) -> ArticleRecord:
        summary = item.get("summary") or item.get("description") or ""
        return ArticleRecord(
            url=require_text(item, "link"),
            title=self.cleaner.strip_markup(require_text(item, "title"))[:512],
            source_name=self.config.name,
            summary=self.cleaner.strip_markup(summary) or None,
            published_at=self._published(item),
            credibility_score=self.config.credibility,
            bias=self.config.bias,
        )

    @staticmethod
    def _published(item: dict[str, Any]) -> datetime | None:
        # feedparser normalizes published/updated dates to UTC struct_time
        parsed = item.get("published_parsed") or item.get("updated_parsed")
        if not parsed:
            return None
        return datetime(*parsed[:6])
