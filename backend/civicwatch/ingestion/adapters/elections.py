from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from civicwatch.errors import MalformedRecord
from civicwatch.ingestion.adapters.base import SourceAdapter, first_text, parse_datetime, require_text
from civicwatch.records import ElectionRecord


class ElectionAdapter(SourceAdapter):
    """Election schedule feed: a JSON list, or an object with an ``elections`` list."""

    def iter_items(self, payload: Any) -> Iterable[Any]:
        if isinstance(payload, dict):
            payload = payload.get("elections") or payload.get("objects") or []
        return payload if isinstance(payload, list) else []

    def map_item(self, item: dict[str, Any]) -> ElectionRecord:
        election_date = parse_datetime(item.get("date") or item.get("election_date"))
        if election_date is None:
            raise MalformedRecord("election without a date")
        return ElectionRecord(
            jurisdiction=require_text(item, "jurisdiction"),
            election_type=require_text(item, "type", "election_type").lower(),
            election_date=election_date,
            title=first_text(item, "title", "name"),
            status=first_text(item, "status"),
            source_url=first_text(item, "url", "source_url"),
        )
