from __future__ import annotations

import os
from collections.abc import Iterable
from typing import Any

from civicwatch.config.sources import SourceConfig
from civicwatch.errors import SourceUnavailable
from civicwatch.ingestion.adapters.base import SourceAdapter, first_text, parse_datetime, require_text
from civicwatch.ingestion.http import SourceFetcher
from civicwatch.records import LobbyistRecord, ProcurementRecord


class CKANSearchAdapter(SourceAdapter):
    """Open Government CKAN ``package_search``, paged with ``start``/``rows``."""

    default_query = ""
    query_env: str | None = None
    rows = 50

    def __init__(self, config: SourceConfig, *, max_pages: int = 1, query: str | None = None) -> None:
        super().__init__(config, max_pages=max_pages)
        env_query = os.getenv(self.query_env) if self.query_env else None
        self.query = query or env_query or self.default_query

    def fetch(self, fetcher: SourceFetcher) -> list[dict[str, Any]]:
        pages: list[dict[str, Any]] = []
        start = 0
        while len(pages) < self.max_pages:
            params = {"q": self.query, "rows": self.rows, "start": start}
            payload = fetcher.get_json(self.config.endpoint, params=params)
            if not isinstance(payload, dict) or not isinstance(payload.get("result"), dict):
                raise SourceUnavailable(self.source_key, "CKAN response without a result object")
            if payload.get("success") is False:
                raise SourceUnavailable(self.source_key, "CKAN reported success=false")
            pages.append(payload)
            result = payload["result"]
            start += self.rows
            if start >= int(result.get("count") or 0):
                break
        return pages

    def iter_items(self, payload: list[dict[str, Any]]) -> Iterable[Any]:
        for page in payload:
            yield from page["result"].get("results") or []

    @staticmethod
    def _resource_url(item: dict[str, Any]) -> str | None:
        resources = [r for r in item.get("resources") or [] if isinstance(r, dict)]
        for resource in resources:
            if "html" in str(resource.get("format") or "").lower() and resource.get("url"):
                return resource["url"]
        return resources[0].get("url") if resources else None

    @staticmethod
    def _organization(item: dict[str, Any]) -> str | None:
        organization = item.get("organization")
        if isinstance(organization, dict):
            return first_text(organization, "title", "name")
        return None


class ProcurementAdapter(CKANSearchAdapter):
    default_query = "contract awards"
    query_env = "CKAN_PROCUREMENT_QUERY"

    def map_item(self, item: dict[str, Any]) -> ProcurementRecord:
        return ProcurementRecord(
            reference=require_text(item, "id"),
            supplier=(first_text(item, "title") or "")[:255] or None,
            department=self._organization(item),
            awarded_on=parse_datetime(item.get("metadata_modified")),
            url=self._resource_url(item),
        )


class LobbyistAdapter(CKANSearchAdapter):
    default_query = "lobbyist registry"
    query_env = "CKAN_LOBBYISTS_QUERY"

    def map_item(self, item: dict[str, Any]) -> LobbyistRecord:
        tags = [tag.get("name") for tag in item.get("tags") or [] if isinstance(tag, dict) and tag.get("name")]
        return LobbyistRecord(
            name=require_text(item, "title", "name"),
            organization=self._organization(item),
            sectors=", ".join(tags) or None,
            last_activity=parse_datetime(item.get("metadata_modified")),
            url=self._resource_url(item),
        )
