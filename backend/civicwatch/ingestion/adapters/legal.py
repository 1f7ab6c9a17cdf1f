from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from bs4 import BeautifulSoup

from civicwatch.errors import SourceUnavailable
from civicwatch.ingestion.adapters.base import SourceAdapter, first_text, parse_datetime, require_text
from civicwatch.ingestion.http import SourceFetcher
from civicwatch.records import LegalActRecord


class LegalActAdapter(SourceAdapter):
    """Consolidated acts index (``Legis.xml``) from the Justice Laws Website.

    Each ``<Act>`` element is flattened to a dict of its child tag texts before
    mapping; only English entries are kept.
    """

    source_format = "xml"
    jurisdiction = "federal"

    def fetch(self, fetcher: SourceFetcher) -> list[dict[str, str]]:
        document = BeautifulSoup(fetcher.get_text(self.config.endpoint), "xml")
        acts = document.find_all("Act")
        if not acts and document.find("ActsRegsList") is None:
            raise SourceUnavailable(self.source_key, "payload is not a Legis.xml index")
        return [{child.name: child.get_text(strip=True) for child in act.find_all(recursive=False)} for act in acts]

    def iter_items(self, payload: list[dict[str, str]]) -> Iterable[Any]:
        for act in payload:
            if act.get("Language", "eng") == "eng":
                yield act

    def map_item(self, item: dict[str, Any]) -> LegalActRecord:
        return LegalActRecord(
            act_number=require_text(item, "OfficialNumber", "UniqueId"),
            jurisdiction=self.jurisdiction,
            title=first_text(item, "Title"),
            source_url=first_text(item, "LinkToHTMLToC", "LinkToXML"),
            last_amended_on=parse_datetime(item.get("CurrentToDate")),
        )
