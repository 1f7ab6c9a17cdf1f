from __future__ import annotations

from typing import Any
from urllib.parse import urljoin

from civicwatch.errors import MalformedRecord
from civicwatch.ingestion.adapters.base import PaginatedJSONAdapter, first_text, parse_datetime, require_text
from civicwatch.records import BillRecord, PoliticianRecord, RollcallRecord

OPENPARLIAMENT_SITE = "https://openparliament.ca"


class PoliticianAdapter(PaginatedJSONAdapter):
    """Sitting MPs from the Represent API (``objects`` + ``meta.next``)."""

    jurisdiction = "Canada"
    level = "federal"

    def next_link(self, page: dict[str, Any]) -> str | None:
        return (page.get("meta") or {}).get("next")

    def map_item(self, item: dict[str, Any]) -> PoliticianRecord:
        return PoliticianRecord(
            name=require_text(item, "name"),
            jurisdiction=self.jurisdiction,
            level=self.level,
            party=first_text(item, "party_name", "party"),
            position=first_text(item, "elected_office") or "MP",
            riding=first_text(item, "district_name", "riding"),
            email=first_text(item, "email"),
            image_url=first_text(item, "photo_url"),
            source_url=first_text(item, "url", "source_url"),
        )


class OpenParliamentAdapter(PaginatedJSONAdapter):
    def next_link(self, page: dict[str, Any]) -> str | None:
        return (page.get("pagination") or {}).get("next_url")


class BillAdapter(OpenParliamentAdapter):
    def map_item(self, item: dict[str, Any]) -> BillRecord:
        path = first_text(item, "url")
        # the list endpoint only links the sponsor's politician page, never a name
        sponsor = first_text(item, "sponsor_politician_url", "sponsor_politician")
        return BillRecord(
            bill_number=require_text(item, "number"),
            session=require_text(item, "session"),
            title=first_text(item, "name", "short_title"),
            status=first_text(item, "status_code", "status"),
            sponsor_url=urljoin(OPENPARLIAMENT_SITE, sponsor) if sponsor else None,
            introduced_on=parse_datetime(item.get("introduced")),
            source_url=urljoin(OPENPARLIAMENT_SITE, path) if path else None,
        )


class RollcallAdapter(OpenParliamentAdapter):
    def map_item(self, item: dict[str, Any]) -> RollcallRecord:
        raw_number = item.get("number")
        if raw_number in (None, ""):
            raise MalformedRecord("vote without a division number")
        return RollcallRecord(
            session=require_text(item, "session"),
            vote_number=int(raw_number),
            bill_number=self._bill_number(item.get("bill_url")),
            description=first_text(item, "description"),
            result=first_text(item, "result"),
            yea_total=self._optional_int(item.get("yea_total")),
            nay_total=self._optional_int(item.get("nay_total")),
            voted_on=parse_datetime(item.get("date")),
        )

    @staticmethod
    def _bill_number(bill_url: Any) -> str | None:
        # "/bills/44-1/C-69/" -> "C-69"
        if not bill_url:
            return None
        parts = [part for part in str(bill_url).split("/") if part]
        return parts[-1] if parts else None

    @staticmethod
    def _optional_int(value: Any) -> int | None:
        if value in (None, ""):
            return None
        return int(value)
