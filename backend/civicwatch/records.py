"""Canonical record shapes produced by source adapters.

Each record names the ORM model it maps to and the fields forming its natural
key. Fields left as ``None`` are treated as "not carried by this payload" by the
upsert layer, so a partial payload never erases previously stored values.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, ClassVar

from civicwatch import models


@dataclass
class CanonicalRecord:
    model: ClassVar[type]
    natural_key: ClassVar[tuple[str, ...]]
    record_type: ClassVar[str]

    def key_values(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.natural_key}

    def present_fields(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass
class PoliticianRecord(CanonicalRecord):
    model: ClassVar[type] = models.Politician
    natural_key: ClassVar[tuple[str, ...]] = ("name", "jurisdiction", "level")
    record_type: ClassVar[str] = "politician"

    name: str
    jurisdiction: str
    level: str
    party: str | None = None
    position: str | None = None
    riding: str | None = None
    email: str | None = None
    image_url: str | None = None
    source_url: str | None = None


@dataclass
class BillRecord(CanonicalRecord):
    model: ClassVar[type] = models.Bill
    natural_key: ClassVar[tuple[str, ...]] = ("bill_number", "session")
    record_type: ClassVar[str] = "bill"

    bill_number: str
    session: str
    title: str | None = None
    status: str | None = None
    sponsor_url: str | None = None
    introduced_on: datetime | None = None
    source_url: str | None = None


@dataclass
class RollcallRecord(CanonicalRecord):
    model: ClassVar[type] = models.BillRollcall
    natural_key: ClassVar[tuple[str, ...]] = ("session", "vote_number")
    record_type: ClassVar[str] = "rollcall"

    session: str
    vote_number: int
    bill_number: str | None = None
    description: str | None = None
    result: str | None = None
    yea_total: int | None = None
    nay_total: int | None = None
    voted_on: datetime | None = None


@dataclass
class LegalActRecord(CanonicalRecord):
    model: ClassVar[type] = models.LegalAct
    natural_key: ClassVar[tuple[str, ...]] = ("act_number", "jurisdiction")
    record_type: ClassVar[str] = "legal_act"

    act_number: str
    jurisdiction: str
    title: str | None = None
    source_url: str | None = None
    last_amended_on: datetime | None = None


@dataclass
class ProcurementRecord(CanonicalRecord):
    model: ClassVar[type] = models.ProcurementContract
    natural_key: ClassVar[tuple[str, ...]] = ("reference",)
    record_type: ClassVar[str] = "procurement"

    reference: str
    supplier: str | None = None
    department: str | None = None
    value: float | None = None
    awarded_on: datetime | None = None
    url: str | None = None


@dataclass
class LobbyistRecord(CanonicalRecord):
    model: ClassVar[type] = models.LobbyistOrg
    natural_key: ClassVar[tuple[str, ...]] = ("name",)
    record_type: ClassVar[str] = "lobbyist"

    name: str
    organization: str | None = None
    sectors: str | None = None
    last_activity: datetime | None = None
    url: str | None = None


@dataclass
class ElectionRecord(CanonicalRecord):
    model: ClassVar[type] = models.Election
    natural_key: ClassVar[tuple[str, ...]] = ("jurisdiction", "election_type", "election_date")
    record_type: ClassVar[str] = "election"

    jurisdiction: str
    election_type: str
    election_date: datetime
    title: str | None = None
    status: str | None = None
    source_url: str | None = None


@dataclass
class ArticleRecord(CanonicalRecord):
    model: ClassVar[type] = models.Article
    natural_key: ClassVar[tuple[str, ...]] = ("url",)
    record_type: ClassVar[str] = "article"

    url: str
    title: str
    source_name: str
    summary: str | None = None
    published_at: datetime | None = None
    credibility_score: float | None = None
    bias: str | None = None


RECORD_TYPES: dict[str, type[CanonicalRecord]] = {
    record_cls.record_type: record_cls
    for record_cls in (
        PoliticianRecord,
        BillRecord,
        RollcallRecord,
        LegalActRecord,
        ProcurementRecord,
        LobbyistRecord,
        ElectionRecord,
        ArticleRecord,
    )
}


@dataclass
class NormalizationResult:
    records: list[CanonicalRecord] = field(default_factory=list)
    skipped: int = 0
