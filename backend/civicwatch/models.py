import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from civicwatch.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Politician(TimestampMixin, Base):
    __tablename__ = "politicians"
    __table_args__ = (UniqueConstraint("name", "jurisdiction", "level", name="uq_politicians_natural_key"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String, nullable=False)
    jurisdiction: Mapped[str] = mapped_column(String, nullable=False)
    level: Mapped[str] = mapped_column(String, nullable=False)
    party: Mapped[str | None] = mapped_column(String, nullable=True)
    position: Mapped[str | None] = mapped_column(String, nullable=True)
    riding: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String, nullable=True)


class Bill(TimestampMixin, Base):
    __tablename__ = "bills"
    __table_args__ = (UniqueConstraint("bill_number", "session", name="uq_bills_natural_key"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    bill_number: Mapped[str] = mapped_column(String, nullable=False)
    session: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    sponsor_url: Mapped[str | None] = mapped_column(String, nullable=True)
    introduced_on: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String, nullable=True)


class BillRollcall(TimestampMixin, Base):
    __tablename__ = "bill_rollcalls"
    __table_args__ = (UniqueConstraint("session", "vote_number", name="uq_bill_rollcalls_natural_key"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    session: Mapped[str] = mapped_column(String, nullable=False)
    vote_number: Mapped[int] = mapped_column(Integer, nullable=False)
    bill_number: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    result: Mapped[str | None] = mapped_column(String, nullable=True)
    yea_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    nay_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    voted_on: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class LegalAct(TimestampMixin, Base):
    __tablename__ = "legal_acts"
    __table_args__ = (UniqueConstraint("act_number", "jurisdiction", name="uq_legal_acts_natural_key"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    act_number: Mapped[str] = mapped_column(String, nullable=False)
    jurisdiction: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String, nullable=True)
    last_amended_on: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class ProcurementContract(TimestampMixin, Base):
    __tablename__ = "procurement_contracts"
    __table_args__ = (UniqueConstraint("reference", name="uq_procurement_contracts_natural_key"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    reference: Mapped[str] = mapped_column(String, nullable=False)
    supplier: Mapped[str | None] = mapped_column(String, nullable=True)
    department: Mapped[str | None] = mapped_column(String, nullable=True)
    value: Mapped[float | None] = mapped_column(Float, nullable=True)
    awarded_on: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    url: Mapped[str | None] = mapped_column(String, nullable=True)


class LobbyistOrg(TimestampMixin, Base):
    __tablename__ = "lobbyist_orgs"
    __table_args__ = (UniqueConstraint("name", name="uq_lobbyist_orgs_natural_key"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String, nullable=False)
    organization: Mapped[str | None] = mapped_column(String, nullable=True)
    sectors: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_activity: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    url: Mapped[str | None] = mapped_column(String, nullable=True)


class Election(TimestampMixin, Base):
    __tablename__ = "elections"
    __table_args__ = (
        UniqueConstraint("jurisdiction", "election_type", "election_date", name="uq_elections_natural_key"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    jurisdiction: Mapped[str] = mapped_column(String, nullable=False)
    election_type: Mapped[str] = mapped_column(String, nullable=False)
    election_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String, nullable=True)


class Article(TimestampMixin, Base):
    __tablename__ = "articles"
    __table_args__ = (UniqueConstraint("url", name="uq_articles_natural_key"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    url: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_name: Mapped[str] = mapped_column(String, nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    credibility_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    bias: Mapped[str | None] = mapped_column(String, nullable=True)
