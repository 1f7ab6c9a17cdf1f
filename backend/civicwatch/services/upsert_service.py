from __future__ import annotations

import enum
import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civicwatch.records import RECORD_TYPES, CanonicalRecord

logger = logging.getLogger(__name__)


class UpsertOutcome(str, enum.Enum):
    INSERTED = "inserted"
    UPDATED = "updated"


@dataclass
class UpsertSummary:
    inserted: int = 0
    updated: int = 0
    by_type: Counter = field(default_factory=Counter)

    def add(self, record: CanonicalRecord, outcome: UpsertOutcome) -> None:
        if outcome is UpsertOutcome.INSERTED:
            self.inserted += 1
        else:
            self.updated += 1
        self.by_type[record.record_type] += 1


class UpsertService:
    """Merges canonical records into the store keyed by their natural key.

    The unique constraint on each natural key is the real guarantee against
    duplicates. A constraint violation on insert means another writer got there
    first, so the insert is retried as an update of that row.
    """

    def upsert(self, db: Session, record: CanonicalRecord) -> UpsertOutcome:
        existing = self._find(db, record)
        if existing is not None:
            self._apply(existing, record)
            db.commit()
            return UpsertOutcome.UPDATED

        db.add(record.model(**record.present_fields()))
        try:
            db.commit()
            return UpsertOutcome.INSERTED
        except IntegrityError:
            db.rollback()
            existing = self._find(db, record)
            if existing is None:
                raise
            logger.debug("natural key collision for %s %s, updating in place", record.record_type, record.key_values())
            self._apply(existing, record)
            db.commit()
            return UpsertOutcome.UPDATED

    def upsert_many(self, db: Session, records: Iterable[CanonicalRecord]) -> UpsertSummary:
        summary = UpsertSummary()
        for record in records:
            summary.add(record, self.upsert(db, record))
        return summary

    def row_counts(self, db: Session) -> dict[str, int]:
        return {
            record_type: db.query(func.count()).select_from(record_cls.model).scalar() or 0
            for record_type, record_cls in RECORD_TYPES.items()
        }

    @staticmethod
    def _find(db: Session, record: CanonicalRecord):
        return db.query(record.model).filter_by(**record.key_values()).first()

    @staticmethod
    def _apply(row, record: CanonicalRecord) -> None:
        for name, value in record.present_fields().items():
            if name in record.natural_key:
                continue
            setattr(row, name, value)
