from __future__ import annotations

import enum
import logging
import threading
import time
import uuid
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any

import httpx
from sqlalchemy.orm import Session

from civicwatch.config.settings import Settings, settings as default_settings
from civicwatch.db import SessionLocal
from civicwatch.errors import IngestionAlreadyRunning, SourceUnavailable, UnknownSource
from civicwatch.ingestion.adapters import SourceAdapter, build_default_adapters
from civicwatch.ingestion.http import SourceFetcher, build_client
from civicwatch.services.upsert_service import UpsertService

logger = logging.getLogger(__name__)


class RunState(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    SETTLED = "settled"


@dataclass(frozen=True)
class IngestionResult:
    source_key: str
    success: bool
    message: str
    timestamp: datetime
    error: str | None = None
    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class IngestionRun:
    run_id: str
    started_at: datetime
    finished_at: datetime
    duration_ms: int
    results: Mapping[str, IngestionResult]

    @property
    def succeeded(self) -> list[str]:
        return [key for key, result in self.results.items() if result.success]

    @property
    def failed(self) -> list[str]:
        return [key for key, result in self.results.items() if not result.success]


class IngestionRunner:
    """Runs source adapters concurrently and settles every one of them.

    Each adapter runs on its own worker thread with its own HTTP client and
    database session. Whatever happens inside one adapter is reduced to an
    ``IngestionResult`` for that source; the run itself never fails.
    """

    def __init__(
        self,
        adapters: Mapping[str, SourceAdapter] | None = None,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        upsert_service: UpsertService | None = None,
        client_factory: Callable[[], httpx.Client] | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or default_settings
        self.adapters: dict[str, SourceAdapter] = dict(
            adapters if adapters is not None else build_default_adapters(max_pages=self.settings.max_pages)
        )
        self.session_factory = session_factory
        self.upsert_service = upsert_service or UpsertService()
        self.client_factory = client_factory or (lambda: build_client(self.settings.http_timeout))
        self.sleep = sleep
        self.state = RunState.PENDING
        self.last_run: IngestionRun | None = None
        self._last_results: dict[str, IngestionResult] = {}
        self._results_lock = threading.Lock()
        self._run_lock = threading.Lock()

    def available_sources(self) -> list[str]:
        return list(self.adapters.keys())

    def last_results(self) -> dict[str, IngestionResult]:
        with self._results_lock:
            return dict(self._last_results)

    def row_counts(self) -> dict[str, int]:
        db = self.session_factory()
        try:
            return self.upsert_service.row_counts(db)
        finally:
            db.close()

    def run_source(self, source_key: str, cancel_event: threading.Event | None = None) -> IngestionResult:
        adapter = self.adapters.get(source_key)
        if adapter is None:
            raise UnknownSource(source_key)
        # shares the run lock so a single source never races a full run writing the same tables
        if not self._run_lock.acquire(blocking=False):
            raise IngestionAlreadyRunning("an ingestion run is already in progress")
        try:
            result = self._run_task(adapter, cancel_event)
            self._remember(result)
            return result
        finally:
            self._run_lock.release()

    def run(self, source_keys: list[str] | None = None, cancel_event: threading.Event | None = None) -> IngestionRun:
        selected = source_keys or self.available_sources()
        unknown = [key for key in selected if key not in self.adapters]
        if unknown:
            raise UnknownSource(unknown[0])
        if not self._run_lock.acquire(blocking=False):
            raise IngestionAlreadyRunning("an ingestion run is already in progress")

        try:
            run_id = str(uuid.uuid4())
            started_at = datetime.utcnow()
            started = time.monotonic()
            self.state = RunState.RUNNING
            logger.info("ingestion run %s started for %d sources", run_id, len(selected))

            max_workers = max(1, min(self.settings.max_workers, len(selected)))
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ingest") as executor:
                futures = {
                    source_key: executor.submit(self._run_task, self.adapters[source_key], cancel_event)
                    for source_key in selected
                }
                wait(futures.values())

            results: dict[str, IngestionResult] = {}
            for source_key, future in futures.items():
                error = future.exception()
                if error is not None:
                    results[source_key] = self._failure(source_key, "ingestion failed", error)
                else:
                    results[source_key] = future.result()
                self._remember(results[source_key])

            duration_ms = int((time.monotonic() - started) * 1000)
            run = IngestionRun(
                run_id=run_id,
                started_at=started_at,
                finished_at=datetime.utcnow(),
                duration_ms=duration_ms,
                results=MappingProxyType(results),
            )
            self.last_run = run
            self.state = RunState.SETTLED
            logger.info(
                "ingestion run %s settled in %dms: %d succeeded, %d failed",
                run_id,
                duration_ms,
                len(run.succeeded),
                len(run.failed),
            )
            return run
        finally:
            if self.state is RunState.RUNNING:
                self.state = RunState.SETTLED
            self._run_lock.release()

    def _run_task(self, adapter: SourceAdapter, cancel_event: threading.Event | None) -> IngestionResult:
        source_key = adapter.source_key
        if cancel_event is not None and cancel_event.is_set():
            return self._failure(source_key, "cancelled before start", None)
        try:
            return self._ingest(adapter)
        except SourceUnavailable as exc:
            logger.warning("source %s unavailable: %s", source_key, exc.reason)
            return self._failure(source_key, "source unavailable", exc.reason)
        except Exception as exc:
            logger.exception("ingestion of %s failed", source_key)
            return self._failure(source_key, "ingestion failed", exc)

    def _ingest(self, adapter: SourceAdapter) -> IngestionResult:
        request_delay = adapter.config.request_delay
        if request_delay is None:
            request_delay = self.settings.request_delay
        with self.client_factory() as client:
            fetcher = SourceFetcher(
                client,
                adapter.source_key,
                request_delay=request_delay,
                retry_backoff=self.settings.retry_backoff,
                sleep=self.sleep,
            )
            payload = adapter.fetch(fetcher)
        normalized = adapter.normalize(payload)

        db = self.session_factory()
        try:
            summary = self.upsert_service.upsert_many(db, normalized.records)
        finally:
            db.close()

        if normalized.skipped:
            logger.info("%s: skipped %d malformed records", adapter.source_key, normalized.skipped)
        return IngestionResult(
            source_key=adapter.source_key,
            success=True,
            message=f"{summary.inserted} inserted, {summary.updated} updated, {normalized.skipped} skipped",
            timestamp=datetime.utcnow(),
            fetched=len(normalized.records) + normalized.skipped,
            inserted=summary.inserted,
            updated=summary.updated,
            skipped=normalized.skipped,
        )

    def _remember(self, result: IngestionResult) -> None:
        with self._results_lock:
            self._last_results[result.source_key] = result

    @staticmethod
    def _failure(source_key: str, message: str, error: Any) -> IngestionResult:
        detail = None
        if error is not None:
            detail = error if isinstance(error, str) else f"{error.__class__.__name__}: {error}"
        return IngestionResult(
            source_key=source_key,
            success=False,
            message=message,
            timestamp=datetime.utcnow(),
            error=detail,
        )
