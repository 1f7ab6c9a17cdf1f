import threading
from datetime import datetime

import httpx
import pytest

from civicwatch.config.settings import Settings
from civicwatch.config.sources import SourceConfig
from civicwatch.errors import IngestionAlreadyRunning, SourceUnavailable, UnknownSource
from civicwatch.ingestion import IngestionRunner, RunState
from civicwatch.ingestion.adapters.base import SourceAdapter, require_text
from civicwatch.records import ElectionRecord


class StaticElectionAdapter(SourceAdapter):
    """Serves a fixed payload, or raises ``error`` from fetch."""

    def __init__(self, key, items, error=None, before_fetch=None):
        super().__init__(
            SourceConfig(
                key=key,
                name=key,
                domain="election",
                source_format="json",
                endpoint=f"https://feeds.example/{key}",
                description="static test feed",
            )
        )
        self.items = items
        self.error = error
        self.before_fetch = before_fetch

    def fetch(self, fetcher):
        if self.before_fetch is not None:
            self.before_fetch()
        if self.error is not None:
            raise self.error
        return self.items

    def iter_items(self, payload):
        return payload

    def map_item(self, item):
        return ElectionRecord(
            jurisdiction=require_text(item, "jurisdiction"),
            election_type="municipal",
            election_date=datetime(2026, 10, 26),
        )


def _runner(adapters):
    return IngestionRunner(
        {adapter.source_key: adapter for adapter in adapters},
        client_factory=lambda: httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200))),
        settings=Settings(request_delay=0, retry_backoff=0, max_workers=4),
        sleep=lambda seconds: None,
    )


def test_one_failing_source_does_not_affect_the_others():
    runner = _runner(
        [
            StaticElectionAdapter("toronto", [{"jurisdiction": "Toronto"}, {"jurisdiction": "Ottawa"}]),
            StaticElectionAdapter("broken", [], error=RuntimeError("parser exploded")),
            StaticElectionAdapter("offline", [], error=SourceUnavailable("offline", "HTTP 503 from feeds.example")),
            StaticElectionAdapter("partial", [{"jurisdiction": "Hamilton"}, {"name": "no jurisdiction"}]),
        ]
    )

    run = runner.run()

    assert set(run.results) == {"toronto", "broken", "offline", "partial"}
    assert sorted(run.succeeded) == ["partial", "toronto"]
    assert sorted(run.failed) == ["broken", "offline"]

    broken = run.results["broken"]
    assert broken.message == "ingestion failed"
    assert "parser exploded" in broken.error
    assert run.results["offline"].message == "source unavailable"

    assert run.results["toronto"].inserted == 2
    assert run.results["partial"].skipped == 1
    assert run.results["partial"].message == "1 inserted, 0 updated, 1 skipped"
    assert runner.row_counts()["election"] == 3
    assert runner.state is RunState.SETTLED


def test_run_waits_for_slow_sources_to_settle():
    release = threading.Event()

    def slow():
        release.wait(timeout=0.2)

    runner = _runner(
        [
            StaticElectionAdapter("slow", [{"jurisdiction": "Calgary"}], before_fetch=slow),
            StaticElectionAdapter("fast", [{"jurisdiction": "Halifax"}]),
        ]
    )

    run = runner.run()

    assert run.results["slow"].success is True
    assert run.results["fast"].success is True
    assert run.duration_ms >= 0
    assert run.finished_at >= run.started_at


def test_second_run_is_idempotent():
    runner = _runner([StaticElectionAdapter("toronto", [{"jurisdiction": "Toronto"}, {"jurisdiction": "Ottawa"}])])

    first = runner.run()
    counts = runner.row_counts()
    second = runner.run()

    assert first.results["toronto"].inserted == 2
    assert second.results["toronto"].inserted == 0
    assert second.results["toronto"].updated == 2
    assert runner.row_counts() == counts


def test_cancelled_run_reports_every_source_without_fetching():
    fetched = []
    cancel = threading.Event()
    cancel.set()
    runner = _runner(
        [
            StaticElectionAdapter("a", [{"jurisdiction": "A"}], before_fetch=lambda: fetched.append("a")),
            StaticElectionAdapter("b", [{"jurisdiction": "B"}], before_fetch=lambda: fetched.append("b")),
        ]
    )

    run = runner.run(cancel_event=cancel)

    assert fetched == []
    assert sorted(run.failed) == ["a", "b"]
    assert all(result.message == "cancelled before start" for result in run.results.values())


def test_overlapping_run_is_rejected():
    started = threading.Event()
    release = threading.Event()

    def block():
        started.set()
        release.wait(timeout=5)

    runner = _runner([StaticElectionAdapter("blocking", [{"jurisdiction": "Regina"}], before_fetch=block)])
    background = threading.Thread(target=runner.run)
    background.start()
    try:
        assert started.wait(timeout=5)
        assert runner.state is RunState.RUNNING
        with pytest.raises(IngestionAlreadyRunning):
            runner.run()
    finally:
        release.set()
        background.join(timeout=5)

    assert runner.last_results()["blocking"].success is True


def test_single_source_is_rejected_during_a_full_run():
    started = threading.Event()
    release = threading.Event()

    def block():
        started.set()
        release.wait(timeout=5)

    runner = _runner(
        [
            StaticElectionAdapter("blocking", [{"jurisdiction": "Regina"}], before_fetch=block),
            StaticElectionAdapter("toronto", [{"jurisdiction": "Toronto"}]),
        ]
    )
    background = threading.Thread(target=runner.run, kwargs={"source_keys": ["blocking"]})
    background.start()
    try:
        assert started.wait(timeout=5)
        with pytest.raises(IngestionAlreadyRunning):
            runner.run_source("toronto")
    finally:
        release.set()
        background.join(timeout=5)

    assert "toronto" not in runner.last_results()
    assert runner.run_source("toronto").success is True


def test_unknown_sources_are_rejected_before_running():
    runner = _runner([StaticElectionAdapter("toronto", [{"jurisdiction": "Toronto"}])])

    with pytest.raises(UnknownSource):
        runner.run(source_keys=["toronto", "nowhere"])
    with pytest.raises(UnknownSource):
        runner.run_source("nowhere")

    assert runner.state is RunState.PENDING
    assert runner.last_results() == {}


def test_run_source_records_last_result():
    runner = _runner(
        [
            StaticElectionAdapter("toronto", [{"jurisdiction": "Toronto"}]),
            StaticElectionAdapter("ottawa", [{"jurisdiction": "Ottawa"}]),
        ]
    )

    result = runner.run_source("toronto")

    assert result.success is True
    assert list(runner.last_results()) == ["toronto"]
    assert runner.available_sources() == ["toronto", "ottawa"]
