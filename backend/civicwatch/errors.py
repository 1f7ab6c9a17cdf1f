"""Error taxonomy shared by ingestion and analysis."""

from __future__ import annotations


class CivicWatchError(Exception):
    pass


class SourceUnavailable(CivicWatchError):
    """Network failure, timeout, non-2xx response or unparseable payload for one source."""

    def __init__(self, source_key: str, reason: str) -> None:
        super().__init__(f"{source_key}: {reason}")
        self.source_key = source_key
        self.reason = reason


class MalformedRecord(CivicWatchError):
    """A single upstream item could not be mapped to a canonical record."""


class AnalysisUnavailable(CivicWatchError):
    """The external text-analysis capability timed out or returned an unusable response."""


class IngestionAlreadyRunning(CivicWatchError):
    pass


class UnknownSource(CivicWatchError):
    def __init__(self, source_key: str) -> None:
        super().__init__(f"unknown source: {source_key}")
        self.source_key = source_key


class ArticleNotFound(CivicWatchError):
    def __init__(self, article_id: str) -> None:
        super().__init__(f"article not found: {article_id}")
        self.article_id = article_id
