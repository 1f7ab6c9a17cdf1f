from __future__ import annotations

import os
from dataclasses import dataclass


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./civicwatch.db"
    http_timeout: float = 15.0
    request_delay: float = 2.0
    retry_backoff: float = 1.0
    max_workers: int = 4
    max_pages: int = 5
    log_level: str = "INFO"
    analysis_api_url: str = "https://api.openai.com/v1/chat/completions"
    analysis_api_key: str | None = None
    analysis_model: str = "gpt-4o"
    analysis_timeout: float = 60.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("CIVICWATCH_DATABASE_URL", cls.database_url),
            http_timeout=_float_env("CIVICWATCH_HTTP_TIMEOUT", cls.http_timeout),
            request_delay=_float_env("CIVICWATCH_REQUEST_DELAY", cls.request_delay),
            retry_backoff=_float_env("CIVICWATCH_RETRY_BACKOFF", cls.retry_backoff),
            max_workers=_int_env("CIVICWATCH_MAX_WORKERS", cls.max_workers),
            max_pages=_int_env("CIVICWATCH_MAX_PAGES", cls.max_pages),
            log_level=os.getenv("CIVICWATCH_LOG_LEVEL", cls.log_level).upper(),
            analysis_api_url=os.getenv("ANALYSIS_API_URL", cls.analysis_api_url),
            analysis_api_key=os.getenv("ANALYSIS_API_KEY") or os.getenv("OPENAI_API_KEY"),
            analysis_model=os.getenv("ANALYSIS_MODEL", cls.analysis_model),
            analysis_timeout=_float_env("ANALYSIS_TIMEOUT", cls.analysis_timeout),
        )


settings = Settings.from_env()
