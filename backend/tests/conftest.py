import os
import tempfile
from datetime import datetime

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="civicwatch-tests-")
os.environ["CIVICWATCH_DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["CIVICWATCH_REQUEST_DELAY"] = "0"
os.environ["CIVICWATCH_RETRY_BACKOFF"] = "0"
os.environ.pop("ANALYSIS_API_KEY", None)
os.environ.pop("OPENAI_API_KEY", None)

from civicwatch import models  # noqa: E402
from civicwatch.db import Base, SessionLocal, engine  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_article(db):
    counter = {"n": 0}

    def _make(
        title: str,
        summary: str = "",
        *,
        source_name: str = "Example News",
        published_at: datetime | None = None,
        credibility_score: float | None = None,
        bias: str | None = None,
        url: str | None = None,
    ) -> models.Article:
        counter["n"] += 1
        article = models.Article(
            url=url or f"https://news.example/{counter['n']}",
            title=title,
            summary=summary,
            source_name=source_name,
            published_at=published_at or datetime(2026, 10, 1, 12, 0),
            credibility_score=credibility_score,
            bias=bias,
        )
        db.add(article)
        db.commit()
        return article

    return _make
