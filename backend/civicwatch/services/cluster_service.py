from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from civicwatch import models
from civicwatch.services.content_cleaner import ContentCleaner

SIMILARITY_THRESHOLD = 0.6
RECENCY_WINDOW = timedelta(hours=48)


@dataclass
class ArticleCluster:
    primary: models.Article
    related: list[models.Article] = field(default_factory=list)
    scores: dict[str, float] = field(default_factory=dict)

    @property
    def articles(self) -> list[models.Article]:
        return [self.primary, *self.related]

    @property
    def article_ids(self) -> list[str]:
        return [article.id for article in self.articles]


class ClusterService:
    """Groups stored articles that describe the same event as a chosen primary article.

    Clusters are single-link relative to the primary: every other article whose
    keyword similarity to the primary exceeds the threshold and that was
    published within the recency window joins the cluster. Nothing is stored.
    """

    def __init__(
        self,
        cleaner: ContentCleaner | None = None,
        *,
        similarity_threshold: float = SIMILARITY_THRESHOLD,
        recency_window: timedelta = RECENCY_WINDOW,
    ) -> None:
        self.cleaner = cleaner or ContentCleaner()
        self.similarity_threshold = similarity_threshold
        self.recency_window = recency_window

    def cluster_for(self, db: Session, primary: models.Article) -> ArticleCluster:
        cluster = ArticleCluster(primary=primary)
        primary_keywords = self.keywords(primary)
        for candidate in self._candidates(db, primary):
            if not self._within_window(primary, candidate):
                continue
            score = self._jaccard(primary_keywords, self.keywords(candidate))
            if score > self.similarity_threshold:
                cluster.related.append(candidate)
                cluster.scores[candidate.id] = score
        return cluster

    def keywords(self, article: models.Article) -> set[str]:
        return set(self.cleaner.extract_keywords(f"{article.title} {article.summary or ''}"))

    def similarity(self, left: models.Article, right: models.Article) -> float:
        return self._jaccard(self.keywords(left), self.keywords(right))

    def is_related(self, left: models.Article, right: models.Article) -> bool:
        return self._within_window(left, right) and self.similarity(left, right) > self.similarity_threshold

    def _candidates(self, db: Session, primary: models.Article) -> list[models.Article]:
        query = db.query(models.Article).filter(models.Article.id != primary.id)
        reference = self._timestamp(primary)
        if reference is not None:
            since = reference - self.recency_window
            until = reference + self.recency_window
            query = query.filter(
                or_(
                    and_(models.Article.published_at >= since, models.Article.published_at <= until),
                    and_(
                        models.Article.published_at.is_(None),
                        models.Article.created_at >= since,
                        models.Article.created_at <= until,
                    ),
                )
            )
        return query.order_by(models.Article.published_at.desc()).all()

    def _within_window(self, left: models.Article, right: models.Article) -> bool:
        left_at = self._timestamp(left)
        right_at = self._timestamp(right)
        if left_at is None or right_at is None:
            return False
        return abs(left_at - right_at) <= self.recency_window

    @staticmethod
    def _timestamp(article: models.Article) -> datetime | None:
        return article.published_at or article.created_at

    @staticmethod
    def _jaccard(left: set[str], right: set[str]) -> float:
        if not left or not right:
            return 0.0
        intersection = len(left & right)
        union = len(left | right)
        if union == 0:
            return 0.0
        return intersection / union
