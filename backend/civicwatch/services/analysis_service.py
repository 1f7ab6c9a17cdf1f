from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol, Union

from sqlalchemy.orm import Session

from civicwatch import models, schemas
from civicwatch.errors import AnalysisUnavailable, ArticleNotFound
from civicwatch.services.analysis_client import TextAnalysisClient
from civicwatch.services.analysis_contract import build_cross_source_prompt, parse_cross_source_json
from civicwatch.services.claim_extraction import ExtractedClaim, extract_claims
from civicwatch.services.cluster_service import ArticleCluster, ClusterService
from civicwatch.services.scoring import assess_credibility, average_credibility, public_interest_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    report: schemas.ComparisonReport


@dataclass(frozen=True)
class Unavailable:
    reason: str


StrategyOutcome = Union[Ok, Unavailable]


class AnalysisStrategy(Protocol):
    name: str

    def run(self, cluster: ArticleCluster, claims: list[ExtractedClaim]) -> StrategyOutcome:
        ...


def _claims_out(claims: list[ExtractedClaim]) -> list[schemas.ClaimOut]:
    return [schemas.ClaimOut(text=claim.text, source=claim.source) for claim in claims]


class ExternalAnalysisStrategy:
    """One request to the text-analysis capability, retried at most once."""

    name = "external"

    def __init__(self, client: TextAnalysisClient, max_attempts: int = 2) -> None:
        self.client = client
        self.max_attempts = max_attempts

    def run(self, cluster: ArticleCluster, claims: list[ExtractedClaim]) -> StrategyOutcome:
        prompt = build_cross_source_prompt(cluster.primary, cluster.related, claims)
        reasons: list[str] = []
        for attempt in range(1, self.max_attempts + 1):
            try:
                raw = self.client.complete_json(prompt.system_prompt, prompt.user_prompt)
                analysis = parse_cross_source_json(raw)
            except (AnalysisUnavailable, ValueError) as exc:
                reasons.append(str(exc))
                logger.warning(
                    "analysis attempt %d/%d for %s failed: %s", attempt, self.max_attempts, cluster.primary.id, exc
                )
                continue
            return Ok(
                schemas.ComparisonReport(
                    topic_id=cluster.primary.id,
                    article_ids=cluster.article_ids,
                    source_comparison=analysis.source_comparison,
                    consensus_facts=analysis.consensus_facts,
                    contradictions=analysis.contradictions,
                    media_manipulation=analysis.media_manipulation,
                    unbiased_summary=analysis.unbiased_summary,
                    reliability_score=analysis.reliability_score,
                    recommendations=analysis.recommendations,
                    claims=_claims_out(claims),
                    analysis_strategy=self.name,
                    generated_at=datetime.utcnow(),
                )
            )
        return Unavailable("; ".join(reasons) or "no attempts made")


class HeuristicAnalysisStrategy:
    """Locally computable report: no consensus or contradictions, reliability from declared credibility."""

    name = "heuristic"

    def run(self, cluster: ArticleCluster, claims: list[ExtractedClaim]) -> StrategyOutcome:
        return Ok(
            schemas.ComparisonReport(
                topic_id=cluster.primary.id,
                article_ids=cluster.article_ids,
                reliability_score=average_credibility(cluster.articles),
                claims=_claims_out(claims),
                degraded=True,
                analysis_strategy=self.name,
                generated_at=datetime.utcnow(),
            )
        )


class CrossSourceAnalyzer:
    """Tries each named strategy in order and returns the first report produced.

    The heuristic strategy always succeeds, so ``analyze`` always returns a
    well-formed report. Any report coming after an unavailable strategy is
    marked degraded.
    """

    def __init__(self, strategies: Sequence[AnalysisStrategy]) -> None:
        if not strategies:
            raise ValueError("at least one analysis strategy is required")
        self.strategies = list(strategies)

    @classmethod
    def with_client(cls, client: TextAnalysisClient) -> "CrossSourceAnalyzer":
        return cls([ExternalAnalysisStrategy(client), HeuristicAnalysisStrategy()])

    def analyze(self, cluster: ArticleCluster) -> schemas.ComparisonReport:
        claims = extract_claims(cluster.articles)
        unavailable: list[str] = []
        for strategy in self.strategies:
            try:
                outcome = strategy.run(cluster, claims)
            except Exception as exc:
                logger.exception("analysis strategy %s raised", strategy.name)
                outcome = Unavailable(f"{exc.__class__.__name__}: {exc}")

            if isinstance(outcome, Ok):
                report = outcome.report
                if unavailable:
                    report = report.model_copy(update={"degraded": True, "degraded_reason": "; ".join(unavailable)})
                    logger.warning("analysis for %s degraded to %s", cluster.primary.id, strategy.name)
                return report
            unavailable.append(f"{strategy.name}: {outcome.reason}")

        return HeuristicAnalysisStrategy().run(cluster, claims).report.model_copy(
            update={"degraded_reason": "; ".join(unavailable)}
        )


class ComparisonService:
    def __init__(self, analyzer: CrossSourceAnalyzer, cluster_service: ClusterService | None = None) -> None:
        self.analyzer = analyzer
        self.cluster_service = cluster_service or ClusterService()

    def compare(self, db: Session, article_id: str) -> schemas.AnalysisResponse:
        primary = db.query(models.Article).filter(models.Article.id == article_id).first()
        if primary is None:
            raise ArticleNotFound(article_id)

        cluster = self.cluster_service.cluster_for(db, primary)
        report = self.analyzer.analyze(cluster)
        assessment = assess_credibility(cluster.articles, report.reliability_score)
        return schemas.AnalysisResponse(
            cluster=schemas.ClusterOut(
                primary_article_id=primary.id,
                related_article_ids=[article.id for article in cluster.related],
                similarity=cluster.scores,
            ),
            report=report,
            credibility_assessment=schemas.CredibilityAssessmentOut(**asdict(assessment)),
            public_interest_score=public_interest_score(cluster.articles),
        )
