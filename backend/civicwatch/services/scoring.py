"""Deterministic credibility and public-interest scoring for an article cluster."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

BIAS_POSITIONS = {"left": 0.0, "center": 50.0, "right": 100.0}
NEUTRAL_BIAS_POSITION = 50.0
DEFAULT_CREDIBILITY = 50.0


class ScoredArticle(Protocol):
    title: str
    summary: str | None
    source_name: str
    credibility_score: float | None
    bias: str | None


@dataclass(frozen=True)
class KeywordCategory:
    name: str
    keywords: tuple[str, ...]
    points_per_hit: int
    weight: float

    def pattern(self) -> re.Pattern[str]:
        return re.compile(r"\b(?:" + "|".join(re.escape(k) for k in self.keywords) + r")\b")


POLITICIAN_MENTIONS = KeywordCategory(
    "politician_mentions",
    ("mp", "minister", "prime minister", "premier", "mayor", "councillor", "senator"),
    10,
    0.20,
)
POLICY_IMPACT = KeywordCategory(
    "policy_impact",
    ("bill", "law", "policy", "regulation", "budget", "tax", "healthcare", "education"),
    15,
    0.25,
)
PUBLIC_SAFETY = KeywordCategory(
    "public_safety",
    ("emergency", "safety", "health", "security", "crisis", "warning", "alert"),
    20,
    0.20,
)
ECONOMIC_IMPACT = KeywordCategory(
    "economic_impact",
    ("economy", "jobs", "employment", "business", "market", "inflation", "gdp"),
    12,
    0.15,
)
CONTROVERSY = KeywordCategory(
    "controversy",
    ("scandal", "controversy", "dispute", "conflict", "protest", "criticism"),
    15,
    0.10,
)
KEYWORD_CATEGORIES = (POLITICIAN_MENTIONS, POLICY_IMPACT, PUBLIC_SAFETY, ECONOMIC_IMPACT, CONTROVERSY)
SOURCE_CREDIBILITY_WEIGHT = 0.10


@dataclass(frozen=True)
class CredibilityAssessment:
    overall_score: int
    source_diversity: int
    factual_accuracy: float
    bias_level: str


def clamp_score(value: float) -> int:
    return int(min(100, max(0, round(value))))


def average_credibility(articles: Sequence[ScoredArticle]) -> float:
    if not articles:
        return 0.0
    total = sum(
        article.credibility_score if article.credibility_score is not None else DEFAULT_CREDIBILITY
        for article in articles
    )
    return total / len(articles)


def source_diversity(articles: Sequence[ScoredArticle]) -> int:
    return len({article.source_name for article in articles})


def bias_spread(articles: Sequence[ScoredArticle]) -> float:
    if not articles:
        return 0.0
    positions = [BIAS_POSITIONS.get((article.bias or "").lower(), NEUTRAL_BIAS_POSITION) for article in articles]
    return max(positions) - min(positions)


def bias_level(spread: float) -> str:
    if spread < 20:
        return "homogeneous"
    if spread < 50:
        return "moderate diversity"
    return "high diversity"


def assess_credibility(articles: Sequence[ScoredArticle], reliability_score: float) -> CredibilityAssessment:
    diversity = source_diversity(articles)
    overall = (
        0.4 * average_credibility(articles)
        + 0.3 * min(100, 10 * diversity)
        + 0.3 * reliability_score
    )
    return CredibilityAssessment(
        overall_score=clamp_score(overall),
        source_diversity=diversity,
        factual_accuracy=reliability_score,
        bias_level=bias_level(bias_spread(articles)),
    )


def category_score(category: KeywordCategory, articles: Sequence[ScoredArticle]) -> int:
    pattern = category.pattern()
    hits = 0
    for article in articles:
        text = f"{article.title} {article.summary or ''}".lower()
        hits += len(set(pattern.findall(text)))
    return min(100, hits * category.points_per_hit)


def public_interest_factors(articles: Sequence[ScoredArticle]) -> dict[str, float]:
    factors: dict[str, float] = {category.name: category_score(category, articles) for category in KEYWORD_CATEGORIES}
    factors["source_credibility"] = min(100.0, average_credibility(articles))
    return factors


def public_interest_score(articles: Sequence[ScoredArticle]) -> int:
    factors = public_interest_factors(articles)
    weighted = sum(factors[category.name] * category.weight for category in KEYWORD_CATEGORIES)
    weighted += factors["source_credibility"] * SOURCE_CREDIBILITY_WEIGHT
    return clamp_score(weighted)
