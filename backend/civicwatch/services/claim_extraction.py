from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from civicwatch import models

FACTUAL_INDICATORS = (
    "said",
    "announced",
    "reported",
    "confirmed",
    "denied",
    "stated",
    "according to",
    "data shows",
)

SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
MIN_CLAIM_LENGTH = 20
MAX_CLAIMS = 20


@dataclass(frozen=True)
class ExtractedClaim:
    text: str
    source: str


def appears_factual(sentence: str) -> bool:
    lowered = sentence.lower()
    return any(indicator in lowered for indicator in FACTUAL_INDICATORS)


def extract_claims(articles: Iterable[models.Article], limit: int = MAX_CLAIMS) -> list[ExtractedClaim]:
    """Attributed statements from article summaries, in article order."""
    claims: list[ExtractedClaim] = []
    for article in articles:
        for sentence in SENTENCE_SPLIT_PATTERN.split(article.summary or ""):
            sentence = sentence.strip()
            if len(sentence) > MIN_CLAIM_LENGTH and appears_factual(sentence):
                claims.append(ExtractedClaim(text=sentence, source=article.source_name))
                if len(claims) == limit:
                    return claims
    return claims
