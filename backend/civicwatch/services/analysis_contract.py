from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from civicwatch import models
from civicwatch.services.claim_extraction import ExtractedClaim

logger = logging.getLogger(__name__)

CROSS_SOURCE_SYSTEM_PROMPT = """You are an expert media analyst specializing in detecting bias, propaganda,
and providing unbiased news analysis. Focus on Canadian media and political context.
Respond only in valid JSON, strictly following the schema contract.
"""

EXCERPT_LENGTH = 800

ANALYSIS_SCHEMA_CONTRACT = {
    "type": "object",
    "properties": {
        "sourceComparison": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "source": {"type": "string"},
                    "angle": {"type": "string"},
                    "bias": {"type": "string"},
                    "credibility": {"type": "number"},
                    "keyPoints": {"type": "array", "items": {"type": "string"}},
                    "omittedFacts": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["source"],
            },
        },
        "consensusFacts": {"type": "array", "items": {"type": "string"}},
        "contradictions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "fact": {"type": "string"},
                    "sources": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "source": {"type": "string"},
                                "claim": {"type": "string"},
                                "evidence": {"type": "string"},
                            },
                            "required": ["source", "claim"],
                        },
                    },
                },
                "required": ["fact", "sources"],
            },
        },
        "mediaManipulation": {
            "type": "object",
            "properties": {
                "detectedTechniques": {"type": "array", "items": {"type": "string"}},
                "propagandaElements": {"type": "array", "items": {"type": "string"}},
                "emotionalLanguage": {"type": "array", "items": {"type": "string"}},
            },
        },
        "unbiasedSummary": {"type": "string"},
        "reliabilityScore": {"type": "number", "minimum": 0, "maximum": 100},
        "recommendations": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["consensusFacts", "contradictions", "unbiasedSummary", "reliabilityScore"],
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _keep_valid(model: type[BaseModel], value: Any, field_name: str) -> Any:
    """Validate each list entry on its own and drop the ones that fail.

    Anything that is not a list is returned untouched so the field's own
    type check still rejects it.
    """
    if not isinstance(value, list):
        return value
    kept = []
    for index, item in enumerate(value):
        try:
            kept.append(model.model_validate(item))
        except ValidationError as exc:
            logger.debug("dropping malformed %s[%d]: %s", field_name, index, exc.errors()[0].get("msg"))
    return kept


class SourceComparison(_CamelModel):
    source: str
    angle: str | None = None
    bias: str | None = None
    credibility: float | None = None
    key_points: list[str] = Field(default_factory=list, validation_alias="keyPoints")
    omitted_facts: list[str] = Field(default_factory=list, validation_alias="omittedFacts")


class ContradictionSource(_CamelModel):
    source: str
    claim: str
    evidence: str = ""


class Contradiction(_CamelModel):
    fact: str
    sources: list[ContradictionSource] = Field(min_length=1)

    @field_validator("sources", mode="before")
    @classmethod
    def _drop_malformed_sources(cls, value: Any) -> Any:
        return _keep_valid(ContradictionSource, value, "sources")


class MediaManipulation(_CamelModel):
    detected_techniques: list[str] = Field(default_factory=list, validation_alias="detectedTechniques")
    propaganda_elements: list[str] = Field(default_factory=list, validation_alias="propagandaElements")
    emotional_language: list[str] = Field(default_factory=list, validation_alias="emotionalLanguage")


class CrossSourceAnalysis(_CamelModel):
    source_comparison: list[SourceComparison] = Field(default_factory=list, validation_alias="sourceComparison")
    consensus_facts: list[str] = Field(validation_alias="consensusFacts")
    contradictions: list[Contradiction]
    media_manipulation: MediaManipulation = Field(
        default_factory=MediaManipulation, validation_alias="mediaManipulation"
    )
    unbiased_summary: str = Field(validation_alias="unbiasedSummary")
    reliability_score: float = Field(validation_alias="reliabilityScore", ge=0.0, le=100.0)
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("source_comparison", mode="before")
    @classmethod
    def _drop_malformed_comparisons(cls, value: Any) -> Any:
        return _keep_valid(SourceComparison, value, "sourceComparison")

    @field_validator("contradictions", mode="before")
    @classmethod
    def _drop_malformed_contradictions(cls, value: Any) -> Any:
        # a contradiction left without any attributed source is dropped too
        return _keep_valid(Contradiction, value, "contradictions")

    @field_validator("media_manipulation", mode="before")
    @classmethod
    def _reset_malformed_manipulation(cls, value: Any) -> Any:
        try:
            return MediaManipulation.model_validate(value)
        except ValidationError:
            return MediaManipulation()


@dataclass
class AnalysisPrompt:
    system_prompt: str
    user_prompt: str


def _describe_article(article: models.Article) -> str:
    body = (article.summary or "")[:EXCERPT_LENGTH]
    credibility = article.credibility_score if article.credibility_score is not None else "unknown"
    return (
        f"Source: {article.source_name}\n"
        f"Title: {article.title}\n"
        f"Content: {body}\n"
        f"Bias Rating: {article.bias or 'unknown'}\n"
        f"Credibility: {credibility}\n"
    )


def build_cross_source_prompt(
    primary: models.Article,
    related: list[models.Article],
    claims: list[ExtractedClaim],
) -> AnalysisPrompt:
    related_text = "\n".join(_describe_article(article) for article in related) or "(none)\n"
    claim_text = "\n".join(f"{idx}. {claim.text} (Source: {claim.source})" for idx, claim in enumerate(claims, 1))
    user_prompt = (
        "Analyze these news articles covering the same story from different sources.\n\n"
        "PRIMARY ARTICLE:\n"
        f"{_describe_article(primary)}\n"
        "RELATED ARTICLES:\n"
        f"{related_text}\n"
        "ATTRIBUTED CLAIMS:\n"
        f"{claim_text or '(none)'}\n\n"
        "Return a JSON object matching this schema:\n"
        f"{json.dumps(ANALYSIS_SCHEMA_CONTRACT)}"
    )
    return AnalysisPrompt(system_prompt=CROSS_SOURCE_SYSTEM_PROMPT, user_prompt=user_prompt)


def parse_cross_source_json(model_output_json: str) -> CrossSourceAnalysis:
    try:
        payload = json.loads(model_output_json)
        return CrossSourceAnalysis.model_validate(payload)
    except (json.JSONDecodeError, TypeError, ValidationError) as exc:
        raise ValueError(f"Invalid cross-source analysis output: {exc}") from exc
