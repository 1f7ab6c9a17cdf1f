from datetime import datetime

from pydantic import BaseModel, Field

from civicwatch.services.analysis_contract import Contradiction, MediaManipulation, SourceComparison


class HealthResponse(BaseModel):
    status: str = "ok"


class IngestionResultResponse(BaseModel):
    source_key: str
    success: bool
    message: str
    timestamp: datetime
    error: str | None = None
    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0


class IngestionRunRequest(BaseModel):
    source_keys: list[str] | None = Field(default=None, min_length=1)


class IngestionRunResponse(BaseModel):
    run_id: str
    started_at: datetime
    finished_at: datetime
    duration_ms: int
    succeeded: list[str]
    failed: list[str]
    sources: dict[str, IngestionResultResponse]


class IngestionStatusResponse(BaseModel):
    state: str
    row_counts: dict[str, int]
    last_results: dict[str, IngestionResultResponse]


class ClaimOut(BaseModel):
    text: str
    source: str


class ComparisonReport(BaseModel):
    topic_id: str
    article_ids: list[str]
    source_comparison: list[SourceComparison] = Field(default_factory=list)
    consensus_facts: list[str] = Field(default_factory=list)
    contradictions: list[Contradiction] = Field(default_factory=list)
    media_manipulation: MediaManipulation = Field(default_factory=MediaManipulation)
    unbiased_summary: str = ""
    reliability_score: float
    recommendations: list[str] = Field(default_factory=list)
    claims: list[ClaimOut] = Field(default_factory=list)
    degraded: bool = False
    degraded_reason: str | None = None
    analysis_strategy: str
    generated_at: datetime


class CredibilityAssessmentOut(BaseModel):
    overall_score: int
    source_diversity: int
    factual_accuracy: float
    bias_level: str


class ClusterOut(BaseModel):
    primary_article_id: str
    related_article_ids: list[str]
    similarity: dict[str, float]


class AnalysisResponse(BaseModel):
    cluster: ClusterOut
    report: ComparisonReport
    credibility_assessment: CredibilityAssessmentOut
    public_interest_score: int
