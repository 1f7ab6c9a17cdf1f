from dataclasses import asdict

from fastapi import Body, Depends, FastAPI, HTTPException, Path, Request
from sqlalchemy.orm import Session

from civicwatch import schemas
from civicwatch.config.settings import settings
from civicwatch.config.sources import SOURCE_REGISTRY
from civicwatch.db import Base, engine, get_db
from civicwatch.errors import ArticleNotFound, IngestionAlreadyRunning, UnknownSource
from civicwatch.ingestion import IngestionResult, IngestionRunner
from civicwatch.logging_config import configure_logging
from civicwatch.services.analysis_client import ChatCompletionClient
from civicwatch.services.analysis_service import ComparisonService, CrossSourceAnalyzer

configure_logging(settings.log_level)
Base.metadata.create_all(bind=engine)

app = FastAPI(title="CivicWatch Ingestion & Analysis API")
app.state.ingestion_runner = IngestionRunner(settings=settings)
app.state.comparison_service = ComparisonService(
    CrossSourceAnalyzer.with_client(ChatCompletionClient.from_settings(settings))
)

SOURCE_KEY_PATTERN = r"^[a-z][a-z0-9_]{1,63}$"


def get_ingestion_runner(request: Request) -> IngestionRunner:
    return request.app.state.ingestion_runner


def get_comparison_service(request: Request) -> ComparisonService:
    return request.app.state.comparison_service


def _result_response(result: IngestionResult) -> schemas.IngestionResultResponse:
    return schemas.IngestionResultResponse(**result.to_dict())


@app.get("/health", response_model=schemas.HealthResponse)
def health() -> schemas.HealthResponse:
    return schemas.HealthResponse()


@app.get("/sources")
def list_sources():
    return {"sources": [asdict(cfg) for cfg in SOURCE_REGISTRY.values()]}


@app.post("/ingest/all", response_model=schemas.IngestionRunResponse)
def ingest_all(
    payload: schemas.IngestionRunRequest | None = Body(default=None),
    runner: IngestionRunner = Depends(get_ingestion_runner),
) -> schemas.IngestionRunResponse:
    source_keys = payload.source_keys if payload else None
    try:
        run = runner.run(source_keys=source_keys)
    except UnknownSource as exc:
        raise HTTPException(status_code=404, detail=f"unknown_source:{exc.source_key}") from exc
    except IngestionAlreadyRunning as exc:
        raise HTTPException(status_code=409, detail="ingestion_in_progress") from exc

    return schemas.IngestionRunResponse(
        run_id=run.run_id,
        started_at=run.started_at,
        finished_at=run.finished_at,
        duration_ms=run.duration_ms,
        succeeded=run.succeeded,
        failed=run.failed,
        sources={key: _result_response(result) for key, result in run.results.items()},
    )


@app.get("/ingest/status", response_model=schemas.IngestionStatusResponse)
def ingest_status(runner: IngestionRunner = Depends(get_ingestion_runner)) -> schemas.IngestionStatusResponse:
    return schemas.IngestionStatusResponse(
        state=runner.state.value,
        row_counts=runner.row_counts(),
        last_results={key: _result_response(result) for key, result in runner.last_results().items()},
    )


@app.post("/ingest/{source_key}", response_model=schemas.IngestionResultResponse)
def ingest_source(
    source_key: str = Path(pattern=SOURCE_KEY_PATTERN),
    runner: IngestionRunner = Depends(get_ingestion_runner),
) -> schemas.IngestionResultResponse:
    try:
        result = runner.run_source(source_key)
    except UnknownSource as exc:
        raise HTTPException(status_code=404, detail="unknown_source") from exc
    except IngestionAlreadyRunning as exc:
        raise HTTPException(status_code=409, detail="ingestion_in_progress") from exc
    return _result_response(result)


@app.get("/analysis/{article_id}", response_model=schemas.AnalysisResponse)
def analyze_article(
    article_id: str = Path(min_length=1, max_length=64),
    db: Session = Depends(get_db),
    comparison_service: ComparisonService = Depends(get_comparison_service),
) -> schemas.AnalysisResponse:
    try:
        return comparison_service.compare(db, article_id)
    except ArticleNotFound as exc:
        raise HTTPException(status_code=404, detail="article_not_found") from exc
