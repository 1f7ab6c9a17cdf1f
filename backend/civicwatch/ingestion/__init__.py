from civicwatch.ingestion.service import IngestionResult, IngestionRun, IngestionRunner, RunState

__all__ = ["IngestionResult", "IngestionRun", "IngestionRunner", "RunState"]
