from civicwatch.config.sources import SOURCE_REGISTRY
from civicwatch.ingestion.adapters.base import SourceAdapter
from civicwatch.ingestion.adapters.elections import ElectionAdapter
from civicwatch.ingestion.adapters.legal import LegalActAdapter
from civicwatch.ingestion.adapters.news import NewsFeedAdapter
from civicwatch.ingestion.adapters.open_data import LobbyistAdapter, ProcurementAdapter
from civicwatch.ingestion.adapters.parliament import BillAdapter, PoliticianAdapter, RollcallAdapter

ADAPTER_CLASSES: dict[str, type[SourceAdapter]] = {
    "politician": PoliticianAdapter,
    "bill": BillAdapter,
    "rollcall": RollcallAdapter,
    "legal_act": LegalActAdapter,
    "procurement": ProcurementAdapter,
    "lobbyist": LobbyistAdapter,
    "election": ElectionAdapter,
    "article": NewsFeedAdapter,
}


def build_default_adapters(max_pages: int = 1) -> dict[str, SourceAdapter]:
    return {
        key: ADAPTER_CLASSES[config.domain](config, max_pages=max_pages)
        for key, config in SOURCE_REGISTRY.items()
    }


__all__ = ["ADAPTER_CLASSES", "SourceAdapter", "build_default_adapters"]
