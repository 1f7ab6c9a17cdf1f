import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceConfig:
    key: str
    name: str
    domain: str
    source_format: str
    endpoint: str
    description: str
    credibility: float | None = None
    bias: str | None = None
    request_delay: float | None = None


OPENPARLIAMENT_BASE = "https://api.openparliament.ca"
DEFAULT_CKAN_SEARCH_URL = "https://open.canada.ca/data/api/action/package_search"

NEWS_SOURCES = (
    SourceConfig(
        key="news_cbc",
        name="CBC News",
        domain="article",
        source_format="rss",
        endpoint="https://www.cbc.ca/cmlink/rss-politics",
        description="CBC politics RSS feed.",
        credibility=85,
        bias="center",
    ),
    SourceConfig(
        key="news_ctv",
        name="CTV News",
        domain="article",
        source_format="rss",
        endpoint="https://www.ctvnews.ca/rss/politics/ctvnews-ca-politics-public-rss-1.822301",
        description="CTV politics RSS feed.",
        credibility=83,
        bias="center",
    ),
    SourceConfig(
        key="news_global",
        name="Global News",
        domain="article",
        source_format="rss",
        endpoint="https://globalnews.ca/politics/feed/",
        description="Global News politics RSS feed.",
        credibility=81,
        bias="center",
    ),
    SourceConfig(
        key="news_national_post",
        name="National Post",
        domain="article",
        source_format="rss",
        endpoint="https://nationalpost.com/feed/",
        description="National Post RSS feed.",
        credibility=78,
        bias="right",
    ),
)


def build_source_registry(environ: Mapping[str, str] | None = None) -> dict[str, SourceConfig]:
    """Build the registry from environment overrides.

    The election schedule has no public default feed, so that source is only
    registered when ``ELECTIONS_FEED_URL`` is set.
    """
    env = os.environ if environ is None else environ
    ckan_search_url = env.get("CKAN_SEARCH_URL", DEFAULT_CKAN_SEARCH_URL)
    sources = [
        SourceConfig(
            key="politicians",
            name="Represent (House of Commons)",
            domain="politician",
            source_format="json",
            endpoint=env.get(
                "REPRESENT_MPS_URL", "https://represent.opennorth.ca/representatives/house-of-commons/?limit=100"
            ),
            description="Sitting Members of Parliament with party, riding and contact details.",
        ),
        SourceConfig(
            key="bills",
            name="OpenParliament Bills",
            domain="bill",
            source_format="json",
            endpoint=env.get("OPENPARLIAMENT_BILLS_URL", f"{OPENPARLIAMENT_BASE}/bills/?format=json&limit=100"),
            description="Federal bills for the current and recent sessions.",
        ),
        SourceConfig(
            key="rollcalls",
            name="OpenParliament Votes",
            domain="rollcall",
            source_format="json",
            endpoint=env.get("OPENPARLIAMENT_VOTES_URL", f"{OPENPARLIAMENT_BASE}/votes/?format=json&limit=100"),
            description="House of Commons recorded divisions with yea/nay totals.",
        ),
        SourceConfig(
            key="legal_acts",
            name="Justice Laws Website",
            domain="legal_act",
            source_format="xml",
            endpoint=env.get("JUSTICE_LEGIS_XML_URL", "https://laws-lois.justice.gc.ca/eng/XML/Legis.xml"),
            description="Consolidated federal acts index published by the Department of Justice.",
        ),
        SourceConfig(
            key="procurement",
            name="Open Government Procurement",
            domain="procurement",
            source_format="json",
            endpoint=ckan_search_url,
            description="Contract award datasets from the Open Government CKAN catalogue.",
        ),
        SourceConfig(
            key="lobbyists",
            name="Open Government Lobbyist Registry",
            domain="lobbyist",
            source_format="json",
            endpoint=ckan_search_url,
            description="Lobbyist registry datasets from the Open Government CKAN catalogue.",
        ),
    ]

    elections_url = env.get("ELECTIONS_FEED_URL")
    if elections_url:
        sources.append(
            SourceConfig(
                key="elections",
                name="Election Schedule",
                domain="election",
                source_format="json",
                endpoint=elections_url,
                description="Upcoming federal, provincial and municipal election dates.",
            )
        )
    else:
        logger.info("ELECTIONS_FEED_URL not set; elections source disabled")

    sources.extend(NEWS_SOURCES)
    return {cfg.key: cfg for cfg in sources}


SOURCE_REGISTRY: dict[str, SourceConfig] = build_source_registry()
