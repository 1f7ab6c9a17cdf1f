import random
from datetime import datetime, timedelta

import pytest

from civicwatch import models
from civicwatch.services.cluster_service import ClusterService

HOUSING_TITLE = "Parliament passes housing affordability bill after marathon debate"


def test_jaccard_similarity_nonzero_for_overlap():
    service = ClusterService()
    score = service._jaccard({"housing", "bill", "vote"}, {"housing", "bill", "senate"})
    assert score == pytest.approx(0.5)


def test_jaccard_similarity_is_zero_for_empty_sets():
    assert ClusterService._jaccard(set(), {"housing"}) == 0.0
    assert ClusterService._jaccard(set(), set()) == 0.0


def _random_article(rng: random.Random) -> models.Article:
    vocabulary = [
        "parliament", "housing", "budget", "minister", "carbon", "pricing", "senate", "election",
        "wildfire", "emergency", "inflation", "tariffs", "pipeline", "healthcare", "transit", "ballot",
    ]
    title = " ".join(rng.choice(vocabulary) for _ in range(rng.randint(0, 8)))
    summary = " ".join(rng.choice(vocabulary) for _ in range(rng.randint(0, 12)))
    return models.Article(url="https://x.example", title=title, summary=summary, source_name="S")


@pytest.mark.parametrize("seed", range(25))
def test_similarity_is_symmetric(seed):
    rng = random.Random(seed)
    service = ClusterService()
    left, right = _random_article(rng), _random_article(rng)

    assert service.similarity(left, right) == service.similarity(right, left)
    assert 0.0 <= service.similarity(left, right) <= 1.0


def test_cluster_contains_articles_over_threshold_within_window(db, make_article):
    base = datetime(2026, 10, 1, 12, 0)
    primary = make_article(HOUSING_TITLE, "Liberals celebrated the result.", published_at=base)
    close = make_article(HOUSING_TITLE, "Conservatives warned about costs.", published_at=base + timedelta(hours=2))
    too_late = make_article(HOUSING_TITLE, "Analysts revisited the vote.", published_at=base + timedelta(hours=72))
    unrelated = make_article("Wildfire evacuation ordered near Kelowna", "Crews battled flames.", published_at=base)

    cluster = ClusterService().cluster_for(db, primary)

    assert cluster.primary.id == primary.id
    assert cluster.article_ids == [primary.id, close.id]
    assert too_late.id not in cluster.article_ids
    assert unrelated.id not in cluster.article_ids
    assert cluster.scores[close.id] == pytest.approx(8 / 12)


def test_cluster_threshold_is_strict(db, make_article):
    # 6 shared keywords out of 10 unique ones gives exactly 0.6, which does not qualify
    primary = make_article("alpha bravo charlie delta echoes foxtrot golfing hotel", "")
    other = make_article("alpha bravo charlie delta echoes foxtrot india juliet", "")

    service = ClusterService()

    assert service.similarity(primary, other) == pytest.approx(0.6)
    assert service.cluster_for(db, primary).related == []


def test_cluster_is_relative_to_primary_not_transitive(db, make_article):
    a = make_article("alpha bravo charlie delta echoes foxtrot golfing hotel india juliet")
    b = make_article("alpha bravo charlie delta echoes foxtrot golfing hotel kilos limas")
    c = make_article("alpha bravo charlie delta echoes foxtrot kilos limas mikes novembers")

    service = ClusterService()

    assert service.is_related(a, b)
    assert service.is_related(b, c)
    assert not service.is_related(a, c)
    assert [article.id for article in service.cluster_for(db, a).related] == [b.id]
