import copy
import random
from types import SimpleNamespace

import pytest

from civicwatch.services.scoring import (
    assess_credibility,
    average_credibility,
    bias_level,
    bias_spread,
    public_interest_factors,
    public_interest_score,
)


def _article(title="", summary="", source_name="A", credibility_score=None, bias=None):
    return SimpleNamespace(
        title=title,
        summary=summary,
        source_name=source_name,
        credibility_score=credibility_score,
        bias=bias,
    )


@pytest.fixture
def three_outlets():
    return [
        _article(source_name="Left Daily", credibility_score=60, bias="left"),
        _article(source_name="Centre Wire", credibility_score=80, bias="center"),
        _article(source_name="Right Herald", credibility_score=75, bias="right"),
    ]


def test_overall_score_combines_credibility_diversity_and_reliability(three_outlets):
    assessment = assess_credibility(three_outlets, reliability_score=80)

    # 0.4 * 71.67 + 0.3 * 30 + 0.3 * 80
    assert assessment.overall_score == 62
    assert assessment.source_diversity == 3
    assert assessment.factual_accuracy == 80
    assert assessment.bias_level == "high diversity"


def test_degraded_reliability_uses_average_credibility(three_outlets):
    reliability = average_credibility(three_outlets)

    assert reliability == pytest.approx(71.6667, abs=1e-3)
    assert assess_credibility(three_outlets, reliability).overall_score == 59


def test_diversity_term_is_capped_at_one_hundred():
    articles = [_article(source_name=f"Outlet {i}", credibility_score=100) for i in range(15)]

    assessment = assess_credibility(articles, reliability_score=100)

    assert assessment.source_diversity == 15
    assert assessment.overall_score == 100


@pytest.mark.parametrize(
    ("biases", "expected"),
    [
        (["center", "center"], "homogeneous"),
        (["left"], "homogeneous"),
        (["left", "center"], "high diversity"),
        (["left", "right"], "high diversity"),
        ([None, "unknown"], "homogeneous"),
    ],
)
def test_bias_level_from_spread(biases, expected):
    articles = [_article(bias=bias) for bias in biases]

    assert bias_level(bias_spread(articles)) == expected


def test_bias_level_boundaries():
    assert bias_level(19.9) == "homogeneous"
    assert bias_level(20) == "moderate diversity"
    assert bias_level(49.9) == "moderate diversity"
    assert bias_level(50) == "high diversity"


def test_missing_credibility_counts_as_neutral():
    assert average_credibility([_article(), _article(credibility_score=70)]) == 60
    assert average_credibility([]) == 0.0


def test_public_interest_counts_distinct_keywords_per_article():
    article = _article(title="Minister unveils budget", summary="The budget, the minister said, is final.")

    factors = public_interest_factors([article])

    assert factors["politician_mentions"] == 10
    assert factors["policy_impact"] == 15
    assert factors["public_safety"] == 0
    assert factors["source_credibility"] == 50
    # 10 * 0.20 + 15 * 0.25 + 50 * 0.10
    assert public_interest_score([article]) == 11


def test_keywords_match_whole_words_only():
    article = _article(title="Campaign billboard lawns", summary="markets")

    factors = public_interest_factors([article])

    assert factors["politician_mentions"] == 0
    assert factors["policy_impact"] == 0
    assert factors["economic_impact"] == 0


def test_category_score_is_capped():
    article = _article(summary="emergency safety health security crisis warning alert")

    assert public_interest_factors([article, article])["public_safety"] == 100


@pytest.mark.parametrize("seed", range(20))
def test_scores_stay_in_range_and_do_not_mutate_inputs(seed):
    rng = random.Random(seed)
    vocabulary = ["minister", "budget", "crisis", "jobs", "scandal", "tax", "alert", "weather", "sports"]
    articles = [
        _article(
            title=" ".join(rng.choice(vocabulary) for _ in range(rng.randint(0, 10))),
            summary=" ".join(rng.choice(vocabulary) for _ in range(rng.randint(0, 30))),
            source_name=rng.choice(["A", "B", "C", "D"]),
            credibility_score=rng.choice([None, rng.uniform(0, 100)]),
            bias=rng.choice([None, "left", "center", "right"]),
        )
        for _ in range(rng.randint(1, 8))
    ]
    reliability = rng.uniform(0, 100)
    snapshot = copy.deepcopy([vars(article) for article in articles])

    first = assess_credibility(articles, reliability)
    interest = public_interest_score(articles)

    assert 0 <= first.overall_score <= 100
    assert 0 <= interest <= 100
    assert assess_credibility(articles, reliability) == first
    assert public_interest_score(articles) == interest
    assert [vars(article) for article in articles] == snapshot
