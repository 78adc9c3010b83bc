# tests/test_engine/test_scorer.py

import itertools

import pytest

from contributor_health.engine.models import RawContributionCount
from contributor_health.engine.scorer import ContributorHealthScorer

from conftest import counts


@pytest.fixture
def scorer():
    return ContributorHealthScorer()


def test_inactive_veteran_saturates_burnout(scorer):
    """total=60 with no recent activity against a busy history."""
    scores = scorer.score(
        counts(total_contributions=60, historical_issues=25, historical_prs=15)
    )

    assert scores.activity_trend == 0
    # 0*15 - 20 (falling trend) + 10 (experience) clamps to 0
    assert scores.engagement_score == 0
    # 70 (tenured, quiet) + 50 (low engagement) = 120, clamped
    assert scores.burnout_risk == 100
    assert scores.retention_score == 100
    assert scores.is_at_risk is True
    assert scores.is_rising_star is False


def test_rising_star(scorer):
    scores = scorer.score(
        counts(
            total_contributions=10,
            recent_issues=3,
            recent_prs=3,
            historical_issues=1,
            historical_prs=1,
        )
    )

    assert scores.activity_trend == 3.0
    assert scores.engagement_score == 100  # 90 + 25 + 10
    assert scores.retention_score == 100  # 100 + 30
    assert scores.burnout_risk == 0
    assert scores.is_rising_star is True
    assert scores.is_at_risk is False
    assert scores.is_first_time is False


def test_no_history_counts_as_stable_trend(scorer):
    scores = scorer.score(counts(total_contributions=4, recent_prs=2))

    assert scores.activity_trend == 1.0
    assert scores.engagement_score == 30  # 2*15, no trend adjustment, no bonus
    assert scores.retention_score == 50  # 4*10 + 2*5
    assert scores.burnout_risk == 0


def test_retention_veteran_bonus_only_above_ten(scorer):
    assert scorer.calculate_retention(counts(total_contributions=1)) == 10
    assert scorer.calculate_retention(counts(total_contributions=10)) == 100
    assert scorer.calculate_retention(counts(total_contributions=5, recent_issues=1)) == 55


def test_engagement_trend_adjustments(scorer):
    rising = counts(total_contributions=3, recent_issues=2, historical_issues=1)
    falling = counts(total_contributions=3, recent_issues=1, historical_issues=4)
    steady = counts(total_contributions=3, recent_issues=2, historical_issues=2)

    assert scorer.calculate_engagement(rising) == 55  # 30 + 25
    assert scorer.calculate_engagement(falling) == 0  # 15 - 20
    assert scorer.calculate_engagement(steady) == 30


def test_long_tenured_idle_contributor(scorer):
    scores = scorer.score(counts(total_contributions=150))

    # 70 + 50 + 90, clamped
    assert scores.burnout_risk == 100
    assert scores.engagement_score == 10
    assert scores.is_at_risk is True


def test_at_risk_from_low_engagement_alone(scorer):
    # total 8, one recent issue against a long history: 15 - 20 + 10 = 5
    scores = scorer.score(
        counts(total_contributions=8, recent_issues=1, historical_issues=6)
    )
    assert scores.engagement_score == 5
    assert scores.burnout_risk == 50
    assert scores.is_at_risk is True


def test_negative_and_missing_counts_are_zero(scorer):
    raw = RawContributionCount(
        total_contributions=None, recent_issues=-4, recent_prs=-1, historical_prs=None
    )
    assert raw.total_contributions == 0
    assert raw.recent_activity == 0
    assert raw.historical_activity == 0

    scores = scorer.score(raw)
    assert scores.retention_score == 0
    assert scores.is_first_time is True


@pytest.mark.parametrize("total", [0, 1, 2, 3, 50])
def test_first_time_is_exactly_total_at_most_one(scorer, total):
    scores = scorer.score(counts(total_contributions=total, recent_prs=5))
    assert scores.is_first_time == (total <= 1)


def test_scores_always_within_bounds(scorer):
    values = [0, 1, 3, 6, 12, 60, 500]
    for total, recent, historical in itertools.product(values, values, values):
        scores = scorer.score(
            counts(
                total_contributions=total,
                recent_issues=recent,
                recent_prs=recent,
                historical_prs=historical,
            )
        )
        for value in (
            scores.retention_score,
            scores.engagement_score,
            scores.burnout_risk,
        ):
            assert 0 <= value <= 100


def test_thresholds_can_be_overridden():
    scorer = ContributorHealthScorer(thresholds={"first_time_max_total": 0})
    assert scorer.score(counts(total_contributions=1)).is_first_time is False
