# tests/test_engine/test_analyzer.py

from datetime import timedelta

from contributor_health.engine.analyzer import HealthAnalyzer, dominant_country
from contributor_health.engine.metrics import DailyMetricsBuilder
from contributor_health.engine.models import (
    ContributorInput,
    ContributorProfile,
    DayActivity,
    InsightType,
)
from contributor_health.engine.trend import TrendAggregator

from conftest import NOW, REPO, TODAY, counts


def contributor(login, location=None, activity=None, **count_fields):
    return ContributorInput(
        contributor_id=login,
        counts=counts(**count_fields),
        profile=ContributorProfile(location=location) if location else None,
        daily_activity=activity or [],
    )


def make_analyzer(store, **kwargs):
    return HealthAnalyzer(
        store,
        metrics_builder=DailyMetricsBuilder(window_days=7),
        trend_aggregator=TrendAggregator(window_days=7, seed=1),
        **kwargs,
    )


def batch():
    return [
        contributor(
            "alice",
            location="Berlin, Germany",
            activity=[DayActivity(day=TODAY, issues=1, prs=2)],
            total_contributions=10,
            recent_issues=3,
            recent_prs=3,
            historical_prs=2,
        ),
        contributor("bob", location="Munich, Germany", total_contributions=150),
        contributor("carol", location="Tokyo, Japan", total_contributions=1),
    ]


def test_analyze_builds_snapshots_insights_and_metrics(store):
    result = make_analyzer(store).analyze(REPO, batch(), today=TODAY, now=NOW)

    assert result.analyzed == 3
    assert result.failures == []
    assert result.dominant_country == "Germany"
    assert result.daily_metrics_written == 21

    alice = store.get_snapshot(REPO, "alice")
    assert alice.is_rising_star is True
    assert alice.country == "Germany"
    assert alice.timezone == "Europe/Berlin"
    assert alice.commits_count == 7
    assert alice.comments_count == 3
    assert alice.avg_days_between_contributions == 3.0

    carol = store.get_snapshot(REPO, "carol")
    assert carol.is_first_time is True
    assert carol.avg_days_between_contributions is None

    carol_types = {i.type for i in store.list_insights(REPO, contributor_id="carol")}
    assert carol_types == {
        InsightType.FIRST_TIME_CONTRIBUTOR,
        InsightType.DIVERSITY_INSIGHT,
    }
    bob_types = {i.type for i in store.list_insights(REPO, contributor_id="bob")}
    assert bob_types == {InsightType.AT_RISK, InsightType.BURNOUT_WARNING}

    assert result.trend.synthetic is False
    assert result.trend.points[-1].issues == 1
    assert result.trend.points[-1].prs == 2


def test_failure_is_isolated_to_one_contributor(store):
    def lookup(login):
        if login == "bob":
            raise ConnectionError("profile service down")
        return ContributorProfile(location="Paris, France")

    contributors = [
        contributor("alice", total_contributions=5),
        contributor("bob", total_contributions=5),
        contributor("carol", total_contributions=5),
    ]
    result = make_analyzer(store).analyze(
        REPO, contributors, profile_lookup=lookup, today=TODAY, now=NOW
    )

    assert [s.contributor_id for s in result.snapshots] == ["alice", "carol"]
    assert len(result.failures) == 1
    failure = result.failures[0]
    assert failure.contributor_id == "bob"
    assert failure.stage == "snapshot"
    assert "profile service down" in failure.error
    assert store.get_snapshot(REPO, "bob") is None
    assert store.get_snapshot(REPO, "carol").country == "France"


def test_failed_contributor_keeps_previous_snapshot(store):
    analyzer = make_analyzer(store)
    analyzer.analyze(REPO, [contributor("bob", total_contributions=5)], today=TODAY, now=NOW)
    before = store.get_snapshot(REPO, "bob")

    def broken(login):
        raise RuntimeError("boom")

    later = NOW + timedelta(days=1)
    result = analyzer.analyze(
        REPO,
        [contributor("bob", total_contributions=500)],
        profile_lookup=broken,
        today=TODAY,
        now=later,
    )

    assert result.analyzed == 0
    assert store.get_snapshot(REPO, "bob") == before


def test_insight_stage_failure_does_not_stop_batch(store):
    class FlakyStore(type(store)):
        def find_insight(self, contributor_id, insight_type, repository_id):
            if contributor_id == "carol":
                raise IOError("disk full")
            return super().find_insight(contributor_id, insight_type, repository_id)

    flaky = FlakyStore()
    result = make_analyzer(flaky).analyze(REPO, batch(), today=TODAY, now=NOW)

    assert [(f.contributor_id, f.stage) for f in result.failures] == [
        ("carol", "insights")
    ]
    assert result.analyzed == 2
    assert result.daily_metrics_written == 14
    assert flaky.list_insights(REPO, contributor_id="bob")
    assert flaky.get_snapshot(REPO, "carol") is None
    assert flaky.list_daily_metrics(
        REPO, TODAY - timedelta(days=6), TODAY, contributor_id="carol"
    ) == []
    # Carol still counts towards the dominant country of the batch
    assert result.dominant_country == "Germany"


def test_insight_failure_keeps_previous_snapshot_and_metrics(store):
    class FlakyStore(type(store)):
        broken = False

        def find_insight(self, contributor_id, insight_type, repository_id):
            if self.broken:
                raise IOError("disk full")
            return super().find_insight(contributor_id, insight_type, repository_id)

    flaky = FlakyStore()
    analyzer = make_analyzer(flaky)
    analyzer.analyze(
        REPO,
        [
            contributor(
                "bob",
                activity=[DayActivity(day=TODAY, prs=1)],
                total_contributions=5,
            )
        ],
        today=TODAY,
        now=NOW,
    )
    before = flaky.get_snapshot(REPO, "bob")

    flaky.broken = True
    result = analyzer.analyze(
        REPO,
        [
            contributor(
                "bob",
                activity=[DayActivity(day=TODAY, issues=4)],
                total_contributions=500,
            )
        ],
        today=TODAY,
        now=NOW + timedelta(days=1),
    )

    assert [(f.contributor_id, f.stage) for f in result.failures] == [
        ("bob", "insights")
    ]
    assert result.analyzed == 0
    assert flaky.get_snapshot(REPO, "bob") == before
    metric = flaky.get_daily_metric(REPO, "bob", TODAY)
    assert (metric.issues_today, metric.prs_today) == (0, 1)


def test_metrics_failure_keeps_previous_snapshot(store):
    class BrokenBuilder(DailyMetricsBuilder):
        def apply(self, *args, **kwargs):
            raise ValueError("bad activity")

    analyzer = make_analyzer(store)
    analyzer.analyze(REPO, [contributor("bob", total_contributions=5)], today=TODAY, now=NOW)
    before = store.get_snapshot(REPO, "bob")

    analyzer.metrics_builder = BrokenBuilder(window_days=7)
    result = analyzer.analyze(
        REPO,
        [contributor("bob", total_contributions=500)],
        today=TODAY,
        now=NOW + timedelta(days=1),
    )

    assert [(f.contributor_id, f.stage) for f in result.failures] == [
        ("bob", "daily_metrics")
    ]
    assert result.insights == []
    assert store.get_snapshot(REPO, "bob") == before


def test_running_twice_does_not_duplicate(store):
    analyzer = make_analyzer(store)
    first = analyzer.analyze(REPO, batch(), today=TODAY, now=NOW)
    second = analyzer.analyze(
        REPO, batch(), today=TODAY, now=NOW + timedelta(hours=1)
    )

    assert {(i.contributor_id, i.type) for i in first.insights} == {
        (i.contributor_id, i.type) for i in second.insights
    }
    assert len(store.list_insights(REPO, active_only=False)) == len(first.insights)
    assert len(store.daily_metrics) == 21
    assert len(store.snapshots) == 3
    assert second.trend == first.trend


def test_batch_is_capped(store):
    contributors = [contributor(f"user{i}", total_contributions=i) for i in range(5)]
    result = make_analyzer(store, max_contributors=3).analyze(
        REPO, contributors, today=TODAY, now=NOW
    )
    assert result.analyzed == 3
    assert result.skipped == 2


def test_empty_repository_gets_flagged_synthetic_trend(store):
    result = make_analyzer(store).analyze(
        REPO, [contributor("carol", total_contributions=1)], today=TODAY, now=NOW
    )
    assert result.trend.synthetic is True
    assert all(p.synthetic for p in result.trend.points)


def test_dominant_country_ties_go_to_first_seen(store):
    analyzer = make_analyzer(store)
    snapshots = [
        analyzer.build_snapshot(REPO, contributor("a", location="Tokyo"), now=NOW),
        analyzer.build_snapshot(REPO, contributor("b", location="Paris"), now=NOW),
        analyzer.build_snapshot(REPO, contributor("c"), now=NOW),
    ]
    assert dominant_country(snapshots) == "Japan"
    assert dominant_country([snapshots[2]]) is None
