# tests/test_data/test_normalizer.py

from datetime import timedelta

from contributor_health.data.normalizer import ActivityNormalizer

from conftest import TODAY, iso


def test_counts_split_recent_and_historical(sample_prs, sample_issues):
    normalizer = ActivityNormalizer(sample_prs, sample_issues, today=TODAY)

    alice = normalizer.counts_for("alice", 8)
    assert alice.total_contributions == 8
    assert alice.recent_prs == 2
    assert alice.recent_issues == 1
    assert alice.historical_activity == 0

    bob = normalizer.counts_for("bob", 150)
    assert bob.recent_activity == 0
    assert bob.historical_prs == 1


def test_window_boundaries():
    issues = [
        {"createdAt": iso(29), "author": {"login": "dave"}},  # last recent day
        {"createdAt": iso(30), "author": {"login": "dave"}},  # first historical day
        {"createdAt": iso(89), "author": {"login": "dave"}},  # last historical day
        {"createdAt": iso(90), "author": {"login": "dave"}},  # outside both
    ]
    counts = ActivityNormalizer([], issues, today=TODAY).counts_for("dave", 4)
    assert counts.recent_issues == 1
    assert counts.historical_issues == 2


def test_ghost_and_dateless_items_are_skipped(sample_issues):
    issues = sample_issues + [
        {"createdAt": None, "author": {"login": "carol"}},
        {"createdAt": iso(2), "author": {"login": "ghost", "id": None}},
    ]
    normalizer = ActivityNormalizer([], issues, today=TODAY)
    assert set(normalizer.daily) == {"alice", "carol"}
    assert normalizer.counts_for("carol", 1).recent_issues == 1


def test_daily_activity_for(sample_prs, sample_issues):
    normalizer = ActivityNormalizer(sample_prs, sample_issues, today=TODAY)
    activity = normalizer.daily_activity_for("alice", 7)

    # Both PRs fall on the same day, the issue five days back
    assert [(a.day, a.issues, a.prs) for a in activity] == [
        (TODAY - timedelta(days=5), 1, 0),
        (TODAY - timedelta(days=2), 0, 2),
    ]
    assert normalizer.daily_activity_for("bob", 30) == []


def test_build_inputs(sample_prs, sample_issues, sample_contributors, sample_profiles):
    normalizer = ActivityNormalizer(sample_prs, sample_issues, today=TODAY)
    contributors = sample_contributors + [{"login": None, "contributions": 3}]

    inputs = normalizer.build_inputs(contributors, {"alice": sample_profiles["alice"]})

    assert [i.contributor_id for i in inputs] == ["alice", "bob", "carol"]
    assert inputs[0].profile.location == "Berlin, Germany"
    assert inputs[1].profile is None
    assert inputs[1].counts.total_contributions == 150
    assert len(inputs[0].daily_activity) == 2


def test_from_data_dir(temp_data_dir):
    normalizer = ActivityNormalizer.from_data_dir(temp_data_dir, today=TODAY)
    assert len(normalizer.prs) == 3
    assert len(normalizer.issues) == 3
