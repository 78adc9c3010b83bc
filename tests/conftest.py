"""Pytest configuration for the contributor health analyzer."""

import json
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest

from contributor_health.data.store import InMemoryStore
from contributor_health.engine.models import RawContributionCount

# Use static, absolute dates for predictable test results
NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
TODAY: date = NOW.date()  # A Monday

REPO = "acme/widgets"


def iso(days_ago: int, hours: int = 0) -> str:
    """ISO timestamp `days_ago` days before NOW, in GitHub's 'Z' format."""
    return (NOW - timedelta(days=days_ago, hours=hours)).isoformat().replace(
        "+00:00", "Z"
    )


def counts(**kwargs) -> RawContributionCount:
    return RawContributionCount(**kwargs)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def sample_prs() -> List[Dict[str, Any]]:
    """PRs in the shape written by the fetcher."""
    return [
        {
            "number": 1,
            "title": "Add widget caching",
            "state": "MERGED",
            "createdAt": iso(2),
            "closedAt": iso(1),
            "mergedAt": iso(1),
            "additions": 120,
            "deletions": 30,
            "author": {"login": "alice", "id": 101},
        },
        {
            "number": 2,
            "title": "Fix flaky test",
            "state": "OPEN",
            "createdAt": iso(2, hours=3),
            "closedAt": None,
            "mergedAt": None,
            "additions": 10,
            "deletions": 40,
            "author": {"login": "alice", "id": 101},
        },
        {
            "number": 3,
            "title": "Old refactor",
            "state": "MERGED",
            "createdAt": iso(45),
            "closedAt": iso(44),
            "mergedAt": iso(44),
            "additions": 500,
            "deletions": 200,
            "author": {"login": "bob", "id": 102},
        },
    ]


@pytest.fixture
def sample_issues() -> List[Dict[str, Any]]:
    """Issues in the shape written by the fetcher."""
    return [
        {
            "number": 10,
            "title": "Widgets render twice",
            "state": "CLOSED",
            "createdAt": iso(5),
            "closedAt": iso(3),
            "author": {"login": "alice", "id": 101},
        },
        {
            "number": 11,
            "title": "Docs typo",
            "state": "OPEN",
            "createdAt": iso(0),
            "closedAt": None,
            "author": {"login": "carol", "id": 103},
        },
        {
            "number": 12,
            "title": "Ghost issue",
            "state": "OPEN",
            "createdAt": iso(1),
            "closedAt": None,
            "author": None,
        },
    ]


@pytest.fixture
def sample_contributors() -> List[Dict[str, Any]]:
    return [
        {"login": "alice", "contributions": 8},
        {"login": "bob", "contributions": 150},
        {"login": "carol", "contributions": 1},
    ]


@pytest.fixture
def sample_profiles() -> Dict[str, Dict[str, Any]]:
    return {
        "alice": {"location": "Berlin, Germany", "name": "Alice"},
        "bob": {"location": "Munich, Germany", "name": None},
        "carol": {"location": "Tokyo, Japan", "name": "Carol"},
    }


@pytest.fixture
def temp_data_dir(
    tmp_path, sample_prs, sample_issues, sample_contributors, sample_profiles
) -> str:
    """Create a temporary data directory with the files `fetch` writes."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()

    (data_dir / "prs_raw.json").write_text(json.dumps(sample_prs))
    (data_dir / "issues_raw.json").write_text(json.dumps(sample_issues))
    (data_dir / "contributors_raw.json").write_text(json.dumps(sample_contributors))
    (data_dir / "profiles_raw.json").write_text(json.dumps(sample_profiles))

    return str(data_dir)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    monkeypatch.setenv("GITHUB_TOKEN", "test_token")
    monkeypatch.setenv("GITHUB_OWNER", "acme")
    monkeypatch.setenv("GITHUB_REPO", "widgets")
    monkeypatch.setenv("ANALYSIS_DATE", TODAY.isoformat())
    monkeypatch.setenv("SYNTHETIC_SEED", "7")
