# src/contributor_health/engine/final_reporter.py

"""Generates the detailed report for a single contributor."""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from ..data.store import HealthStore
from ..utils.helpers import now_utc, parse_datetime, today_utc
from .models import DailyMetric
from .reporter import parse_time_range, sort_insights


def activity_pattern(metrics: List[DailyMetric]) -> Optional[Dict[str, Any]]:
    """Contributions per weekday name, plus the busiest day."""
    if not metrics:
        return None

    days: Dict[str, int] = {}
    for metric in metrics:
        name = metric.date.strftime("%A")
        days[name] = days.get(name, 0) + metric.contributions_today

    most_active_day = "Monday"
    for name, total in days.items():
        if total > days.get(most_active_day, 0):
            most_active_day = name

    return {"days": days, "most_active_day": most_active_day}


def quality_metrics(
    prs: List[Dict[str, Any]], issues: List[Dict[str, Any]]
) -> Dict[str, float]:
    """PR size, merge rate and issue resolution time for one contributor's items."""
    avg_pr_size = (
        sum((pr.get("additions") or 0) + (pr.get("deletions") or 0) for pr in prs)
        / len(prs)
        if prs
        else 0
    )
    merge_rate = sum(1 for pr in prs if pr.get("mergedAt")) / len(prs) if prs else 0

    resolution_days = []
    for issue in issues:
        created = parse_datetime(issue.get("createdAt"))
        closed = parse_datetime(issue.get("closedAt"))
        if created and closed:
            resolution_days.append((closed - created).total_seconds() / 86400)

    return {
        "avg_pr_size": round(avg_pr_size, 2),
        "merge_rate": round(merge_rate, 4),
        "avg_issue_resolution_days": (
            round(sum(resolution_days) / len(resolution_days), 2)
            if resolution_days
            else 0
        ),
    }


class ContributorReporter:
    """Generates a per-contributor report from stored records and raw items."""

    def __init__(self, store: HealthStore):
        self.store = store

    def _authored_by(
        self, items: List[Dict[str, Any]], contributor_id: str, start: date
    ) -> List[Dict[str, Any]]:
        authored = []
        for item in items:
            author = item.get("author") or {}
            created = parse_datetime(item.get("createdAt"))
            if author.get("login") == contributor_id and created and created.date() >= start:
                authored.append(item)
        return authored

    def generate(
        self,
        repository_id: str,
        contributor_id: str,
        time_range: str = "30d",
        today: date | None = None,
        prs: List[Dict[str, Any]] | None = None,
        issues: List[Dict[str, Any]] | None = None,
    ) -> Dict[str, Any]:
        """Generates the complete contributor report."""
        snapshot = self.store.get_snapshot(repository_id, contributor_id)
        if snapshot is None:
            raise LookupError(
                f"No health snapshot for {contributor_id} in {repository_id}; "
                "run the analysis first."
            )

        today = today or today_utc()
        start = today - timedelta(days=parse_time_range(time_range) - 1)

        metrics = sorted(
            self.store.list_daily_metrics(
                repository_id, start, today, contributor_id=contributor_id
            ),
            key=lambda m: m.date,
            reverse=True,
        )
        insights = sort_insights(
            self.store.list_insights(repository_id, contributor_id=contributor_id)
        )

        own_prs = self._authored_by(prs or [], contributor_id, start)
        own_issues = self._authored_by(issues or [], contributor_id, start)

        return {
            "report_generated_at": now_utc().isoformat(),
            "repository": repository_id,
            "time_range": time_range,
            "contributor": snapshot.model_dump(mode="json"),
            "activity_pattern": activity_pattern(metrics),
            "quality_metrics": quality_metrics(own_prs, own_issues),
            "health_metrics": [m.model_dump(mode="json") for m in metrics],
            "insights": [i.model_dump(mode="json") for i in insights],
        }
