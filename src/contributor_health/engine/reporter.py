# src/contributor_health/engine/reporter.py

from datetime import date, timedelta
from typing import Any, Dict, List

from ..data.store import HealthStore
from ..utils.helpers import now_utc, today_utc
from .models import SEVERITY_RANK, DailyMetric, HealthSnapshot, Insight
from .trend import TrendAggregator

TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}


def parse_time_range(time_range: str) -> int:
    """Converts a dashboard range like '30d' to days; unknown ranges mean a year."""
    return TIME_RANGES.get(time_range, 365)


def sort_insights(insights: List[Insight]) -> List[Insight]:
    """Most recent first, then by severity (CRITICAL first), then confidence."""
    return sorted(
        insights,
        key=lambda i: (
            -i.updated_at.timestamp(),
            SEVERITY_RANK[i.severity],
            -i.confidence,
        ),
    )


def health_distribution(snapshots: List[HealthSnapshot]) -> Dict[str, int]:
    """Buckets contributors by retention score."""
    return {
        "excellent": sum(1 for s in snapshots if s.retention_score >= 80),
        "good": sum(1 for s in snapshots if 60 <= s.retention_score < 80),
        "fair": sum(1 for s in snapshots if 40 <= s.retention_score < 60),
        "poor": sum(1 for s in snapshots if s.retention_score < 40),
    }


class ReportGenerator:
    """Builds the per-repository payload consumed by dashboards."""

    def __init__(
        self,
        store: HealthStore,
        insight_limit: int = 10,
        synthetic_seed: int | None = None,
    ):
        """
        Initialize the report generator.

        Args:
            store: Store holding snapshots, daily metrics and insights.
            insight_limit: Maximum number of active insights to include.
            synthetic_seed: Seed for the trend's synthetic fallback.
        """
        self.store = store
        self.insight_limit = insight_limit
        self.synthetic_seed = synthetic_seed

    def _aggregate_metrics(self, snapshots: List[HealthSnapshot]) -> Dict[str, Any]:
        count = len(snapshots)
        countries = sorted({s.country for s in snapshots if s.country})
        timezones = {s.timezone for s in snapshots if s.timezone}

        def average(values: List[float]) -> float:
            return round(sum(values) / count, 2) if count else 0

        return {
            "total_contributors": count,
            "first_time_contributors": sum(1 for s in snapshots if s.is_first_time),
            "at_risk_contributors": sum(1 for s in snapshots if s.is_at_risk),
            "rising_stars": sum(1 for s in snapshots if s.is_rising_star),
            "avg_retention_score": average([s.retention_score for s in snapshots]),
            "avg_engagement_score": average([s.engagement_score for s in snapshots]),
            "diversity": {
                "countries": len(countries),
                "timezones": len(timezones),
                "geographic_distribution": countries,
            },
        }

    def _contributor_entry(
        self, snapshot: HealthSnapshot, metrics: List[DailyMetric]
    ) -> Dict[str, Any]:
        entry = snapshot.model_dump(mode="json")
        recent = sorted(metrics, key=lambda m: m.date, reverse=True)[:7]
        entry["recent_activity"] = [m.model_dump(mode="json") for m in recent]
        return entry

    def generate(
        self,
        repository_id: str,
        time_range: str = "30d",
        today: date | None = None,
    ) -> Dict[str, Any]:
        """Assembles aggregate metrics, distribution, trend, contributors and insights."""
        today = today or today_utc()
        days = parse_time_range(time_range)
        start = today - timedelta(days=days - 1)

        snapshots = sorted(
            self.store.list_snapshots(repository_id),
            key=lambda s: s.total_contributions,
            reverse=True,
        )
        metrics = self.store.list_daily_metrics(repository_id, start, today)

        by_contributor: Dict[str, List[DailyMetric]] = {}
        for metric in metrics:
            by_contributor.setdefault(metric.contributor_id, []).append(metric)

        trend = TrendAggregator(window_days=days, seed=self.synthetic_seed).aggregate(
            repository_id, metrics, today=today
        )

        insights = sort_insights(self.store.list_insights(repository_id))
        if self.insight_limit:
            insights = insights[: self.insight_limit]

        return {
            "report_generated_at": now_utc().isoformat(),
            "repository": repository_id,
            "time_range": time_range,
            "metrics": self._aggregate_metrics(snapshots),
            "health_distribution": health_distribution(snapshots),
            "contribution_trend": trend.model_dump(mode="json"),
            "contributors": [
                self._contributor_entry(s, by_contributor.get(s.contributor_id, []))
                for s in snapshots
            ],
            "insights": [i.model_dump(mode="json") for i in insights],
        }
