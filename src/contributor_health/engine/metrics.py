# src/contributor_health/engine/metrics.py

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List

from ..data.store import HealthStore
from ..utils.helpers import now_utc, round_half_up, today_utc, trailing_days
from .models import DailyMetric, DayActivity

logger = logging.getLogger(__name__)

# Fixed proxy ratios: the engine sees issue/PR counts only, so commits and
# comments are estimates, not measurements.
COMMITS_PER_PR = 2.5
COMMENTS_PER_CONTRIBUTION = 0.5


class DailyMetricsBuilder:
    """Builds and upserts one metrics record per contributor per day."""

    def __init__(self, window_days: int = 30):
        """Initialize the builder with the trailing window length (today inclusive)."""
        self.window_days = window_days

    @staticmethod
    def compute_metric(
        contributor_id: str,
        repository_id: str,
        day: date,
        issues: int,
        prs: int,
    ) -> DailyMetric:
        """Derives the full metric record for one day from raw issue/PR counts."""
        issues = max(0, issues)
        prs = max(0, prs)
        contributions = issues + prs
        return DailyMetric(
            contributor_id=contributor_id,
            repository_id=repository_id,
            date=day,
            contributions_today=contributions,
            issues_today=issues,
            prs_today=prs,
            commits_today=round_half_up(prs * COMMITS_PER_PR),
            comments_today=round_half_up(contributions * COMMENTS_PER_CONTRIBUTION),
        )

    def build(
        self,
        contributor_id: str,
        repository_id: str,
        activity: Iterable[DayActivity],
        today: date | None = None,
    ) -> List[DailyMetric]:
        """Returns one metric per day of the window, zero-filled where idle."""
        today = today or today_utc()
        by_day: Dict[date, DayActivity] = {}
        for entry in activity:
            # Duplicate entries for a day are merged rather than overwritten
            if entry.day in by_day:
                prev = by_day[entry.day]
                entry = DayActivity(
                    day=entry.day,
                    issues=prev.issues + entry.issues,
                    prs=prev.prs + entry.prs,
                )
            by_day[entry.day] = entry

        metrics = []
        for day in trailing_days(today, self.window_days):
            entry = by_day.get(day)
            metrics.append(
                self.compute_metric(
                    contributor_id,
                    repository_id,
                    day,
                    entry.issues if entry else 0,
                    entry.prs if entry else 0,
                )
            )
        return metrics

    def apply(
        self,
        contributor_id: str,
        repository_id: str,
        activity: Iterable[DayActivity],
        store: HealthStore,
        today: date | None = None,
        now: datetime | None = None,
    ) -> List[DailyMetric]:
        """Upserts the window's metrics keyed by (contributor, day).

        Running this twice with the same inputs leaves exactly one record per
        day with unchanged values; unchanged records keep their timestamp.
        """
        now = now or now_utc()
        written: List[DailyMetric] = []
        changed = 0

        for metric in self.build(contributor_id, repository_id, activity, today):
            existing = store.get_daily_metric(repository_id, contributor_id, metric.date)
            if existing is not None and existing.same_values(metric):
                written.append(existing)
                continue
            metric = metric.model_copy(update={"updated_at": now})
            store.upsert_daily_metric(metric)
            written.append(metric)
            changed += 1

        logger.debug(
            "Daily metrics for %s: %d of %d days changed",
            contributor_id,
            changed,
            len(written),
        )
        return written
