# src/contributor_health/engine/analyzer.py

"""Runs the scoring, insight and metrics pipeline over a batch of contributors."""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from ..data.store import HealthStore
from ..utils.helpers import now_utc
from .geo import resolve_location
from .insights import InsightRuleEngine, RuleContext
from .metrics import DailyMetricsBuilder
from .models import (
    ContributorInput,
    ContributorProfile,
    HealthSnapshot,
    Insight,
    TrendSeries,
)
from .scorer import ContributorHealthScorer
from .trend import TrendAggregator

logger = logging.getLogger(__name__)

ProfileLookup = Callable[[str], Optional[ContributorProfile]]


@dataclass
class ContributorFailure:
    contributor_id: str
    stage: str
    error: str


@dataclass
class AnalysisResult:
    """Partial-success outcome of one batch run."""

    repository_id: str
    snapshots: List[HealthSnapshot] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)
    daily_metrics_written: int = 0
    failures: List[ContributorFailure] = field(default_factory=list)
    skipped: int = 0
    dominant_country: Optional[str] = None
    trend: Optional[TrendSeries] = None

    @property
    def analyzed(self) -> int:
        return len(self.snapshots)


def dominant_country(snapshots: List[HealthSnapshot]) -> Optional[str]:
    """Most common country among the snapshots; ties go to the first seen."""
    counts = Counter(s.country for s in snapshots if s.country)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


class HealthAnalyzer:
    """Sequences scoring, geo resolution, insights and daily metrics per contributor."""

    def __init__(
        self,
        store: HealthStore,
        scorer: ContributorHealthScorer | None = None,
        insight_engine: InsightRuleEngine | None = None,
        metrics_builder: DailyMetricsBuilder | None = None,
        trend_aggregator: TrendAggregator | None = None,
        max_contributors: int = 50,
        recent_window_days: int = 30,
    ):
        self.store = store
        self.scorer = scorer or ContributorHealthScorer()
        self.insight_engine = insight_engine or InsightRuleEngine()
        self.metrics_builder = metrics_builder or DailyMetricsBuilder()
        self.trend_aggregator = trend_aggregator or TrendAggregator(
            window_days=self.metrics_builder.window_days
        )
        self.max_contributors = max_contributors
        self.recent_window_days = recent_window_days

    def build_snapshot(
        self,
        repository_id: str,
        contributor: ContributorInput,
        profile_lookup: ProfileLookup | None = None,
        now: datetime | None = None,
    ) -> HealthSnapshot:
        """Scores one contributor and resolves their location."""
        now = now or now_utc()
        profile = contributor.profile
        if profile is None and profile_lookup is not None:
            profile = profile_lookup(contributor.contributor_id)

        counts = contributor.counts
        scores = self.scorer.score(counts)
        location = profile.location if profile else None
        resolved = resolve_location(location)
        total = counts.total_contributions

        return HealthSnapshot(
            contributor_id=contributor.contributor_id,
            repository_id=repository_id,
            **scores.model_dump(),
            location=location,
            country=resolved.country,
            timezone=resolved.timezone,
            total_contributions=total,
            recent_issues=counts.recent_issues,
            recent_prs=counts.recent_prs,
            historical_issues=counts.historical_issues,
            historical_prs=counts.historical_prs,
            commits_count=math.floor(total * 0.7),
            comments_count=math.floor(total * 0.3),
            avg_days_between_contributions=(
                self.recent_window_days / total if total > 1 else None
            ),
            analyzed_at=now,
        )

    def analyze(
        self,
        repository_id: str,
        contributors: List[ContributorInput],
        profile_lookup: ProfileLookup | None = None,
        today: date | None = None,
        now: datetime | None = None,
    ) -> AnalysisResult:
        """Analyzes a batch, isolating failures so one contributor never aborts the run."""
        now = now or now_utc()
        today = today or now.date()
        result = AnalysisResult(repository_id=repository_id)

        batch = contributors[: self.max_contributors]
        result.skipped = len(contributors) - len(batch)
        if result.skipped:
            logger.info(
                "Limiting analysis of %s to %d of %d contributors",
                repository_id,
                len(batch),
                len(contributors),
            )

        # Score everyone first: the dominant country depends on the whole batch.
        # Snapshots are only saved once the contributor's later stages succeed,
        # so a failed contributor keeps its previous snapshot.
        built = []
        for contributor in batch:
            try:
                snapshot = self.build_snapshot(
                    repository_id, contributor, profile_lookup, now
                )
            except Exception as exc:
                self._record_failure(result, contributor.contributor_id, "snapshot", exc)
                continue
            built.append((contributor, snapshot))

        result.dominant_country = dominant_country([s for _, s in built])
        context = RuleContext(dominant_country=result.dominant_country)

        for contributor, snapshot in built:
            stage = "insights"
            try:
                insights = self.insight_engine.apply(snapshot, self.store, context, now)
                stage = "daily_metrics"
                written = self.metrics_builder.apply(
                    contributor.contributor_id,
                    repository_id,
                    contributor.daily_activity,
                    self.store,
                    today=today,
                    now=now,
                )
                stage = "snapshot"
                self.store.save_snapshot(snapshot)
            except Exception as exc:
                self._record_failure(result, contributor.contributor_id, stage, exc)
                continue
            result.snapshots.append(snapshot)
            result.insights.extend(insights)
            result.daily_metrics_written += len(written)

        window = self.trend_aggregator.window_days
        start = today - timedelta(days=window - 1)
        result.trend = self.trend_aggregator.aggregate(
            repository_id,
            self.store.list_daily_metrics(repository_id, start, today),
            today=today,
        )

        logger.info(
            "Analyzed %d contributors of %s (%d failed, %d insights)",
            result.analyzed,
            repository_id,
            len(result.failures),
            len(result.insights),
        )
        return result

    @staticmethod
    def _record_failure(
        result: AnalysisResult, contributor_id: str, stage: str, exc: Exception
    ) -> None:
        logger.warning(
            "Error processing contributor %s during %s: %s",
            contributor_id,
            stage,
            exc,
            exc_info=True,
        )
        result.failures.append(ContributorFailure(contributor_id, stage, str(exc)))
