# src/contributor_health/data/store.py

"""Record storage keyed by natural identity.

Every write is read-by-key then insert-or-replace, so re-running an analysis
never duplicates or accumulates records.
"""

import json
import logging
import os
import tempfile
from datetime import date
from typing import Dict, List, Optional, Protocol, Tuple

from ..engine.models import DailyMetric, HealthSnapshot, Insight, InsightType

logger = logging.getLogger(__name__)

SnapshotKey = Tuple[str, str]
MetricKey = Tuple[str, str, date]
InsightKey = Tuple[str, str, InsightType]


class HealthStore(Protocol):
    """Persistence operations the engine relies on."""

    def save_snapshot(self, snapshot: HealthSnapshot) -> None: ...

    def get_snapshot(
        self, repository_id: str, contributor_id: str
    ) -> Optional[HealthSnapshot]: ...

    def list_snapshots(self, repository_id: str) -> List[HealthSnapshot]: ...

    def get_daily_metric(
        self, repository_id: str, contributor_id: str, day: date
    ) -> Optional[DailyMetric]: ...

    def upsert_daily_metric(self, metric: DailyMetric) -> None: ...

    def list_daily_metrics(
        self,
        repository_id: str,
        start: date,
        end: date,
        contributor_id: Optional[str] = None,
    ) -> List[DailyMetric]: ...

    def find_insight(
        self, contributor_id: str, insight_type: InsightType, repository_id: str
    ) -> Optional[Insight]: ...

    def save_insight(self, insight: Insight) -> None: ...

    def list_insights(
        self,
        repository_id: str,
        active_only: bool = True,
        contributor_id: Optional[str] = None,
    ) -> List[Insight]: ...


class InMemoryStore:
    """Dictionary-backed store; the reference implementation of `HealthStore`."""

    def __init__(self):
        self.snapshots: Dict[SnapshotKey, HealthSnapshot] = {}
        self.daily_metrics: Dict[MetricKey, DailyMetric] = {}
        self.insights: Dict[InsightKey, Insight] = {}

    # --- Snapshots: replaced wholesale on every run ---

    def save_snapshot(self, snapshot: HealthSnapshot) -> None:
        self.snapshots[(snapshot.repository_id, snapshot.contributor_id)] = snapshot

    def get_snapshot(
        self, repository_id: str, contributor_id: str
    ) -> Optional[HealthSnapshot]:
        return self.snapshots.get((repository_id, contributor_id))

    def list_snapshots(self, repository_id: str) -> List[HealthSnapshot]:
        return [s for (repo, _), s in self.snapshots.items() if repo == repository_id]

    # --- Daily metrics: one record per (contributor, day) ---

    def get_daily_metric(
        self, repository_id: str, contributor_id: str, day: date
    ) -> Optional[DailyMetric]:
        return self.daily_metrics.get((repository_id, contributor_id, day))

    def upsert_daily_metric(self, metric: DailyMetric) -> None:
        key = (metric.repository_id, metric.contributor_id, metric.date)
        self.daily_metrics[key] = metric

    def list_daily_metrics(
        self,
        repository_id: str,
        start: date,
        end: date,
        contributor_id: Optional[str] = None,
    ) -> List[DailyMetric]:
        metrics = [
            m
            for (repo, contributor, day), m in self.daily_metrics.items()
            if repo == repository_id
            and start <= day <= end
            and (contributor_id is None or contributor == contributor_id)
        ]
        return sorted(metrics, key=lambda m: (m.date, m.contributor_id))

    # --- Insights: one record per (contributor, repository, type) ---

    def find_insight(
        self, contributor_id: str, insight_type: InsightType, repository_id: str
    ) -> Optional[Insight]:
        return self.insights.get((repository_id, contributor_id, insight_type))

    def save_insight(self, insight: Insight) -> None:
        key = (insight.repository_id, insight.contributor_id, insight.type)
        self.insights[key] = insight

    def list_insights(
        self,
        repository_id: str,
        active_only: bool = True,
        contributor_id: Optional[str] = None,
    ) -> List[Insight]:
        return [
            i
            for (repo, contributor, _), i in self.insights.items()
            if repo == repository_id
            and (not active_only or i.is_active)
            and (contributor_id is None or contributor == contributor_id)
        ]


class JsonFileStore(InMemoryStore):
    """`InMemoryStore` persisted to a single JSON document."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        if os.path.exists(path):
            self._load()

    def _load(self) -> None:
        with open(self.path, "r", encoding="utf-8") as f:
            payload = json.load(f)

        for raw in payload.get("snapshots", []):
            self.save_snapshot(HealthSnapshot.model_validate(raw))
        for raw in payload.get("daily_metrics", []):
            self.upsert_daily_metric(DailyMetric.model_validate(raw))
        for raw in payload.get("insights", []):
            self.save_insight(Insight.model_validate(raw))

        logger.debug(
            "Loaded %d snapshots, %d daily metrics, %d insights from %s",
            len(self.snapshots),
            len(self.daily_metrics),
            len(self.insights),
            self.path,
        )

    def flush(self) -> None:
        """Writes the current state back to disk."""
        payload = {
            "snapshots": [s.model_dump(mode="json") for s in self.snapshots.values()],
            "daily_metrics": [
                m.model_dump(mode="json") for m in self.daily_metrics.values()
            ],
            "insights": [i.model_dump(mode="json") for i in self.insights.values()],
        }
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        # Swap in a complete file; a failed write leaves the old store intact
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory or ".",
            prefix=".store-",
            suffix=".json",
            delete=False,
        ) as tmp:
            try:
                json.dump(payload, tmp, indent=2)
            except Exception:
                tmp.close()
                os.remove(tmp.name)
                raise
        os.replace(tmp.name, self.path)
