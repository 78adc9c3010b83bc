# src/contributor_health/engine/models.py

"""Records consumed and produced by the contributor health engine."""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


# Display priority when listing insights (lower sorts first)
SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
    Severity.SUCCESS: 3,
}


class InsightType(str, Enum):
    RISING_STAR = "RISING_STAR"
    AT_RISK = "AT_RISK"
    FIRST_TIME_CONTRIBUTOR = "FIRST_TIME_CONTRIBUTOR"
    HIGH_PERFORMER = "HIGH_PERFORMER"
    BURNOUT_WARNING = "BURNOUT_WARNING"
    ACTIVITY_SPIKE = "ACTIVITY_SPIKE"
    DIVERSITY_INSIGHT = "DIVERSITY_INSIGHT"
    # Known to the dashboard, not emitted by any rule yet
    ACTIVITY_DECLINE = "ACTIVITY_DECLINE"
    QUALITY_IMPROVEMENT = "QUALITY_IMPROVEMENT"
    COLLABORATION_STRONG = "COLLABORATION_STRONG"


def _non_negative(value) -> int:
    """Missing or negative counts are treated as zero."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return max(0, int(value))
    return value  # Let pydantic reject anything non-numeric


class RawContributionCount(BaseModel):
    """Per-contributor activity counts over the recent and historical windows."""

    model_config = ConfigDict(frozen=True)

    total_contributions: int = 0
    recent_issues: int = 0
    recent_prs: int = 0
    historical_issues: int = 0
    historical_prs: int = 0

    @field_validator(
        "total_contributions",
        "recent_issues",
        "recent_prs",
        "historical_issues",
        "historical_prs",
        mode="before",
    )
    @classmethod
    def coerce_count(cls, value):
        return _non_negative(value)

    @property
    def recent_activity(self) -> int:
        return self.recent_issues + self.recent_prs

    @property
    def historical_activity(self) -> int:
        return self.historical_issues + self.historical_prs


class ContributorProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: Optional[str] = None
    name: Optional[str] = None


class DayActivity(BaseModel):
    """Raw issue/PR counts opened by one contributor on one day."""

    model_config = ConfigDict(frozen=True)

    day: date
    issues: int = 0
    prs: int = 0

    @field_validator("issues", "prs", mode="before")
    @classmethod
    def coerce_count(cls, value):
        return _non_negative(value)


class ContributorInput(BaseModel):
    """Everything the orchestrator needs to analyze one contributor."""

    model_config = ConfigDict(frozen=True)

    contributor_id: str
    counts: RawContributionCount = Field(default_factory=RawContributionCount)
    profile: Optional[ContributorProfile] = None
    daily_activity: List[DayActivity] = Field(default_factory=list)


class HealthScores(BaseModel):
    """Output of the score calculator."""

    model_config = ConfigDict(frozen=True)

    retention_score: float
    engagement_score: float
    burnout_risk: float
    activity_trend: float
    is_first_time: bool
    is_at_risk: bool
    is_rising_star: bool


class HealthSnapshot(BaseModel):
    """Derived health record for one (contributor, repository) pair."""

    model_config = ConfigDict(frozen=True)

    contributor_id: str
    repository_id: str

    retention_score: float
    engagement_score: float
    burnout_risk: float
    activity_trend: float
    is_first_time: bool
    is_at_risk: bool
    is_rising_star: bool

    location: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None

    total_contributions: int = 0
    recent_issues: int = 0
    recent_prs: int = 0
    historical_issues: int = 0
    historical_prs: int = 0
    # Estimates, the engine only sees totals
    commits_count: int = 0
    comments_count: int = 0
    avg_days_between_contributions: Optional[float] = None

    analyzed_at: datetime

    @property
    def recent_activity(self) -> int:
        return self.recent_issues + self.recent_prs


class DailyMetric(BaseModel):
    """Day-granularity history, one record per (contributor, day)."""

    contributor_id: str
    repository_id: str
    date: date
    contributions_today: int = 0
    issues_today: int = 0
    prs_today: int = 0
    commits_today: int = 0  # Estimated from PRs
    comments_today: int = 0  # Estimated from contributions
    updated_at: Optional[datetime] = None

    def same_values(self, other: "DailyMetric") -> bool:
        """True when both records carry identical counts for the same key."""
        return self.model_dump(exclude={"updated_at"}) == other.model_dump(
            exclude={"updated_at"}
        )


class InsightDraft(BaseModel):
    """An insight produced by a rule, before it is reconciled with storage."""

    model_config = ConfigDict(frozen=True)

    type: InsightType
    title: str
    description: str
    severity: Severity
    confidence: float = Field(ge=0, le=100)


class Insight(BaseModel):
    """A stored insight, unique per (contributor, repository, type)."""

    contributor_id: str
    repository_id: str
    type: InsightType
    title: str
    description: str
    severity: Severity
    confidence: float = Field(ge=0, le=100)
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class TrendPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    issues: int
    prs: int
    commits: int
    total: int
    synthetic: bool = False


class TrendSeries(BaseModel):
    """Dense daily series; `synthetic` is True when no real activity existed."""

    model_config = ConfigDict(frozen=True)

    repository_id: str
    start: date
    end: date
    synthetic: bool
    points: List[TrendPoint] = Field(default_factory=list)
