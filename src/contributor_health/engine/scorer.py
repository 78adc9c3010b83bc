# src/contributor_health/engine/scorer.py

"""Deterministic health scoring for individual contributors."""

from typing import Any, Dict

from ..utils.helpers import clamp
from .models import HealthScores, RawContributionCount


class ContributorHealthScorer:
    """Calculates retention, engagement and burnout scores from raw counts."""

    def __init__(self, thresholds: Dict[str, Any] | None = None):
        """Initialize the scorer, optionally overriding individual thresholds."""
        # --- CONFIGURABLE THRESHOLDS ---
        self.thresholds = {
            # Retention
            "retention_per_contribution": 10,
            "retention_per_recent": 5,
            "veteran_total": 10,
            "veteran_bonus": 20,
            # Engagement
            "engagement_per_recent": 15,
            "rising_trend": 1.2,
            "rising_trend_bonus": 25,
            "falling_trend": 0.5,
            "falling_trend_penalty": -20,
            "experienced_total": 5,
            "experience_bonus": 10,
            # Burnout
            "tenured_total": 50,
            "tenured_quiet_recent": 2,
            "tenured_quiet_risk": 70,
            "low_engagement": 30,
            "low_engagement_risk": 50,
            "long_tenured_total": 100,
            "long_tenured_idle_risk": 90,
            # Classification
            "first_time_max_total": 1,
            "at_risk_engagement": 25,
            "at_risk_min_total": 5,
            "at_risk_burnout": 60,
            "rising_star_engagement": 75,
            "rising_star_max_total": 25,
            "rising_star_min_recent": 3,
        }
        if thresholds:
            self.thresholds.update(thresholds)

    def activity_trend(self, counts: RawContributionCount) -> float:
        """Ratio of recent to historical activity; 1.0 means stable or no baseline."""
        if counts.historical_activity > 0:
            return counts.recent_activity / counts.historical_activity
        return 1.0

    def calculate_retention(self, counts: RawContributionCount) -> float:
        t = self.thresholds
        total = counts.total_contributions
        score = (
            total * t["retention_per_contribution"]
            + counts.recent_activity * t["retention_per_recent"]
            + (t["veteran_bonus"] if total > t["veteran_total"] else 0)
        )
        return clamp(score)

    def calculate_engagement(self, counts: RawContributionCount) -> float:
        t = self.thresholds
        trend = self.activity_trend(counts)

        if trend > t["rising_trend"]:
            trend_adjustment = t["rising_trend_bonus"]
        elif trend < t["falling_trend"]:
            trend_adjustment = t["falling_trend_penalty"]
        else:
            trend_adjustment = 0

        experience_bonus = (
            t["experience_bonus"]
            if counts.total_contributions > t["experienced_total"]
            else 0
        )
        score = (
            counts.recent_activity * t["engagement_per_recent"]
            + trend_adjustment
            + experience_bonus
        )
        return clamp(score)

    def calculate_burnout(
        self, counts: RawContributionCount, engagement_score: float
    ) -> float:
        """Sums three independent risk signals; a fully idle veteran saturates at 100."""
        t = self.thresholds
        total = counts.total_contributions
        recent = counts.recent_activity

        risk = 0
        if total > t["tenured_total"] and recent < t["tenured_quiet_recent"]:
            risk += t["tenured_quiet_risk"]
        if engagement_score < t["low_engagement"]:
            risk += t["low_engagement_risk"]
        if total > t["long_tenured_total"] and recent == 0:
            risk += t["long_tenured_idle_risk"]
        return clamp(risk)

    def classify(
        self,
        counts: RawContributionCount,
        engagement_score: float,
        burnout_risk: float,
    ) -> Dict[str, bool]:
        """Evaluates the first-time, at-risk and rising-star flags, in that order."""
        t = self.thresholds
        total = counts.total_contributions

        is_first_time = total <= t["first_time_max_total"]
        is_at_risk = (
            engagement_score < t["at_risk_engagement"]
            and total > t["at_risk_min_total"]
        ) or burnout_risk > t["at_risk_burnout"]
        is_rising_star = (
            engagement_score > t["rising_star_engagement"]
            and total < t["rising_star_max_total"]
            and counts.recent_activity > t["rising_star_min_recent"]
        )
        return {
            "is_first_time": is_first_time,
            "is_at_risk": is_at_risk,
            "is_rising_star": is_rising_star,
        }

    def score(self, counts: RawContributionCount) -> HealthScores:
        """Calculates all scores and classifications for one contributor."""
        retention = self.calculate_retention(counts)
        engagement = self.calculate_engagement(counts)
        burnout = self.calculate_burnout(counts, engagement)

        return HealthScores(
            retention_score=retention,
            engagement_score=engagement,
            burnout_risk=burnout,
            activity_trend=round(self.activity_trend(counts), 4),
            **self.classify(counts, engagement, burnout),
        )
