# src/contributor_health/engine/insights.py

"""Rule table that turns a health snapshot into insights, and reconciles them with storage."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from ..data.store import HealthStore
from ..utils.helpers import now_utc
from .models import HealthSnapshot, Insight, InsightDraft, InsightType, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleContext:
    """Repository-level facts some rules compare a contributor against."""

    dominant_country: Optional[str] = None


@dataclass(frozen=True)
class InsightRule:
    type: InsightType
    predicate: Callable[[HealthSnapshot, RuleContext], bool]
    build: Callable[[HealthSnapshot, RuleContext], InsightDraft]


def _rising_star(s: HealthSnapshot, ctx: RuleContext) -> InsightDraft:
    return InsightDraft(
        type=InsightType.RISING_STAR,
        title="Rising Star Contributor",
        description=(
            f"{s.contributor_id} shows excellent engagement with high recent "
            "activity. Consider recognizing their contributions."
        ),
        severity=Severity.SUCCESS,
        confidence=min(95, 70 + s.engagement_score / 2),
    )


def _at_risk(s: HealthSnapshot, ctx: RuleContext) -> InsightDraft:
    return InsightDraft(
        type=InsightType.AT_RISK,
        title="Contributor at Risk",
        description=(
            f"{s.contributor_id} has been less active recently despite previous "
            "contributions. Consider reaching out."
        ),
        severity=Severity.WARNING,
        confidence=min(90, 60 + s.burnout_risk / 2),
    )


def _first_time(s: HealthSnapshot, ctx: RuleContext) -> InsightDraft:
    return InsightDraft(
        type=InsightType.FIRST_TIME_CONTRIBUTOR,
        title="First-time Contributor",
        description=(
            f"Welcome {s.contributor_id}! This is their first contribution "
            "to the project."
        ),
        severity=Severity.INFO,
        confidence=95,
    )


def _high_performer(s: HealthSnapshot, ctx: RuleContext) -> InsightDraft:
    return InsightDraft(
        type=InsightType.HIGH_PERFORMER,
        title="High Performer",
        description=(
            f"{s.contributor_id} combines strong retention with exceptional "
            "recent engagement."
        ),
        severity=Severity.SUCCESS,
        confidence=min(95, (s.retention_score + s.engagement_score) / 2),
    )


def _burnout_warning(s: HealthSnapshot, ctx: RuleContext) -> InsightDraft:
    return InsightDraft(
        type=InsightType.BURNOUT_WARNING,
        title="Burnout Risk Detected",
        description=(
            f"{s.contributor_id} may be at risk of burnout "
            f"(risk {s.burnout_risk:.0f}/100). Consider checking in on their "
            "wellbeing."
        ),
        severity=Severity.CRITICAL,
        confidence=s.burnout_risk,
    )


def _activity_spike(s: HealthSnapshot, ctx: RuleContext) -> InsightDraft:
    return InsightDraft(
        type=InsightType.ACTIVITY_SPIKE,
        title="Activity Spike",
        description=(
            f"{s.contributor_id} opened {s.recent_activity} issues and pull "
            "requests recently, well above their overall history."
        ),
        severity=Severity.INFO,
        confidence=min(90, 50 + s.recent_activity * 5),
    )


def _diversity(s: HealthSnapshot, ctx: RuleContext) -> InsightDraft:
    return InsightDraft(
        type=InsightType.DIVERSITY_INSIGHT,
        title="Geographic Diversity",
        description=(
            f"{s.contributor_id} contributes from {s.country}, outside the "
            f"project's main contributor base in {ctx.dominant_country}."
        ),
        severity=Severity.INFO,
        confidence=85,
    )


DEFAULT_RULES: List[InsightRule] = [
    InsightRule(InsightType.RISING_STAR, lambda s, ctx: s.is_rising_star, _rising_star),
    InsightRule(InsightType.AT_RISK, lambda s, ctx: s.is_at_risk, _at_risk),
    InsightRule(
        InsightType.FIRST_TIME_CONTRIBUTOR, lambda s, ctx: s.is_first_time, _first_time
    ),
    InsightRule(
        InsightType.HIGH_PERFORMER,
        lambda s, ctx: s.retention_score > 80 and s.engagement_score > 70,
        _high_performer,
    ),
    InsightRule(
        InsightType.BURNOUT_WARNING, lambda s, ctx: s.burnout_risk > 70, _burnout_warning
    ),
    InsightRule(
        InsightType.ACTIVITY_SPIKE,
        lambda s, ctx: s.recent_activity > 5 and s.total_contributions < 20,
        _activity_spike,
    ),
    InsightRule(
        InsightType.DIVERSITY_INSIGHT,
        lambda s, ctx: bool(s.country)
        and ctx.dominant_country is not None
        and s.country != ctx.dominant_country,
        _diversity,
    ),
]


class InsightRuleEngine:
    """Evaluates independent insight rules and upserts their results."""

    def __init__(self, rules: List[InsightRule] | None = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def evaluate(
        self, snapshot: HealthSnapshot, context: RuleContext | None = None
    ) -> List[InsightDraft]:
        """Returns one draft per firing rule; each type at most once."""
        context = context or RuleContext()
        drafts: List[InsightDraft] = []
        seen = set()
        for rule in self.rules:
            if rule.type in seen:
                continue
            if rule.predicate(snapshot, context):
                drafts.append(rule.build(snapshot, context))
                seen.add(rule.type)
        return drafts

    def apply(
        self,
        snapshot: HealthSnapshot,
        store: HealthStore,
        context: RuleContext | None = None,
        now: datetime | None = None,
    ) -> List[Insight]:
        """Evaluates the rules and reconciles the drafts with stored insights.

        An existing record keyed by (contributor, type, repository) is updated
        in place; otherwise a new one is inserted. Records whose rule no longer
        fires are deactivated. Returns the insights active after this run.
        """
        now = now or now_utc()
        drafts = self.evaluate(snapshot, context)
        fired = {draft.type for draft in drafts}
        active: List[Insight] = []

        for draft in drafts:
            existing = store.find_insight(
                snapshot.contributor_id, draft.type, snapshot.repository_id
            )
            if existing is not None:
                insight = existing.model_copy(
                    update={
                        "title": draft.title,
                        "description": draft.description,
                        "severity": draft.severity,
                        "confidence": draft.confidence,
                        "is_active": True,
                        "updated_at": now,
                    }
                )
            else:
                insight = Insight(
                    contributor_id=snapshot.contributor_id,
                    repository_id=snapshot.repository_id,
                    created_at=now,
                    updated_at=now,
                    **draft.model_dump(),
                )
                logger.debug(
                    "New %s insight for %s", draft.type.value, snapshot.contributor_id
                )
            store.save_insight(insight)
            active.append(insight)

        for stale in store.list_insights(
            snapshot.repository_id,
            active_only=True,
            contributor_id=snapshot.contributor_id,
        ):
            if stale.type not in fired:
                store.save_insight(
                    stale.model_copy(update={"is_active": False, "updated_at": now})
                )

        return active
