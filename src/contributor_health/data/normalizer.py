"""Turns fetched GitHub issues and pull requests into engine inputs."""

import json
import os
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from ..engine.models import (
    ContributorInput,
    ContributorProfile,
    DayActivity,
    RawContributionCount,
)
from ..utils.helpers import group_by_day, today_utc
from .fetcher import GHOST_LOGIN


class ActivityNormalizer:
    """Indexes issues and PRs by author and day for contribution counting."""

    def __init__(
        self,
        prs: List[Dict[str, Any]],
        issues: List[Dict[str, Any]],
        today: date | None = None,
        recent_window_days: int = 30,
        historical_window_days: int = 60,
    ):
        """Initialize the normalizer with fetched PR and issue data.

        Args:
            prs: Pull requests as written by the fetcher.
            issues: Issues as written by the fetcher.
            today: Last day of the recent window (inclusive).
            recent_window_days: Length of the recent window.
            historical_window_days: Length of the window preceding it.
        """
        self.prs = prs
        self.issues = issues
        self.today = today or today_utc()
        self.recent_window_days = recent_window_days
        self.historical_window_days = historical_window_days
        # login -> day -> [issues, prs]
        self.daily: Dict[str, Dict[date, List[int]]] = defaultdict(
            lambda: defaultdict(lambda: [0, 0])
        )
        self._index(issues, slot=0)
        self._index(prs, slot=1)

    def _index(self, items: List[Dict[str, Any]], slot: int) -> None:
        for day, day_items in group_by_day(items).items():
            for item in day_items:
                author = item.get("author") or {}
                login = author.get("login")
                if not login or login == GHOST_LOGIN:
                    continue
                self.daily[login][day][slot] += 1

    def _count_between(self, login: str, start: date, end: date) -> List[int]:
        issues, prs = 0, 0
        for day, (day_issues, day_prs) in self.daily.get(login, {}).items():
            if start <= day <= end:
                issues += day_issues
                prs += day_prs
        return [issues, prs]

    def counts_for(self, login: str, total_contributions: int) -> RawContributionCount:
        """Recent and historical issue/PR counts for one contributor."""
        recent_start = self.today - timedelta(days=self.recent_window_days - 1)
        historical_end = recent_start - timedelta(days=1)
        historical_start = historical_end - timedelta(
            days=self.historical_window_days - 1
        )

        recent_issues, recent_prs = self._count_between(login, recent_start, self.today)
        historical_issues, historical_prs = self._count_between(
            login, historical_start, historical_end
        )
        return RawContributionCount(
            total_contributions=total_contributions,
            recent_issues=recent_issues,
            recent_prs=recent_prs,
            historical_issues=historical_issues,
            historical_prs=historical_prs,
        )

    def daily_activity_for(self, login: str, window_days: int) -> List[DayActivity]:
        """Per-day counts for one contributor within the trailing window."""
        start = self.today - timedelta(days=window_days - 1)
        return [
            DayActivity(day=day, issues=counts[0], prs=counts[1])
            for day, counts in sorted(self.daily.get(login, {}).items())
            if start <= day <= self.today
        ]

    def build_inputs(
        self,
        contributors: List[Dict[str, Any]],
        profiles: Optional[Dict[str, Dict[str, Any]]] = None,
        metrics_window_days: int = 30,
    ) -> List[ContributorInput]:
        """Combines the contributor list, profiles and indexed activity.

        Args:
            contributors: Entries with `login` and lifetime `contributions`.
            profiles: Optional mapping of login to `{location, name}`.
            metrics_window_days: Window for the per-day activity.

        Returns:
            One `ContributorInput` per contributor with a login.
        """
        profiles = profiles or {}
        inputs = []

        for contributor in contributors:
            login = contributor.get("login")
            if not login:
                continue

            raw_profile = profiles.get(login)
            inputs.append(
                ContributorInput(
                    contributor_id=login,
                    counts=self.counts_for(login, contributor.get("contributions")),
                    profile=(
                        ContributorProfile(
                            location=raw_profile.get("location"),
                            name=raw_profile.get("name"),
                        )
                        if raw_profile
                        else None
                    ),
                    daily_activity=self.daily_activity_for(login, metrics_window_days),
                )
            )

        return inputs

    @classmethod
    def from_data_dir(
        cls,
        data_dir: str,
        today: date | None = None,
        recent_window_days: int = 30,
        historical_window_days: int = 60,
    ) -> "ActivityNormalizer":
        """Loads `prs_raw.json` and `issues_raw.json` written by the fetcher."""
        with open(os.path.join(data_dir, "prs_raw.json"), "r", encoding="utf-8") as f:
            prs = json.load(f)
        with open(
            os.path.join(data_dir, "issues_raw.json"), "r", encoding="utf-8"
        ) as f:
            issues = json.load(f)

        return cls(
            prs,
            issues,
            today=today,
            recent_window_days=recent_window_days,
            historical_window_days=historical_window_days,
        )
