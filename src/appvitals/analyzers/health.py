"""Repository metadata health heuristics."""

import math
from datetime import datetime, timezone

from appvitals.models.schemas import PackagePublication, RepositoryRecord

SECONDS_PER_DAY = 86400


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since(value: datetime, now: datetime | None = None) -> float:
    """Fractional days elapsed between ``value`` and ``now``."""
    now = _as_utc(now or datetime.now(timezone.utc))
    return (now - _as_utc(value)).total_seconds() / SECONDS_PER_DAY


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class HealthScorer:
    """Converts repository metadata into normalized [0, 1] sub-scores.

    Nothing here touches the network or reads repository contents; all
    scores are proxies built from stars, forks, dates and language.
    """

    # Activity recency bonus by days since last commit
    RECENCY_BONUS = [
        (7, 0.25),
        (30, 0.20),
        (90, 0.12),
        (180, 0.06),
    ]

    JS_LANGUAGES = ("JavaScript", "TypeScript")

    def repo_health(self, repo: RepositoryRecord, now: datetime | None = None) -> float:
        """Calculate repository health.

        Factors:
        - Base 0.3
        - Stars, log-scaled, capped at 0.35
        - Forks, log-scaled, capped at 0.15
        - Commit recency (step decay, up to 0.25)
        - Maturity: older than a year with more than 5 stars (+0.10)
        - Community: fork/star ratio strictly between 0.05 and 0.3 (+0.15)
        """
        stars = repo.stars_count
        forks = repo.forks_count

        score = 0.3
        score += min(0.35, math.log10(stars + 1) * 0.15)
        score += min(0.15, math.log10(forks + 1) * 0.08)
        score += self._recency_bonus(days_since(repo.last_commit_date, now))

        if self._age_days(repo, now) > 365 and stars > 5:
            score += 0.10

        if stars > 0:
            ratio = forks / stars
            if 0.05 < ratio < 0.3:
                score += 0.15

        return _clamp(score)

    def documentation(self, repo: RepositoryRecord, now: datetime | None = None) -> float:
        """Estimate documentation quality.

        Conservative: no documentation is read, stars and forks stand in for
        "good enough for people to use and contribute".
        """
        stars = repo.stars_count
        forks = repo.forks_count
        score = 0.5

        if stars > 500:
            score += 0.25
        elif stars > 100:
            score += 0.20
        elif stars > 20:
            score += 0.10

        if forks > 50:
            score += 0.15
        elif forks > 10:
            score += 0.08

        if self._age_days(repo, now) > 180 and stars > 10:
            score += 0.10

        return _clamp(score)

    def package_published(self, repo: RepositoryRecord) -> PackagePublication:
        """Guess whether the repository ships as a registry package.

        Counts language-specific indicators; two or more means found.
        """
        name = repo.repository_name
        description = (repo.description or "").lower()
        stars = repo.stars_count
        forks = repo.forks_count

        if repo.language in self.JS_LANGUAGES:
            indicators = sum([
                "npm-" in name,
                "package" in name,
                name.startswith("@"),
                stars > 100 and forks > 20,
                "npm" in description or "package" in description,
            ])
            return self._publication(indicators, 0.33, "npm")

        if repo.language == "Python":
            indicators = sum([
                "py-" in name,
                name.endswith("-py"),
                name.startswith("python-"),
                stars > 80 and forks > 15,
                "pypi" in description,
            ])
            return self._publication(indicators, 0.33, "PyPI")

        if repo.language == "Java":
            indicators = sum([
                stars > 150,
                forks > 30,
                "maven" in name,
                "maven" in description,
            ])
            return self._publication(indicators, 0.4, "Maven Central")

        return PackagePublication()

    def _publication(self, indicators: int, per_indicator: float, platform: str) -> PackagePublication:
        if indicators < 2:
            return PackagePublication(indicators=indicators)
        return PackagePublication(
            found=True,
            score=min(1.0, indicators * per_indicator),
            platform=platform,
            indicators=indicators,
        )

    def _recency_bonus(self, days: float) -> float:
        for limit, bonus in self.RECENCY_BONUS:
            if days < limit:
                return bonus
        return 0.0

    def _age_days(self, repo: RepositoryRecord, now: datetime | None) -> float:
        created = repo.created_at or repo.last_commit_date
        return days_since(created, now)
