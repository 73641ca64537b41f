"""Latency tiers, repository uptime and status thresholds."""

import math
from datetime import datetime

from appvitals.analyzers.health import days_since
from appvitals.config import StatusThresholds
from appvitals.models.schemas import (
    AnalysisStatus,
    ProbeResult,
    ProbeTier,
    RepositoryRecord,
    SourceScore,
)

# (response time above ms, score, uptime), slowest first
LATENCY_TIERS = {
    ProbeTier.WEBSITE: [
        (8000, 50, 94.0),
        (5000, 65, 96.0),
        (3000, 78, 98.0),
        (1500, 88, 99.2),
        (800, 95, 99.7),
    ],
    ProbeTier.API: [
        (2000, 68, 96.5),
        (1000, 82, 98.5),
        (400, 92, 99.5),
    ],
}

FAST_SCORE = (100, 99.9)

# Unreachable websites are penalized, unreachable APIs stay near neutral
UNREACHABLE_SCORE = {
    ProbeTier.WEBSITE: (40, 90.0),
    ProbeTier.API: (50, 95.0),
}


class Scorer:
    """Turns probe latencies and repository activity into scores.

    Probe scoring (per tier):
    - Unreachable: fixed conservative score and uptime
    - Otherwise: the first latency band the response time exceeds,
      100 / 99.9 when faster than every band

    Repository uptime:
    - Base 92
    - Commit recency: <14 days +4, <60 days +2.5, <180 days +1
    - Trust: min(3, log10(stars + 1) * 1.5)
    - Live deployment found: +2.5
    - More than 20 forks: +1
    - Clamped to [90, 100]
    """

    REPOSITORY_UPTIME_BASE = 92.0
    REPOSITORY_UPTIME_FLOOR = 90.0
    UPTIME_RECENCY_BONUS = [
        (14, 4.0),
        (60, 2.5),
        (180, 1.0),
    ]

    def __init__(self, thresholds: StatusThresholds | None = None) -> None:
        self.thresholds = thresholds or StatusThresholds()

    def score_latency(self, response_time_ms: int, tier: ProbeTier) -> SourceScore:
        """Score a reachable probe by its response time."""
        for limit, score, uptime in LATENCY_TIERS[tier]:
            if response_time_ms > limit:
                return SourceScore(score=score, uptime=uptime, response_time_ms=response_time_ms)
        score, uptime = FAST_SCORE
        return SourceScore(score=score, uptime=uptime, response_time_ms=response_time_ms)

    def score_probe(self, probe: ProbeResult, tier: ProbeTier) -> SourceScore:
        """Score a probe result against a tier's thresholds."""
        if not probe.reachable:
            score, uptime = UNREACHABLE_SCORE[tier]
            return SourceScore(
                score=score,
                uptime=uptime,
                response_time_ms=probe.response_time_ms,
                reachable=False,
            )
        return self.score_latency(probe.response_time_ms, tier)

    def repository_uptime(
        self,
        repo: RepositoryRecord,
        live_url_found: bool,
        now: datetime | None = None,
    ) -> float:
        """Estimate uptime for a repository-backed application."""
        uptime = self.REPOSITORY_UPTIME_BASE

        days = days_since(repo.last_commit_date, now)
        for limit, bonus in self.UPTIME_RECENCY_BONUS:
            if days < limit:
                uptime += bonus
                break

        uptime += min(3.0, math.log10(repo.stars_count + 1) * 1.5)

        if live_url_found:
            uptime += 2.5
        if repo.forks_count > 20:
            uptime += 1.0

        return round(min(100.0, max(self.REPOSITORY_UPTIME_FLOOR, uptime)), 2)

    def status_for(self, performance_score: float, uptime_percentage: float) -> AnalysisStatus:
        """Derive the status tier from final score and uptime."""
        t = self.thresholds
        if performance_score >= t.excellent.min_score and uptime_percentage >= t.excellent.min_uptime:
            return AnalysisStatus.EXCELLENT
        elif performance_score >= t.good.min_score and uptime_percentage >= t.good.min_uptime:
            return AnalysisStatus.GOOD
        elif performance_score >= t.fair.min_score and uptime_percentage >= t.fair.min_uptime:
            return AnalysisStatus.FAIR
        elif performance_score > 0 and uptime_percentage > 0:
            return AnalysisStatus.POOR
        else:
            return AnalysisStatus.PENDING
