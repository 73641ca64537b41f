"""Scoring engine producing performance, uptime and status for applications."""

import asyncio
import logging
import math
from collections.abc import Sequence
from datetime import datetime, timezone

from appvitals.analyzers.deployment import DeploymentDiscovery
from appvitals.analyzers.health import HealthScorer
from appvitals.analyzers.matcher import RepositoryMatcher
from appvitals.analyzers.probe import ProbeClient
from appvitals.analyzers.scorer import Scorer
from appvitals.config import Settings
from appvitals.models.schemas import (
    ActivityLogEntry,
    AnalysisPath,
    AnalysisResult,
    PerformanceSample,
    ProbeTier,
    RepositoryRecord,
    SourceScore,
    TrackedApplication,
)
from appvitals.storage.base import PersistenceGateway

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class ScoringEngine:
    """Orchestrates the analysis of a tracked application.

    An application is analyzed along exactly one path:
    - Repository path, when an imported repository matches the application
    - Direct path, probing the website and/or API endpoint otherwise

    Repository path weights (out of 100):
    - Repository health: 40
    - Live deployment: 40 (flat 20 when none is found)
    - Documentation: 10
    - Published package: 10 (only when one is detected)
    A matched repository never scores below 50.
    """

    HEALTH_WEIGHT = 40
    LIVE_URL_WEIGHT = 40
    NO_LIVE_URL_CREDIT = 20
    DOCUMENTATION_WEIGHT = 10
    PACKAGE_WEIGHT = 10
    REPOSITORY_SCORE_FLOOR = 50

    SLOW_RESPONSE_MS = 5000

    def __init__(
        self,
        settings: Settings | None = None,
        probe_client: ProbeClient | None = None,
        gateway: PersistenceGateway | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            settings: Timeouts and status thresholds. Defaults to ``Settings()``.
            probe_client: Probe client. If not provided, one is created.
            gateway: Where results are written back. Nothing is persisted if None.
        """
        self.settings = settings or Settings()
        self.probe_client = probe_client or ProbeClient(user_agent=self.settings.user_agent)
        self.gateway = gateway
        self.matcher = RepositoryMatcher()
        self.health = HealthScorer()
        self.scorer = Scorer(self.settings.status_thresholds)
        self.discovery = DeploymentDiscovery(
            self.probe_client,
            scorer=self.scorer,
            timeout=self.settings.live_url_timeout,
        )

    async def analyze(
        self,
        app: TrackedApplication,
        repos: Sequence[RepositoryRecord] = (),
        now: datetime | None = None,
    ) -> AnalysisResult:
        """Analyze an application and persist the outcome.

        Args:
            app: Application to analyze.
            repos: The owner's imported repositories, in import order.
            now: Reference time for recency calculations. Defaults to now.

        Returns:
            AnalysisResult. Unexpected errors produce a zero-valued pending
            result carrying a warning; persistence errors add a warning to
            the otherwise complete result.
        """
        now = now or datetime.now(timezone.utc)
        logger.debug(f"Starting analysis for {app.name}")

        try:
            result = await self._analyze(app, repos, now)
        except Exception as e:
            logger.warning(f"Analysis of {app.name} failed: {type(e).__name__}: {e}")
            return AnalysisResult.pending(
                f"Could not fully analyze {app.name}. Manual review may be needed. ({e})"
            )

        logger.info(
            f"{app.name}: {result.performance_score}/100, "
            f"{result.uptime_percentage}% uptime, {result.status.value} "
            f"({result.analysis_path.value})"
        )

        if self.gateway is not None:
            self._persist(app, result)

        return result

    async def _analyze(
        self,
        app: TrackedApplication,
        repos: Sequence[RepositoryRecord],
        now: datetime,
    ) -> AnalysisResult:
        found = self.matcher.match_with_rule(app.name, app.website, repos)
        if found is not None:
            repo, rule = found
            logger.debug(f"Analyzing {app.name} as repository {repo.repository_name} ({rule})")
            return await self.analyze_repository(repo, app.website, now)

        return await self.analyze_direct(app)

    async def analyze_repository(
        self,
        repo: RepositoryRecord,
        provided_url: str | None = None,
        now: datetime | None = None,
    ) -> AnalysisResult:
        """Score an application backed by an imported repository."""
        now = now or datetime.now(timezone.utc)

        health = self.health.repo_health(repo, now)
        total = health * self.HEALTH_WEIGHT

        live = await self.discovery.find_live_url(provided_url, repo)
        response_time_ms = 0
        if live.found:
            total += live.score * self.LIVE_URL_WEIGHT
            response_time_ms = live.response_time_ms
        else:
            total += self.NO_LIVE_URL_CREDIT

        documentation = self.health.documentation(repo, now)
        total += documentation * self.DOCUMENTATION_WEIGHT

        package = self.health.package_published(repo)
        if package.found:
            total += package.score * self.PACKAGE_WEIGHT

        logger.debug(
            f"{repo.repository_name}: health={health:.2f} live={live.found}/{live.score:.2f} "
            f"docs={documentation:.2f} package={package.platform or '-'} total={total:.1f}"
        )

        performance_score = max(self.REPOSITORY_SCORE_FLOOR, min(100, round_half_up(total)))
        uptime = self.scorer.repository_uptime(repo, live.found, now)

        return AnalysisResult(
            performance_score=performance_score,
            uptime_percentage=uptime,
            status=self.scorer.status_for(performance_score, uptime),
            response_time_ms=response_time_ms,
            analysis_path=AnalysisPath.REPOSITORY,
            matched_repository=repo.repository_name,
            integrations_count=1 + int(live.found),
        )

    async def analyze_direct(self, app: TrackedApplication) -> AnalysisResult:
        """Score an application by probing its website and API endpoint."""
        website_task = self._probe_source(app.website, ProbeTier.WEBSITE)
        api_task = self._probe_source(app.api_endpoint, ProbeTier.API)
        website, api = await asyncio.gather(website_task, api_task)

        sources = [s for s in (website, api) if s is not None]
        if not sources:
            return AnalysisResult(analysis_path=AnalysisPath.NONE, response_time_ms=0)

        performance_score = round_half_up(sum(s.score for s in sources) / len(sources))
        uptime = round(sum(s.uptime for s in sources) / len(sources), 2)

        return AnalysisResult(
            performance_score=performance_score,
            uptime_percentage=uptime,
            status=self.scorer.status_for(performance_score, uptime),
            response_time_ms=website.response_time_ms if website else 0,
            analysis_path=AnalysisPath.DIRECT,
            integrations_count=len(sources),
        )

    async def _probe_source(self, url: str | None, tier: ProbeTier) -> SourceScore | None:
        if not url:
            return None
        timeout = self.settings.website_timeout if tier == ProbeTier.WEBSITE else self.settings.api_timeout
        probe = await self.probe_client.probe(url, timeout=timeout)
        if not probe.reachable:
            logger.debug(f"{tier.value} check failed: {url}")
        return self.scorer.score_probe(probe, tier)

    def _persist(self, app: TrackedApplication, result: AnalysisResult) -> None:
        """Write the result back through the gateway.

        Failures are recorded as warnings on ``result``; the result itself
        stays valid so the caller can retry persistence.
        """
        try:
            self.gateway.update_application(app.id, {
                "performance_score": result.performance_score,
                "uptime_percentage": result.uptime_percentage,
                "status": result.status,
                "integrations_count": result.integrations_count,
            })

            if result.response_time_ms:
                status_code = 200 if result.response_time_ms < self.SLOW_RESPONSE_MS else 500
                self.gateway.append_performance_sample(app.id, PerformanceSample(
                    response_time_ms=result.response_time_ms,
                    uptime_percentage=result.uptime_percentage,
                    status_code=status_code,
                ))

            if app.user_id:
                self.gateway.append_activity_log(app.user_id, app.id, ActivityLogEntry(
                    activity_type="software_analyzed",
                    title=f"{app.name} analysis completed",
                    description=(
                        f"Performance: {result.performance_score}/100, "
                        f"Uptime: {result.uptime_percentage}%, Status: {result.status.value}"
                    ),
                ))
        except Exception as e:
            logger.warning(f"Could not save analysis of {app.name}: {e}")
            result.warnings.append(f"Analysis of {app.name} was not saved: {e}")
