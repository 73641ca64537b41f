"""Discovery of live deployments for repositories."""

import asyncio
import logging

from appvitals.analyzers.probe import ProbeClient
from appvitals.analyzers.scorer import Scorer
from appvitals.models.schemas import LiveUrlCheck, Platform, ProbeTier, RepositoryRecord

logger = logging.getLogger(__name__)


class DeploymentDiscovery:
    """Looks for a reachable deployment of a repository.

    Candidates, in precedence order:
    1. The URL the user provided, unless it is the repository URL itself
    2. GitHub Pages (github repositories only)
    3. Vercel
    4. Netlify

    All candidates are probed concurrently; the first reachable one in
    precedence order wins.
    """

    def __init__(
        self,
        probe_client: ProbeClient,
        scorer: Scorer | None = None,
        timeout: float = 8.0,
    ) -> None:
        self.probe_client = probe_client
        self.scorer = scorer or Scorer()
        self.timeout = timeout

    def candidate_urls(self, provided_url: str | None, repo: RepositoryRecord) -> list[str]:
        """List deployment URLs to try, in precedence order."""
        candidates = []
        if provided_url and provided_url != repo.repository_url:
            candidates.append(provided_url)

        name = repo.repository_name
        if repo.platform == Platform.GITHUB and repo.owner:
            candidates.append(f"https://{repo.owner}.github.io/{name}")
        candidates.append(f"https://{name}.vercel.app")
        candidates.append(f"https://{name}.netlify.app")

        # Keep first occurrence only
        return list(dict.fromkeys(candidates))

    async def find_live_url(self, provided_url: str | None, repo: RepositoryRecord) -> LiveUrlCheck:
        """Find a live deployment for a repository.

        Returns:
            LiveUrlCheck scored with the website tier and normalized to [0, 1],
            or an empty check if nothing was reachable.
        """
        candidates = self.candidate_urls(provided_url, repo)
        probes = await asyncio.gather(
            *(self.probe_client.probe(url, timeout=self.timeout) for url in candidates)
        )

        for probe in probes:
            if not probe.reachable:
                logger.debug(f"Deployment check failed: {probe.url}")
                continue
            website = self.scorer.score_probe(probe, ProbeTier.WEBSITE)
            logger.debug(f"Live deployment for {repo.repository_name}: {probe.url}")
            return LiveUrlCheck(
                found=True,
                score=website.score / 100,
                response_time_ms=probe.response_time_ms,
                url=probe.url,
            )

        return LiveUrlCheck()
