"""Test helpers: canned probe client and repository factory."""

from datetime import datetime, timedelta, timezone

from appvitals.models.schemas import Platform, ProbeResult, RepositoryRecord

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeProbeClient:
    """Probe client returning canned results per URL.

    URLs mapped to an int are reachable with that latency; URLs mapped to
    None, or not mapped at all, are unreachable.
    """

    def __init__(self, latencies: dict[str, int | None] | None = None) -> None:
        self.latencies = latencies or {}
        self.calls: list[tuple[str, float | None]] = []

    async def probe(self, url: str, timeout: float | None = None) -> ProbeResult:
        self.calls.append((url, timeout))
        latency = self.latencies.get(url)
        if latency is None:
            return ProbeResult(url=url, reachable=False, response_time_ms=int((timeout or 8) * 1000))
        return ProbeResult(url=url, reachable=True, response_time_ms=latency)

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


def make_repo(
    name: str = "widget",
    stars: int = 0,
    forks: int = 0,
    commit_days_ago: float = 400,
    age_days: float = 800,
    platform: Platform = Platform.GITHUB,
    url: str | None = None,
    language: str | None = None,
    description: str | None = None,
    user_id: str | None = "user-1",
    repo_id: str | None = None,
) -> RepositoryRecord:
    """Build a repository record relative to NOW."""
    host = "github.com" if platform == Platform.GITHUB else "gitlab.com"
    return RepositoryRecord(
        id=repo_id or f"{platform.value}:{name}",
        platform=platform,
        repository_name=name,
        repository_url=url if url is not None else f"https://{host}/octo/{name}",
        language=language,
        description=description,
        stars_count=stars,
        forks_count=forks,
        last_commit_date=NOW - timedelta(days=commit_days_ago),
        created_at=NOW - timedelta(days=age_days),
        user_id=user_id,
    )
