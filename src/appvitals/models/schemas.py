"""Pydantic models for applications, repositories and analysis results."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class Platform(str, Enum):
    """Source code hosting platforms repositories are imported from."""

    GITHUB = "github"
    GITLAB = "gitlab"


class AnalysisStatus(str, Enum):
    """Coarse health tier derived from performance score and uptime."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    PENDING = "pending"

    @property
    def rank(self) -> int:
        """Position in the tier order, pending lowest."""
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [
    AnalysisStatus.PENDING,
    AnalysisStatus.POOR,
    AnalysisStatus.FAIR,
    AnalysisStatus.GOOD,
    AnalysisStatus.EXCELLENT,
]


class AnalysisPath(str, Enum):
    """Which analysis path produced a result."""

    REPOSITORY = "repository"  # Matched an imported repository
    DIRECT = "direct"  # Probed website and/or API endpoint
    NONE = "none"  # Nothing to analyze
    FAILED = "failed"  # Unexpected error, fallback result


class ProbeTier(str, Enum):
    """Latency threshold table a probe is scored against."""

    WEBSITE = "website"
    API = "api"


# --- Inputs ---


class TrackedApplication(BaseModel):
    """A user-tracked piece of software."""

    id: str
    name: str
    website: str | None = None
    api_endpoint: str | None = None
    status_page: str | None = None
    user_id: str | None = None

    # Written back by the scoring engine
    performance_score: int = 0
    uptime_percentage: float = 0.0
    status: AnalysisStatus = AnalysisStatus.PENDING
    integrations_count: int = 0


class RepositoryRecord(BaseModel):
    """An imported source control repository."""

    id: str
    platform: Platform
    repository_name: str
    repository_url: str
    language: str | None = None
    description: str | None = None
    stars_count: int = Field(default=0, ge=0)
    forks_count: int = Field(default=0, ge=0)
    last_commit_date: datetime
    created_at: datetime | None = None
    user_id: str | None = None

    @property
    def owner(self) -> str | None:
        """Owner segment of the repository URL (https://host/{owner}/...)."""
        parts = self.repository_url.split("/")
        if len(parts) > 3 and parts[3]:
            return parts[3]
        return None


# --- Intermediate results ---


class ProbeResult(BaseModel):
    """Outcome of a single reachability probe."""

    url: str
    reachable: bool
    response_time_ms: int = 0


class SourceScore(BaseModel):
    """Score and uptime estimate derived from one probe."""

    score: int = Field(ge=0, le=100)
    uptime: float = Field(ge=0, le=100)
    response_time_ms: int = 0
    reachable: bool = True


class LiveUrlCheck(BaseModel):
    """Result of searching for a live deployment of a repository."""

    found: bool = False
    score: float = Field(default=0.0, ge=0, le=1)
    response_time_ms: int = 0
    url: str | None = None


class PackagePublication(BaseModel):
    """Heuristic guess whether a repository is published as a package."""

    found: bool = False
    score: float = Field(default=0.0, ge=0, le=1)
    platform: str | None = None
    indicators: int = 0


# --- Outputs ---


class AnalysisResult(BaseModel):
    """Performance, uptime and status computed for an application."""

    performance_score: int = Field(default=0, ge=0, le=100)
    uptime_percentage: float = Field(default=0.0, ge=0, le=100)
    status: AnalysisStatus = AnalysisStatus.PENDING
    response_time_ms: int | None = None
    analysis_path: AnalysisPath = AnalysisPath.NONE
    matched_repository: str | None = None
    integrations_count: int = 0
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def pending(cls, warning: str | None = None) -> "AnalysisResult":
        """Zero-valued fallback result for a failed analysis."""
        return cls(
            analysis_path=AnalysisPath.FAILED,
            warnings=[warning] if warning else [],
        )


class PerformanceSample(BaseModel):
    """One performance log row appended after an analysis."""

    response_time_ms: int
    uptime_percentage: float
    status_code: int
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ActivityLogEntry(BaseModel):
    """Human-readable activity log row."""

    activity_type: str
    title: str
    description: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
