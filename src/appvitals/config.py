"""Runtime configuration for the scoring engine."""

import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from appvitals.exceptions import ConfigError


class StatusThreshold(BaseModel):
    """Minimum performance score and uptime for one status tier."""

    min_score: float
    min_uptime: float


class StatusThresholds(BaseModel):
    """Status tier table.

    Tiers are checked from excellent down to fair using inclusive minimums.
    Anything with a positive score and uptime that misses all three is poor,
    everything else is pending.
    """

    excellent: StatusThreshold = StatusThreshold(min_score=85, min_uptime=98)
    good: StatusThreshold = StatusThreshold(min_score=70, min_uptime=96)
    fair: StatusThreshold = StatusThreshold(min_score=55, min_uptime=93)


class Settings(BaseModel):
    """Engine and CLI settings.

    Values come from keyword arguments or, via ``from_env``, from environment
    variables (a ``.env`` file is honoured by the CLI).
    """

    website_timeout: float = Field(default=10.0, gt=0)
    api_timeout: float = Field(default=8.0, gt=0)
    live_url_timeout: float = Field(default=8.0, gt=0)
    user_agent: str = "appvitals/0.1"
    data_dir: Path = Path("data")
    github_token: str | None = None
    gitlab_token: str | None = None
    max_concurrent_analyses: int = Field(default=4, ge=1)
    status_thresholds: StatusThresholds = Field(default_factory=StatusThresholds)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from ``APPVITALS_*`` environment variables.

        Raises:
            ConfigError: If a numeric variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        float_vars = {
            "APPVITALS_WEBSITE_TIMEOUT": "website_timeout",
            "APPVITALS_API_TIMEOUT": "api_timeout",
            "APPVITALS_LIVE_URL_TIMEOUT": "live_url_timeout",
        }
        for var, field_name in float_vars.items():
            if env.get(var):
                values[field_name] = _parse_number(var, env[var], float)

        if env.get("APPVITALS_MAX_CONCURRENT"):
            values["max_concurrent_analyses"] = _parse_number(
                "APPVITALS_MAX_CONCURRENT", env["APPVITALS_MAX_CONCURRENT"], int
            )
        if env.get("APPVITALS_DATA_DIR"):
            values["data_dir"] = Path(env["APPVITALS_DATA_DIR"])
        if env.get("APPVITALS_USER_AGENT"):
            values["user_agent"] = env["APPVITALS_USER_AGENT"]

        values["github_token"] = env.get("GITHUB_TOKEN") or None
        values["gitlab_token"] = env.get("GITLAB_TOKEN") or None

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e


def _parse_number(var: str, raw: str, kind: type) -> float | int:
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{var} must be a number, got {raw!r}") from e
