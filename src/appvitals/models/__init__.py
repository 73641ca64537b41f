"""Data models and schemas."""

from appvitals.models.schemas import (
    AnalysisResult,
    AnalysisStatus,
    RepositoryRecord,
    TrackedApplication,
)

__all__ = ["TrackedApplication", "RepositoryRecord", "AnalysisResult", "AnalysisStatus"]
