"""Source control import adapters."""

from appvitals.adapters.base import BaseImporter
from appvitals.adapters.github import GitHubImporter
from appvitals.adapters.gitlab import GitLabImporter
from appvitals.adapters.sync import add_detected_applications, auto_detect_applications, sync_repositories

__all__ = [
    "BaseImporter",
    "GitHubImporter",
    "GitLabImporter",
    "add_detected_applications",
    "auto_detect_applications",
    "sync_repositories",
]
