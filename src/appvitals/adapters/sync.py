"""Repository snapshot sync and application auto-detection."""

import logging
from collections.abc import Sequence

from appvitals.adapters.base import BaseImporter
from appvitals.models.schemas import (
    ActivityLogEntry,
    Platform,
    RepositoryRecord,
    TrackedApplication,
)
from appvitals.storage.base import PersistenceGateway

logger = logging.getLogger(__name__)

# Languages worth auto-tracking even without stars
TRACKED_LANGUAGES = {"JavaScript", "TypeScript", "Python", "Java", "Go", "Swift", "C#", "C++"}

AUTO_DETECT_LIMIT = 8

_PLATFORM_NAMES = {Platform.GITHUB: "GitHub", Platform.GITLAB: "GitLab"}


async def sync_repositories(
    importer: BaseImporter,
    gateway: PersistenceGateway,
    username: str,
    user_id: str | None = None,
) -> list[RepositoryRecord]:
    """Replace a user's repository snapshot for the importer's platform.

    Returns:
        The freshly imported records.
    """
    records = await importer.list_repositories(username, user_id=user_id)
    gateway.replace_repositories(user_id, importer.platform, records)
    logger.info(f"Replaced {importer.platform.value} snapshot for {username} ({len(records)} repositories)")

    platform = _PLATFORM_NAMES[importer.platform]
    gateway.append_activity_log(user_id, None, ActivityLogEntry(
        activity_type="integration_detected",
        title=f"{platform} Integration Synced",
        description=f"Imported {len(records)} repositories from {platform}",
    ))
    return records


def auto_detect_applications(
    repos: Sequence[RepositoryRecord],
    limit: int = AUTO_DETECT_LIMIT,
) -> list[TrackedApplication]:
    """Pick repositories worth tracking and build applications for them.

    A repository qualifies if it has any stars or uses a mainstream
    language. The first ``limit`` qualifying repositories are used, in
    input order.
    """
    selected = [
        repo for repo in repos
        if repo.stars_count > 0 or repo.language in TRACKED_LANGUAGES
    ][:limit]

    return [
        TrackedApplication(
            id=f"app-{repo.id}",
            name=repo.repository_name,
            website=repo.repository_url,
            user_id=repo.user_id,
        )
        for repo in selected
    ]


def add_detected_applications(
    gateway: PersistenceGateway,
    repos: Sequence[RepositoryRecord],
    user_id: str | None = None,
    platform: Platform = Platform.GITHUB,
) -> list[TrackedApplication]:
    """Track auto-detected applications the user doesn't track yet.

    Applications are skipped when one with the same name already exists
    for the user. An activity log entry is written if anything was added.

    Returns:
        The newly added applications.
    """
    tracked = {a.name for a in gateway.list_applications(user_id)}
    added = [a for a in auto_detect_applications(repos) if a.name not in tracked]
    if not added:
        return []

    for application in added:
        gateway.add_application(application)
    logger.info(f"Auto-detected {len(added)} applications for {user_id}")

    gateway.append_activity_log(user_id, None, ActivityLogEntry(
        activity_type="software_added",
        title="Auto-detected Software",
        description=f"Automatically added {len(added)} applications from {_PLATFORM_NAMES[platform]}",
    ))
    return added
