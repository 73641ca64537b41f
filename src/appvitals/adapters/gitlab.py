"""GitLab project importer."""

from appvitals.adapters.base import BaseImporter, parse_timestamp
from appvitals.models.schemas import Platform, RepositoryRecord


class GitLabImporter(BaseImporter):
    """Imports a user's projects from the GitLab REST API.

    Data source: https://gitlab.com/api/v4/users/{username}/projects

    GitLab does not report a primary language in the listing, so
    ``language`` is usually None.
    """

    BASE_URL = "https://gitlab.com/api/v4"

    @property
    def platform(self) -> Platform:
        return Platform.GITLAB

    def _listing_url(self, username: str) -> str:
        return f"{self.BASE_URL}/users/{username}/projects"

    def _listing_params(self) -> dict:
        return {"order_by": "last_activity_at"}

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _to_record(self, data: dict, user_id: str | None) -> RepositoryRecord:
        return RepositoryRecord(
            id=f"gitlab:{data['id']}",
            platform=Platform.GITLAB,
            repository_name=data["name"],
            repository_url=data["web_url"],
            language=data.get("programming_language"),
            description=data.get("description"),
            stars_count=data.get("star_count", 0),
            forks_count=data.get("forks_count", 0),
            last_commit_date=parse_timestamp(data.get("last_activity_at")),
            created_at=parse_timestamp(data.get("created_at")),
            user_id=user_id,
        )
