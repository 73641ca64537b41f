"""GitHub repository importer."""

from appvitals.adapters.base import BaseImporter, parse_timestamp
from appvitals.models.schemas import Platform, RepositoryRecord


class GitHubImporter(BaseImporter):
    """Imports a user's public repositories from the GitHub REST API.

    Data source: https://api.github.com/users/{username}/repos
    """

    BASE_URL = "https://api.github.com"

    @property
    def platform(self) -> Platform:
        return Platform.GITHUB

    def _listing_url(self, username: str) -> str:
        return f"{self.BASE_URL}/users/{username}/repos"

    def _listing_params(self) -> dict:
        return {"sort": "updated"}

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _to_record(self, data: dict, user_id: str | None) -> RepositoryRecord:
        # pushed_at tracks commits; updated_at also moves on metadata edits
        last_commit = parse_timestamp(data.get("pushed_at") or data.get("updated_at"))
        return RepositoryRecord(
            id=f"github:{data['id']}",
            platform=Platform.GITHUB,
            repository_name=data["name"],
            repository_url=data["html_url"],
            language=data.get("language"),
            description=data.get("description"),
            stars_count=data.get("stargazers_count", 0),
            forks_count=data.get("forks_count", 0),
            last_commit_date=last_commit,
            created_at=parse_timestamp(data.get("created_at")),
            user_id=user_id,
        )
