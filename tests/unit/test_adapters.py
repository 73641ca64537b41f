"""Unit tests for repository importers and sync."""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from appvitals.adapters import (
    GitHubImporter,
    GitLabImporter,
    add_detected_applications,
    auto_detect_applications,
    sync_repositories,
)
from appvitals.exceptions import RepositoryImportError
from appvitals.models.schemas import Platform, TrackedApplication
from appvitals.storage import InMemoryGateway
from tests.helpers import make_repo


def github_repo(n: int, **overrides) -> dict:
    data = {
        "id": n,
        "name": f"repo-{n}",
        "html_url": f"https://github.com/octo/repo-{n}",
        "description": "A repository",
        "language": "Python",
        "stargazers_count": 12,
        "forks_count": 3,
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2025-05-01T00:00:00Z",
        "pushed_at": "2025-04-30T10:00:00Z",
    }
    data.update(overrides)
    return data


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGitHubImporter:
    """Tests for the GitHub importer."""

    def test_maps_repositories(self) -> None:
        """Test request shape and field mapping."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[github_repo(1), github_repo(2, language=None)])

        async def run():
            async with _client(handler) as client:
                importer = GitHubImporter(token="secret", client=client)
                return await importer.list_repositories("octo", user_id="u1")

        records = asyncio.run(run())

        request = requests[0]
        assert request.url.path == "/users/octo/repos"
        assert request.url.params["sort"] == "updated"
        assert request.url.params["per_page"] == "100"
        assert request.headers["Authorization"] == "Bearer secret"

        first = records[0]
        assert first.id == "github:1"
        assert first.platform == Platform.GITHUB
        assert first.repository_name == "repo-1"
        assert first.repository_url == "https://github.com/octo/repo-1"
        assert first.stars_count == 12
        assert first.last_commit_date == datetime(2025, 4, 30, 10, 0, tzinfo=timezone.utc)
        assert first.created_at == datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert first.user_id == "u1"
        assert records[1].language is None

    def test_paginates(self) -> None:
        """Test that full pages trigger another request."""
        pages = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            pages.append(page)
            if page == 1:
                return httpx.Response(200, json=[github_repo(i) for i in range(100)])
            return httpx.Response(200, json=[github_repo(100)])

        async def run():
            async with _client(handler) as client:
                return await GitHubImporter(client=client).list_repositories("octo")

        records = asyncio.run(run())

        assert len(records) == 101
        assert pages == [1, 2]

    def test_unknown_user_is_empty(self) -> None:
        """Test that a 404 yields no repositories."""

        async def run():
            async with _client(lambda request: httpx.Response(404)) as client:
                return await GitHubImporter(client=client).list_repositories("nobody")

        assert asyncio.run(run()) == []

    def test_api_error_raises(self) -> None:
        """Test that other errors surface as import errors."""

        async def run():
            async with _client(lambda request: httpx.Response(403)) as client:
                return await GitHubImporter(client=client).list_repositories("octo")

        with pytest.raises(RepositoryImportError) as exc_info:
            asyncio.run(run())

        assert exc_info.value.status_code == 403
        assert exc_info.value.platform == "github"


class TestGitLabImporter:
    """Tests for the GitLab importer."""

    def test_maps_projects(self) -> None:
        """Test request shape and field mapping."""
        requests = []
        project = {
            "id": 7,
            "name": "infra",
            "web_url": "https://gitlab.com/octo/infra",
            "description": None,
            "star_count": 4,
            "forks_count": 1,
            "created_at": "2021-03-01T08:00:00.000Z",
            "last_activity_at": "2025-05-20T12:30:00.000Z",
        }

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[project])

        async def run():
            async with _client(handler) as client:
                return await GitLabImporter(client=client).list_repositories("octo")

        [record] = asyncio.run(run())

        assert requests[0].url.path == "/api/v4/users/octo/projects"
        assert requests[0].url.params["order_by"] == "last_activity_at"
        assert "Authorization" not in requests[0].headers
        assert record.id == "gitlab:7"
        assert record.platform == Platform.GITLAB
        assert record.stars_count == 4
        assert record.language is None
        assert record.last_commit_date == datetime(2025, 5, 20, 12, 30, tzinfo=timezone.utc)


class TestSync:
    """Tests for snapshot replacement and auto-detection."""

    def test_sync_replaces_snapshot_and_logs(self) -> None:
        """Test that a sync swaps the platform snapshot and records activity."""
        gateway = InMemoryGateway()
        gateway.replace_repositories("u1", Platform.GITHUB, [make_repo(name="stale", user_id="u1")])

        async def run():
            async with _client(lambda request: httpx.Response(200, json=[github_repo(1)])) as client:
                return await sync_repositories(GitHubImporter(client=client), gateway, "octo", user_id="u1")

        records = asyncio.run(run())

        assert [r.repository_name for r in gateway.list_repositories("u1")] == ["repo-1"]
        assert records == gateway.list_repositories("u1")
        [(user_id, app_id, entry)] = gateway.activity_logs
        assert (user_id, app_id) == ("u1", None)
        assert entry.activity_type == "integration_detected"
        assert entry.title == "GitHub Integration Synced"
        assert entry.description == "Imported 1 repositories from GitHub"

    def test_auto_detect_filters_and_limits(self) -> None:
        """Test which repositories become tracked applications."""
        repos = [
            make_repo(name="starred", stars=3, language="Haskell"),
            make_repo(name="unstarred-go", language="Go"),
            make_repo(name="unstarred-other", language="Haskell"),
            make_repo(name="unknown"),
        ] + [make_repo(name=f"py-{i}", language="Python") for i in range(10)]

        apps = auto_detect_applications(repos)

        assert len(apps) == 8
        assert [a.name for a in apps[:3]] == ["starred", "unstarred-go", "py-0"]
        assert apps[0].website == "https://github.com/octo/starred"
        assert apps[0].user_id == "user-1"

    def test_add_detected_applications_logs_activity(self) -> None:
        """Test that newly tracked applications are recorded in the activity log."""
        gateway = InMemoryGateway()
        gateway.add_application(TrackedApplication(id="existing", name="starred", user_id="user-1"))
        repos = [
            make_repo(name="starred", stars=3),
            make_repo(name="fresh", language="Python"),
        ]

        added = add_detected_applications(gateway, repos, user_id="user-1")

        assert [a.name for a in added] == ["fresh"]
        assert {a.name for a in gateway.list_applications("user-1")} == {"starred", "fresh"}
        [(user_id, app_id, entry)] = gateway.activity_logs
        assert (user_id, app_id) == ("user-1", None)
        assert entry.activity_type == "software_added"
        assert entry.title == "Auto-detected Software"
        assert entry.description == "Automatically added 1 applications from GitHub"

    def test_add_detected_applications_nothing_new(self) -> None:
        """Test that no activity is logged when nothing was added."""
        gateway = InMemoryGateway()

        added = add_detected_applications(gateway, [make_repo(name="quiet")], user_id="user-1")

        assert added == []
        assert gateway.applications == {}
        assert gateway.activity_logs == []
