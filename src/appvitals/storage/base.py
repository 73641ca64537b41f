"""Abstract persistence gateway and an in-memory implementation."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from appvitals.exceptions import ApplicationNotFoundError
from appvitals.models.schemas import (
    ActivityLogEntry,
    PerformanceSample,
    Platform,
    RepositoryRecord,
    TrackedApplication,
)


class PersistenceGateway(ABC):
    """Read/write contract the scoring engine persists results through.

    Implementations raise ``PersistenceError`` when a write cannot be stored.
    """

    @abstractmethod
    def get_application(self, application_id: str) -> TrackedApplication:
        """Load an application.

        Raises:
            ApplicationNotFoundError: If the id is unknown.
        """
        ...

    @abstractmethod
    def list_applications(self, user_id: str | None = None) -> list[TrackedApplication]:
        """List applications, optionally only those owned by a user."""
        ...

    @abstractmethod
    def add_application(self, application: TrackedApplication) -> None:
        """Store a new application (or overwrite one with the same id)."""
        ...

    @abstractmethod
    def list_repositories(self, user_id: str | None) -> list[RepositoryRecord]:
        """List imported repositories for a user, in import order."""
        ...

    @abstractmethod
    def replace_repositories(
        self,
        user_id: str | None,
        platform: Platform,
        repositories: Sequence[RepositoryRecord],
    ) -> None:
        """Replace a user's snapshot of repositories for one platform."""
        ...

    @abstractmethod
    def update_application(self, application_id: str, fields: dict) -> None:
        """Overwrite fields on an application (last writer wins)."""
        ...

    @abstractmethod
    def append_performance_sample(self, application_id: str, sample: PerformanceSample) -> None:
        """Append one performance sample for an application."""
        ...

    @abstractmethod
    def append_activity_log(
        self,
        user_id: str | None,
        application_id: str | None,
        entry: ActivityLogEntry,
    ) -> None:
        """Append one activity log entry."""
        ...


class InMemoryGateway(PersistenceGateway):
    """Gateway keeping everything in process memory."""

    def __init__(self) -> None:
        self.applications: dict[str, TrackedApplication] = {}
        self.repositories: list[RepositoryRecord] = []
        self.performance_logs: list[tuple[str, PerformanceSample]] = []
        self.activity_logs: list[tuple[str | None, str | None, ActivityLogEntry]] = []

    def get_application(self, application_id: str) -> TrackedApplication:
        try:
            return self.applications[application_id]
        except KeyError:
            raise ApplicationNotFoundError(application_id) from None

    def list_applications(self, user_id: str | None = None) -> list[TrackedApplication]:
        apps = list(self.applications.values())
        if user_id is None:
            return apps
        return [a for a in apps if a.user_id == user_id]

    def add_application(self, application: TrackedApplication) -> None:
        self.applications[application.id] = application

    def list_repositories(self, user_id: str | None) -> list[RepositoryRecord]:
        return [r for r in self.repositories if r.user_id == user_id]

    def replace_repositories(
        self,
        user_id: str | None,
        platform: Platform,
        repositories: Sequence[RepositoryRecord],
    ) -> None:
        kept = [
            r for r in self.repositories
            if not (r.user_id == user_id and r.platform == platform)
        ]
        self.repositories = kept + list(repositories)

    def update_application(self, application_id: str, fields: dict) -> None:
        app = self.get_application(application_id)
        self.applications[application_id] = app.model_copy(update=fields)

    def append_performance_sample(self, application_id: str, sample: PerformanceSample) -> None:
        self.performance_logs.append((application_id, sample))

    def append_activity_log(
        self,
        user_id: str | None,
        application_id: str | None,
        entry: ActivityLogEntry,
    ) -> None:
        self.activity_logs.append((user_id, application_id, entry))
