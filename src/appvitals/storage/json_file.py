"""Persistence gateway backed by JSON files in a data directory."""

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from appvitals.exceptions import ApplicationNotFoundError, PersistenceError
from appvitals.models.schemas import (
    ActivityLogEntry,
    PerformanceSample,
    Platform,
    RepositoryRecord,
    TrackedApplication,
)
from appvitals.storage.base import PersistenceGateway

logger = logging.getLogger(__name__)


class JsonFileGateway(PersistenceGateway):
    """Stores records as JSON lists under ``data_dir``.

    Layout:
        data_dir/applications.json
        data_dir/repositories.json
        data_dir/performance_logs.json
        data_dir/activity_logs.json

    Every write rewrites the whole file; there is no locking between
    processes.
    """

    APPLICATIONS = "applications.json"
    REPOSITORIES = "repositories.json"
    PERFORMANCE_LOGS = "performance_logs.json"
    ACTIVITY_LOGS = "activity_logs.json"

    def __init__(self, data_dir: Path = Path("data")) -> None:
        self.data_dir = data_dir

    def _read(self, filename: str) -> list[dict]:
        filepath = self.data_dir / filename
        if not filepath.exists():
            return []
        try:
            return json.loads(filepath.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {filepath}: {e}") from e

    def _write(self, filename: str, rows: list[dict]) -> None:
        filepath = self.data_dir / filename
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            filepath.write_text(json.dumps(rows, indent=2, default=str))
        except OSError as e:
            raise PersistenceError(f"Could not write {filepath}: {e}") from e

    def _append(self, filename: str, row: dict) -> None:
        rows = self._read(filename)
        rows.append(row)
        self._write(filename, rows)

    def _load_applications(self) -> list[TrackedApplication]:
        try:
            return [TrackedApplication.model_validate(row) for row in self._read(self.APPLICATIONS)]
        except ValidationError as e:
            raise PersistenceError(f"Malformed application record: {e}") from e

    def _save_applications(self, apps: list[TrackedApplication]) -> None:
        self._write(self.APPLICATIONS, [a.model_dump(mode="json") for a in apps])

    def get_application(self, application_id: str) -> TrackedApplication:
        for app in self._load_applications():
            if app.id == application_id:
                return app
        raise ApplicationNotFoundError(application_id)

    def list_applications(self, user_id: str | None = None) -> list[TrackedApplication]:
        apps = self._load_applications()
        if user_id is None:
            return apps
        return [a for a in apps if a.user_id == user_id]

    def add_application(self, application: TrackedApplication) -> None:
        apps = [a for a in self._load_applications() if a.id != application.id]
        apps.append(application)
        self._save_applications(apps)

    def list_repositories(self, user_id: str | None) -> list[RepositoryRecord]:
        try:
            repos = [RepositoryRecord.model_validate(row) for row in self._read(self.REPOSITORIES)]
        except ValidationError as e:
            raise PersistenceError(f"Malformed repository record: {e}") from e
        return [r for r in repos if r.user_id == user_id]

    def replace_repositories(
        self,
        user_id: str | None,
        platform: Platform,
        repositories: Sequence[RepositoryRecord],
    ) -> None:
        rows = [
            row for row in self._read(self.REPOSITORIES)
            if not (row.get("user_id") == user_id and row.get("platform") == platform.value)
        ]
        rows.extend(r.model_dump(mode="json") for r in repositories)
        self._write(self.REPOSITORIES, rows)
        logger.debug(f"Stored {len(repositories)} {platform.value} repositories for {user_id}")

    def update_application(self, application_id: str, fields: dict) -> None:
        apps = self._load_applications()
        for i, app in enumerate(apps):
            if app.id == application_id:
                apps[i] = app.model_copy(update=fields)
                self._save_applications(apps)
                return
        raise ApplicationNotFoundError(application_id)

    def append_performance_sample(self, application_id: str, sample: PerformanceSample) -> None:
        row = {"software_id": application_id, **sample.model_dump(mode="json")}
        self._append(self.PERFORMANCE_LOGS, row)

    def append_activity_log(
        self,
        user_id: str | None,
        application_id: str | None,
        entry: ActivityLogEntry,
    ) -> None:
        row = {"user_id": user_id, "software_id": application_id, **entry.model_dump(mode="json")}
        self._append(self.ACTIVITY_LOGS, row)
