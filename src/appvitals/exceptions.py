"""Exceptions raised by appvitals."""


class AppVitalsError(Exception):
    """Base class for appvitals errors."""


class ConfigError(AppVitalsError):
    """Raised when configuration values cannot be parsed."""


class PersistenceError(AppVitalsError):
    """Raised when the persistence gateway fails to store or load records."""


class ApplicationNotFoundError(AppVitalsError):
    """Raised when an application id is unknown to the gateway."""

    def __init__(self, application_id: str) -> None:
        self.application_id = application_id
        super().__init__(f"Application '{application_id}' not found")


class RepositoryImportError(AppVitalsError):
    """Raised when a source control provider rejects a repository listing."""

    def __init__(self, platform: str, username: str, status_code: int | None = None) -> None:
        self.platform = platform
        self.username = username
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Failed to list {platform} repositories for '{username}'{detail}")
