"""Abstract base class for repository import adapters."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime

import httpx

from appvitals.exceptions import RepositoryImportError
from appvitals.models.schemas import Platform, RepositoryRecord

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 API timestamp, accepting a trailing Z."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class BaseImporter(ABC):
    """Base class for source control providers.

    Each importer lists a user's repositories from a provider API and
    normalizes them into ``RepositoryRecord``s.
    """

    PER_PAGE = 100

    def __init__(
        self,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        max_pages: int = 10,
    ) -> None:
        """Initialize the importer.

        Args:
            token: Provider access token. Anonymous requests are rate limited harder.
            client: Optional httpx client. If not provided, a new client is created.
            max_pages: Upper bound on pages fetched per listing.
        """
        self._token = token
        self._client = client
        self.max_pages = max_pages

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Return the platform this importer handles."""
        ...

    @abstractmethod
    def _listing_url(self, username: str) -> str:
        """URL of the user's repository listing."""
        ...

    @abstractmethod
    def _listing_params(self) -> dict:
        """Query parameters for the listing, besides paging."""
        ...

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        """Headers for provider API requests."""
        ...

    @abstractmethod
    def _to_record(self, data: dict, user_id: str | None) -> RepositoryRecord:
        """Normalize one API item."""
        ...

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=30.0)

    async def _fetch_all_pages(self, username: str) -> list[dict]:
        """Fetch all pages of the user's repository listing.

        Returns an empty list if the user does not exist.

        Raises:
            RepositoryImportError: On any other non-success response.
        """
        client = await self._get_client()
        url = self._listing_url(username)
        params = {**self._listing_params(), "per_page": self.PER_PAGE}

        results: list[dict] = []
        page = 1

        try:
            while page <= self.max_pages:
                params["page"] = page
                response = await client.get(url, params=params, headers=self._headers())
                if response.status_code == 404:
                    logger.debug(f"{self.platform.value} user not found: {username}")
                    break
                if response.is_error:
                    raise RepositoryImportError(self.platform.value, username, response.status_code)

                data = response.json()
                if not data:
                    break

                results.extend(data)

                if len(data) < self.PER_PAGE:
                    break
                page += 1

            return results
        finally:
            if self._client is None:
                await client.aclose()

    async def list_repositories(self, username: str, user_id: str | None = None) -> list[RepositoryRecord]:
        """List a user's repositories, most recently active first.

        Args:
            username: Account name on the provider.
            user_id: Owner id stamped on every record.

        Returns:
            Normalized repository records in provider order.
        """
        items = await self._fetch_all_pages(username)
        records = [self._to_record(item, user_id) for item in items]
        logger.info(f"Found {len(records)} {self.platform.value} repositories for {username}")
        return records
