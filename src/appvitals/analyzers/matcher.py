"""Match tracked applications to imported repositories."""

import logging
from collections.abc import Callable, Sequence

from appvitals.models.schemas import RepositoryRecord

logger = logging.getLogger(__name__)

# (app_name, app_website, repo) -> bool
MatchRule = Callable[[str, str | None, RepositoryRecord], bool]


def _exact_name(app_name: str, app_website: str | None, repo: RepositoryRecord) -> bool:
    return repo.repository_name == app_name


def _website_url(app_name: str, app_website: str | None, repo: RepositoryRecord) -> bool:
    return bool(app_website) and repo.repository_url == app_website


def _name_contains_repo(app_name: str, app_website: str | None, repo: RepositoryRecord) -> bool:
    return bool(repo.repository_name) and repo.repository_name in app_name


def _repo_contains_name(app_name: str, app_website: str | None, repo: RepositoryRecord) -> bool:
    return bool(app_name) and app_name in repo.repository_name


class RepositoryMatcher:
    """Finds the repository a tracked application represents.

    Rules are tried in precedence order. The first rule with any matching
    repository wins, and within a rule the first repository in input order
    wins. Input order is never re-sorted, so the result is deterministic.
    """

    RULES: list[tuple[str, MatchRule]] = [
        ("exact_name", _exact_name),
        ("website_url", _website_url),
        ("name_contains_repo", _name_contains_repo),
        ("repo_contains_name", _repo_contains_name),
    ]

    def match_with_rule(
        self,
        app_name: str,
        app_website: str | None,
        repos: Sequence[RepositoryRecord],
    ) -> tuple[RepositoryRecord, str] | None:
        """Find the matching repository and the tag of the rule that matched.

        Returns:
            (repository, rule tag), or None if no rule matches.
        """
        for tag, rule in self.RULES:
            for repo in repos:
                if rule(app_name, app_website, repo):
                    logger.debug(f"Matched '{app_name}' to {repo.repository_name} via {tag}")
                    return repo, tag
        return None

    def match(
        self,
        app_name: str,
        app_website: str | None,
        repos: Sequence[RepositoryRecord],
    ) -> RepositoryRecord | None:
        """Find the repository an application represents, or None."""
        found = self.match_with_rule(app_name, app_website, repos)
        return found[0] if found else None
