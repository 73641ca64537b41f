"""Unit tests for repository health heuristics."""

import pytest

from appvitals.analyzers.health import HealthScorer, days_since
from tests.helpers import NOW, make_repo


@pytest.fixture
def scorer() -> HealthScorer:
    return HealthScorer()


class TestRepoHealth:
    """Tests for the repository health score."""

    def test_ancient_empty_repo_gets_base_score(self, scorer: HealthScorer) -> None:
        """Test that a starless, stale repository only gets the base."""
        repo = make_repo(stars=0, forks=0, commit_days_ago=400)

        assert scorer.repo_health(repo, NOW) == pytest.approx(0.3)

    @pytest.mark.parametrize(
        ("days", "expected"),
        [(3, 0.55), (20, 0.50), (60, 0.42), (120, 0.36), (200, 0.30)],
    )
    def test_recency_bands(self, scorer: HealthScorer, days: float, expected: float) -> None:
        """Test the step decay of the activity bonus."""
        repo = make_repo(commit_days_ago=days)

        assert scorer.repo_health(repo, NOW) == pytest.approx(expected)

    def test_maturity_bonus_requires_age_and_stars(self, scorer: HealthScorer) -> None:
        """Test that the maturity bonus needs a year of age and more than 5 stars."""
        mature = make_repo(stars=6, age_days=400)
        young = make_repo(stars=6, age_days=300, commit_days_ago=290)

        assert scorer.repo_health(mature, NOW) - scorer.repo_health(young, NOW) == pytest.approx(0.10)

    def test_community_bonus(self, scorer: HealthScorer) -> None:
        """Test that a healthy fork/star ratio earns the engagement bonus."""
        repo = make_repo(stars=100, forks=10)

        # base + stars + forks + maturity + community
        expected = 0.3 + 0.300646 + 0.083314 + 0.10 + 0.15
        assert scorer.repo_health(repo, NOW) == pytest.approx(expected, abs=1e-4)

    @pytest.mark.parametrize("forks", [5, 30])
    def test_community_bonus_bounds_are_exclusive(self, scorer: HealthScorer, forks: int) -> None:
        """Test that ratios of exactly 0.05 and 0.3 earn nothing."""
        with_edge = make_repo(stars=100, forks=forks)
        inside = make_repo(stars=100, forks=10)

        assert scorer.repo_health(with_edge, NOW) < scorer.repo_health(inside, NOW)

    def test_extreme_counts_are_clamped(self, scorer: HealthScorer) -> None:
        """Test that huge star and fork counts stay within [0, 1]."""
        repo = make_repo(stars=10**9, forks=10**8, commit_days_ago=1)

        assert scorer.repo_health(repo, NOW) == 1.0

    def test_naive_timestamps_treated_as_utc(self, scorer: HealthScorer) -> None:
        """Test that naive datetimes don't break the recency calculation."""
        repo = make_repo(commit_days_ago=3)
        naive = repo.model_copy(update={
            "last_commit_date": repo.last_commit_date.replace(tzinfo=None),
            "created_at": None,
        })

        assert 0.0 <= scorer.repo_health(naive, NOW) <= 1.0
        assert days_since(naive.last_commit_date, NOW) == pytest.approx(3)


class TestDocumentation:
    """Tests for the documentation proxy score."""

    def test_baseline(self, scorer: HealthScorer) -> None:
        """Test that a repository with no signals gets the conservative base."""
        assert scorer.documentation(make_repo(), NOW) == pytest.approx(0.5)

    def test_popular_mature_repo_maxes_out(self, scorer: HealthScorer) -> None:
        """Test that all bonuses together reach 1.0."""
        repo = make_repo(stars=600, forks=60, age_days=800)

        assert scorer.documentation(repo, NOW) == pytest.approx(1.0)

    def test_mid_tier_bonuses(self, scorer: HealthScorer) -> None:
        """Test the middle star and fork bands on a young repository."""
        repo = make_repo(stars=150, forks=20, age_days=100, commit_days_ago=50)

        assert scorer.documentation(repo, NOW) == pytest.approx(0.78)

    def test_age_bonus_requires_stars(self, scorer: HealthScorer) -> None:
        """Test the maturity bonus needs more than 10 stars."""
        assert scorer.documentation(make_repo(stars=11, age_days=181), NOW) == pytest.approx(0.6)
        assert scorer.documentation(make_repo(stars=10, age_days=181), NOW) == pytest.approx(0.5)

    def test_extreme_counts_are_clamped(self, scorer: HealthScorer) -> None:
        """Test clamping at absurd star counts."""
        repo = make_repo(stars=10**9, forks=10**9)

        assert scorer.documentation(repo, NOW) <= 1.0


class TestPackagePublished:
    """Tests for package publication detection."""

    def test_npm_name_indicators(self, scorer: HealthScorer) -> None:
        """Test that two name indicators detect an npm package."""
        repo = make_repo(name="npm-package-utils", language="TypeScript")

        result = scorer.package_published(repo)

        assert result.found is True
        assert result.platform == "npm"
        assert result.indicators == 2
        assert result.score == pytest.approx(0.66)

    def test_npm_community_and_description(self, scorer: HealthScorer) -> None:
        """Test community size and description as npm indicators."""
        repo = make_repo(
            name="tool", language="JavaScript", stars=200, forks=30,
            description="A tiny NPM helper",
        )

        result = scorer.package_published(repo)

        assert result.found is True
        assert result.indicators == 2

    def test_single_indicator_is_not_enough(self, scorer: HealthScorer) -> None:
        """Test that one indicator does not count as published."""
        repo = make_repo(name="@scope-tool", language="JavaScript")

        result = scorer.package_published(repo)

        assert result.found is False
        assert result.indicators == 1
        assert result.score == 0.0

    def test_python_package(self, scorer: HealthScorer) -> None:
        """Test PyPI detection from naming conventions."""
        repo = make_repo(name="py-utils-py", language="Python")

        result = scorer.package_published(repo)

        assert result.found is True
        assert result.platform == "PyPI"

    def test_python_description_and_community(self, scorer: HealthScorer) -> None:
        """Test PyPI detection from description and community size."""
        repo = make_repo(
            name="lib", language="Python", stars=90, forks=20,
            description="Available on PyPI",
        )

        assert scorer.package_published(repo).found is True

    def test_java_score_is_capped(self, scorer: HealthScorer) -> None:
        """Test that four Java indicators cap the score at 1.0."""
        repo = make_repo(
            name="maven-plugin", language="Java", stars=200, forks=40,
            description="Maven plugin",
        )

        result = scorer.package_published(repo)

        assert result.found is True
        assert result.platform == "Maven Central"
        assert result.score == 1.0

    @pytest.mark.parametrize("language", ["Go", None])
    def test_other_languages_not_detected(self, scorer: HealthScorer, language: str | None) -> None:
        """Test that unsupported languages are never detected."""
        repo = make_repo(name="npm-package", language=language, stars=1000, forks=500)

        assert scorer.package_published(repo).found is False
