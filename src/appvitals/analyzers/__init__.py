"""Analyzers that probe, match and score tracked applications."""

from appvitals.analyzers.deployment import DeploymentDiscovery
from appvitals.analyzers.engine import ScoringEngine
from appvitals.analyzers.health import HealthScorer
from appvitals.analyzers.matcher import RepositoryMatcher
from appvitals.analyzers.probe import ProbeClient
from appvitals.analyzers.scorer import Scorer

__all__ = [
    "DeploymentDiscovery",
    "HealthScorer",
    "ProbeClient",
    "RepositoryMatcher",
    "Scorer",
    "ScoringEngine",
]
