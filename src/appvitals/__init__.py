"""Health scoring for tracked applications and their source repositories."""

__version__ = "0.1.0"
