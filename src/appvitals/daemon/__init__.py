"""Background scheduling of application analyses."""

from .scheduler import AnalysisScheduler

__all__ = ["AnalysisScheduler"]
