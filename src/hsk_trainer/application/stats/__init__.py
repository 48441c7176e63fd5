# Application Stats Package
from .progress_stats import ProgressStatsCalculator, ProgressSummary, SkillSummary

__all__ = ["ProgressStatsCalculator", "ProgressSummary", "SkillSummary"]
