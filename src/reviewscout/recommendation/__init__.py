"""Reviewer recommendation: scoring families and ranking.

Pure scoring functions are exported here. The store-backed
``aggregator.ContributionAggregator`` and ``service.RecommendationService``
are imported from their modules directly.
"""

from reviewscout.recommendation.chrev import chrev_scores, recency_score, score_file
from reviewscout.recommendation.file_risk import classify_files
from reviewscout.recommendation.ranker import rank
from reviewscout.recommendation.schemas import (
    ActivityStats,
    DeveloperFileStats,
    FileActivity,
    FileRisk,
    FileRiskReport,
    FileScoreBreakdown,
    ReviewerScore,
    TurnoverScore,
    TurnoverWeights,
    WhoDoScore,
    WhoDoWeights,
    WindowActivity,
    WorkloadReport,
    WorkloadStats,
)
from reviewscout.recommendation.turnover import months_in_window, turnover_scores
from reviewscout.recommendation.whodo import (
    days_since,
    parent_directories,
    parent_directory,
    whodo_scores,
)
from reviewscout.recommendation.workload import gini, percentile_rank, workload_stats

__all__ = [
    "ActivityStats",
    "DeveloperFileStats",
    "FileActivity",
    "FileRisk",
    "FileRiskReport",
    "FileScoreBreakdown",
    "ReviewerScore",
    "TurnoverScore",
    "TurnoverWeights",
    "WhoDoScore",
    "WhoDoWeights",
    "WindowActivity",
    "WorkloadReport",
    "WorkloadStats",
    "chrev_scores",
    "classify_files",
    "days_since",
    "gini",
    "months_in_window",
    "parent_directories",
    "parent_directory",
    "percentile_rank",
    "rank",
    "recency_score",
    "score_file",
    "turnover_scores",
    "whodo_scores",
    "workload_stats",
]
