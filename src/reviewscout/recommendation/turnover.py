"""Turnover-aware reviewer scoring.

Favors candidates who would learn the most from a change (low knowledge
of its files) while being steady, significant contributors (high
retention).

    knowledge          = known changed files / changed files
    learn_factor       = 1 - knowledge
    consistency        = min(active months in window / months in window, 1)
    contribution_share = candidate activity in window / all activity in window
    retention          = (c1_ret * consistency) * (c2_ret * contribution_share)
    turnover           = (c1_turn * learn_factor) * (c2_turn * retention)
"""

from reviewscout.models.contributor import Contributor
from reviewscout.recommendation.schemas import (
    FileActivity,
    TurnoverScore,
    TurnoverWeights,
    WindowActivity,
)

DAYS_PER_MONTH = 30.4375


def months_in_window(lookback_days: int) -> int:
    """Number of calendar months a trailing window spans (365 days -> 12)."""
    return max(1, round(lookback_days / DAYS_PER_MONTH))


def retention_score(
    consistency: float, contribution_share: float, weights: TurnoverWeights
) -> float:
    return (weights.c1_ret * consistency) * (weights.c2_ret * contribution_share)


def turnover_score(
    learn_factor: float, retention: float, weights: TurnoverWeights
) -> float:
    return (weights.c1_turn * learn_factor) * (weights.c2_turn * retention)


def turnover_scores(
    candidates: list[Contributor],
    activity: dict[str, FileActivity],
    window: WindowActivity,
    weights: TurnoverWeights | None = None,
    lookback_days: int = 365,
    exclude_without_knowledge: bool = False,
) -> list[TurnoverScore]:
    """Score each candidate on the turnover composite.

    Args:
        candidates: Contributors to score (author already removed)
        activity: Per-file aggregates for the change set
        window: Project-wide activity in the trailing window
        weights: Composite weights (all 1.0 by default)
        lookback_days: Window length used for consistency
        exclude_without_knowledge: Drop candidates knowing none of the files

    Returns:
        Unranked scores in candidate order
    """
    weights = weights or TurnoverWeights()
    total_files = len(activity)
    months = months_in_window(lookback_days)

    results: list[TurnoverScore] = []
    for candidate in candidates:
        known = [
            path
            for path, file in activity.items()
            if candidate.id in file.developers
        ]
        if not known and exclude_without_knowledge:
            continue

        knowledge = len(known) / total_files if total_files else 0.0
        learn_factor = 1.0 - knowledge
        active_months = len(window.active_months.get(candidate.id, ()))
        consistency = min(active_months / months, 1.0)
        share = (
            window.counts.get(candidate.id, 0) / window.total if window.total else 0.0
        )
        retention = retention_score(consistency, share, weights)

        results.append(
            TurnoverScore(
                contributor_id=candidate.id,
                login=candidate.login,
                canonical_name=candidate.canonical_name,
                score=turnover_score(learn_factor, retention, weights),
                knowledge=knowledge,
                learn_factor=learn_factor,
                consistency=consistency,
                contribution_share=share,
                retention=retention,
                per_file=known,
            )
        )
    return results
