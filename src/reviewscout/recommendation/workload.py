"""Review workload distribution statistics."""

from collections.abc import Sequence

from reviewscout.models.contributor import Contributor
from reviewscout.recommendation.schemas import WorkloadReport, WorkloadStats


def gini(values: Sequence[float]) -> float:
    """Gini coefficient of a non-negative distribution.

    ``G = sum((2i - n - 1) * x_i) / (n * sum(x))`` over values sorted
    ascending, i from 1. Zero for an empty or all-zero distribution.
    Clamped to [0, 1] against floating-point cancellation.
    """
    n = len(values)
    total = sum(values)
    if n == 0 or total == 0:
        return 0.0
    ordered = sorted(values)
    numerator = sum((2 * i - n - 1) * x for i, x in enumerate(ordered, start=1))
    return max(0.0, min(1.0, numerator / (n * total)))


def percentile_rank(value: int, values: Sequence[int]) -> float:
    """Fraction of the other values strictly below ``value``."""
    if len(values) <= 1:
        return 0.0
    below = sum(1 for v in values if v < value)
    return below / (len(values) - 1)


def workload_stats(
    contributors: list[Contributor],
    counts: dict[int, int],
    lines: dict[int, int] | None = None,
) -> WorkloadReport:
    """Describe how reviews are spread across contributors.

    Args:
        contributors: Candidates, in output order
        counts: Reviews per contributor id (missing ids count as 0)
        lines: Lines modified by the reviewed changes, per contributor id

    Returns:
        WorkloadReport with per-candidate share, percentile and deviation
    """
    if not contributors:
        return WorkloadReport()

    lines = lines or {}
    reviews = [counts.get(c.id, 0) for c in contributors]
    total = sum(reviews)
    mean = total / len(reviews)

    stats = [
        WorkloadStats(
            contributor_id=c.id,
            login=c.login,
            reviews=count,
            workload_share=count / total * 100 if total else 0.0,
            percentile_rank=percentile_rank(count, reviews),
            relative_to_mean=(count - mean) / mean if mean else 0.0,
            lines_reviewed=lines.get(c.id, 0),
        )
        for c, count in zip(contributors, reviews, strict=True)
    ]
    return WorkloadReport(
        stats=stats,
        total_reviews=total,
        mean_reviews=mean,
        total_lines_reviewed=sum(s.lines_reviewed for s in stats),
        gini=gini(reviews),
    )
