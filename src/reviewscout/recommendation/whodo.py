"""WhoDo load-balanced reviewer scoring.

Rewards recent, frequent activity on the changed files and on their
parent directories, then discounts candidates already busy reviewing.

    recency(n, last) = n / max(1, ceil(days between T and last))
    raw   = c1 * file_commits + c2 * dir_commits
          + c3 * file_reviews + c4 * dir_reviews
    load  = exp(theta * open_reviews)
    score = raw / load

File terms sum ``recency`` per changed file; directory terms sum it per
parent directory over every file directly inside it.
"""

import math
from datetime import datetime

from reviewscout.models.contributor import Contributor
from reviewscout.recommendation.schemas import (
    ActivityStats,
    FileActivity,
    WhoDoScore,
    WhoDoWeights,
)

SECONDS_PER_DAY = 86400
# math.exp overflows just above 709
MAX_LOAD_EXPONENT = 700.0


def parent_directory(path: str) -> str | None:
    """Last-level parent of a path; None for top-level files."""
    index = path.rfind("/")
    return path[:index] if index > 0 else None


def parent_directories(paths: list[str]) -> list[str]:
    """Distinct parent directories of the paths, in first-seen order."""
    directories: list[str] = []
    for path in paths:
        directory = parent_directory(path)
        if directory is not None and directory not in directories:
            directories.append(directory)
    return directories


def days_since(reference_time: datetime, last: datetime) -> int:
    """Whole days between two instants, rounded up, at least 1."""
    seconds = abs((reference_time - last).total_seconds())
    return max(1, math.ceil(seconds / SECONDS_PER_DAY))


def recency_weighted(stats: ActivityStats | None, reference_time: datetime) -> float:
    if stats is None or stats.count == 0 or stats.last is None:
        return 0.0
    return stats.count / days_since(reference_time, stats.last)


def _sum_recency(
    scopes: dict[str, FileActivity],
    contributor_id: int,
    reference_time: datetime,
) -> tuple[float, float]:
    commits = reviews = 0.0
    for scope in scopes.values():
        dev = scope.developers.get(contributor_id)
        if dev is None:
            continue
        commits += recency_weighted(dev.commits, reference_time)
        reviews += recency_weighted(dev.reviews, reference_time)
    return commits, reviews


def whodo_scores(
    candidates: list[Contributor],
    files: dict[str, FileActivity],
    directories: dict[str, FileActivity],
    open_reviews: dict[int, int],
    reference_time: datetime,
    weights: WhoDoWeights | None = None,
) -> list[WhoDoScore]:
    """Score each candidate on expertise discounted by review load.

    Args:
        candidates: Contributors to score (author already removed)
        files: Per-file aggregates for the change set
        directories: Aggregates per parent directory of the change set
        open_reviews: Pull requests each contributor is reviewing
        reference_time: Change creation time ``T``
        weights: Term weights and load sensitivity (WhoDo defaults)

    Returns:
        One score per candidate, in candidate order
    """
    weights = weights or WhoDoWeights()
    scores: list[WhoDoScore] = []

    for candidate in candidates:
        file_commits, file_reviews = _sum_recency(files, candidate.id, reference_time)
        dir_commits, dir_reviews = _sum_recency(
            directories, candidate.id, reference_time
        )
        raw = (
            weights.c1_file_commits * file_commits
            + weights.c2_dir_commits * dir_commits
            + weights.c3_file_reviews * file_reviews
            + weights.c4_dir_reviews * dir_reviews
        )
        busy = open_reviews.get(candidate.id, 0)
        load = math.exp(min(weights.theta * busy, MAX_LOAD_EXPONENT))

        scores.append(
            WhoDoScore(
                contributor_id=candidate.id,
                login=candidate.login,
                canonical_name=candidate.canonical_name,
                score=raw / load,
                raw_score=raw,
                load=load,
                open_reviews=busy,
                file_commits=file_commits,
                dir_commits=dir_commits,
                file_reviews=file_reviews,
                dir_reviews=dir_reviews,
            )
        )

    return scores
