"""cHRev reviewer expertise scoring.

Each candidate is scored per changed file on five components, each in
[0, 1]:

- review share: candidate's reviews / all reviews on the file
- work-day overlap: candidate's distinct review days / all review days
- review recency: 1 / (1 + days between candidate's and file's last review)
- commit share: candidate's commits / all commits on the file
- commit recency: 1 / (1 + days between candidate's and file's last commit)

File scores (in [0, 5]) are summed over the files the candidate knows
and normalized by five times the size of the change set.
"""

from datetime import datetime

from reviewscout.recommendation.schemas import (
    DeveloperFileStats,
    FileActivity,
    FileScoreBreakdown,
    ReviewerScore,
)

COMPONENTS = 5

_SECONDS_PER_DAY = 86400.0


def _ratio(part: float, whole: float) -> float:
    if whole == 0:
        return 0.0
    return part / whole


def recency_score(dev_last: datetime | None, file_last: datetime | None) -> float:
    """``1 / (1 + |dev_last - file_last| in days)``; 0.0 if either is missing."""
    if dev_last is None or file_last is None:
        return 0.0
    days = abs((dev_last - file_last).total_seconds()) / _SECONDS_PER_DAY
    return 1.0 / (1.0 + days)


def score_file(dev: DeveloperFileStats, file: FileActivity) -> FileScoreBreakdown:
    """Score one candidate on one file."""
    return FileScoreBreakdown(
        path=file.path,
        review_share=_ratio(dev.reviews.count, file.reviews.count),
        work_day_overlap=_ratio(len(dev.reviews.days), len(file.reviews.days)),
        review_recency=recency_score(dev.reviews.last, file.reviews.last),
        commit_share=_ratio(dev.commits.count, file.commits.count),
        commit_recency=recency_score(dev.commits.last, file.commits.last),
    )


def chrev_scores(
    activity: dict[str, FileActivity],
    total_files: int | None = None,
) -> list[ReviewerScore]:
    """Score every candidate with history on the change set.

    Args:
        activity: Per-file aggregates for the change set
        total_files: Size of the change set (defaults to ``len(activity)``)

    Returns:
        Unranked scores in first-seen order
    """
    total_files = len(activity) if total_files is None else total_files
    by_dev: dict[int, ReviewerScore] = {}
    totals: dict[int, float] = {}

    for file in activity.values():
        for dev_id, dev in file.developers.items():
            breakdown = score_file(dev, file)
            if dev_id not in by_dev:
                by_dev[dev_id] = ReviewerScore(
                    contributor_id=dev_id,
                    login=dev.login,
                    canonical_name=dev.canonical_name,
                    score=0.0,
                )
                totals[dev_id] = 0.0
            by_dev[dev_id].per_file.append(breakdown)
            totals[dev_id] += breakdown.file_score

    denominator = COMPONENTS * total_files
    for dev_id, score in by_dev.items():
        score.score = _ratio(totals[dev_id], denominator)
    return list(by_dev.values())
