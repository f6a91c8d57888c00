"""Recommendation service tying aggregation, scoring and ranking together.

Malformed requests (empty change set, bad reference time) yield an empty
result for that request only. Store failures propagate.
"""

import asyncio
from datetime import UTC, datetime, timedelta

import structlog

from reviewscout.errors import InvalidInputError
from reviewscout.recommendation.aggregator import (
    ContributionAggregator,
    validate_change_set,
    validate_reference_time,
)
from reviewscout.recommendation.chrev import chrev_scores
from reviewscout.recommendation.file_risk import classify_files
from reviewscout.recommendation.ranker import rank
from reviewscout.recommendation.schemas import (
    FileRiskReport,
    ReviewerScore,
    TurnoverScore,
    TurnoverWeights,
    WhoDoScore,
    WhoDoWeights,
    WorkloadReport,
)
from reviewscout.recommendation.turnover import turnover_scores
from reviewscout.recommendation.whodo import parent_directories, whodo_scores
from reviewscout.recommendation.workload import workload_stats

logger = structlog.get_logger()


class RecommendationService:
    """Recommends reviewers for a change set."""

    def __init__(
        self,
        aggregator: ContributionAggregator,
        top_n: int = 5,
        weights: TurnoverWeights | None = None,
        include_author: bool = False,
        exclude_unknown_file_candidates: bool = False,
        workload_window_days: int = 90,
        whodo_weights: WhoDoWeights | None = None,
        whodo_load_window_days: int = 30,
    ):
        """Initialize service with its aggregator and scoring options.

        Args:
            aggregator: Contribution aggregator
            top_n: Default number of candidates returned
            weights: Default turnover/retention weights
            include_author: Keep the change author among candidates
            exclude_unknown_file_candidates: Drop turnover candidates who
                know none of the changed files
            workload_window_days: Trailing window for workload statistics
            whodo_weights: Default WhoDo weights and load sensitivity
            whodo_load_window_days: Trailing window of review comments
                counted as open reviews
        """
        self._aggregator = aggregator
        self._top_n = top_n
        self._weights = weights or TurnoverWeights()
        self._include_author = include_author
        self._exclude_unknown = exclude_unknown_file_candidates
        self._workload_days = workload_window_days
        self._whodo_weights = whodo_weights or WhoDoWeights()
        self._whodo_load_days = whodo_load_window_days

    def _excluded_login(self, author_login: str | None) -> str | None:
        if self._include_author or not author_login:
            return None
        return author_login

    async def recommend_chrev(
        self,
        paths: list[str],
        reference_time: datetime | str | None = None,
        author_login: str | None = None,
        top_n: int | None = None,
    ) -> list[ReviewerScore]:
        """Rank candidates by cHRev expertise on the changed files.

        Args:
            paths: Current paths of the changed files
            reference_time: Change creation time (default: now)
            author_login: Change author, excluded unless include_author
            top_n: Override of the default cutoff

        Returns:
            Top candidates, best first; empty for a malformed request
        """
        reference_time = reference_time or datetime.now(UTC)
        try:
            activity = await self._aggregator.file_activity(
                paths, reference_time, self._excluded_login(author_login)
            )
        except InvalidInputError as e:
            logger.warning("chrev request rejected", reason=str(e))
            return []

        ranked = rank(chrev_scores(activity), top_n or self._top_n)
        logger.info(
            "chrev recommendation complete",
            files=len(activity),
            returned=len(ranked),
        )
        return ranked

    async def recommend_turnover(
        self,
        paths: list[str],
        reference_time: datetime | str | None = None,
        author_login: str | None = None,
        top_n: int | None = None,
        weights: TurnoverWeights | None = None,
    ) -> list[TurnoverScore]:
        """Rank candidates by the turnover composite.

        Args:
            paths: Current paths of the changed files
            reference_time: Change creation time (default: now)
            author_login: Change author, excluded unless include_author
            top_n: Override of the default cutoff
            weights: Override of the default weights

        Returns:
            Top candidates, best first; empty for a malformed request
        """
        reference_time = reference_time or datetime.now(UTC)
        excluded = self._excluded_login(author_login)
        try:
            paths = validate_change_set(paths)
            reference_time = validate_reference_time(reference_time)
        except InvalidInputError as e:
            logger.warning("turnover request rejected", reason=str(e))
            return []

        activity, window, candidates = await asyncio.gather(
            self._aggregator.file_activity(paths, reference_time, excluded),
            self._aggregator.window_activity(reference_time, excluded),
            self._aggregator.candidates(excluded),
        )

        scores = turnover_scores(
            candidates,
            activity,
            window,
            weights=weights or self._weights,
            lookback_days=self._aggregator.lookback_days,
            exclude_without_knowledge=self._exclude_unknown,
        )
        ranked = rank(scores, top_n or self._top_n)
        logger.info(
            "turnover recommendation complete",
            candidates=len(candidates),
            scored=len(scores),
            returned=len(ranked),
        )
        return ranked

    async def recommend_whodo(
        self,
        paths: list[str],
        reference_time: datetime | str | None = None,
        author_login: str | None = None,
        top_n: int | None = None,
        weights: WhoDoWeights | None = None,
        pr_number: int | None = None,
    ) -> list[WhoDoScore]:
        """Rank candidates by WhoDo expertise discounted by review load.

        Args:
            paths: Current paths of the changed files
            reference_time: Change creation time (default: now)
            author_login: Change author, excluded unless include_author
            top_n: Override of the default cutoff
            weights: Override of the default weights
            pr_number: The change's own pull request, left out of the load

        Returns:
            Top candidates, best first; empty for a malformed request
        """
        reference_time = reference_time or datetime.now(UTC)
        excluded = self._excluded_login(author_login)
        try:
            paths = validate_change_set(paths)
            reference_time = validate_reference_time(reference_time)
        except InvalidInputError as e:
            logger.warning("whodo request rejected", reason=str(e))
            return []

        files, directories, open_reviews, candidates = await asyncio.gather(
            self._aggregator.file_activity(paths, reference_time, excluded),
            self._aggregator.directory_activity(
                parent_directories(paths), reference_time, excluded
            ),
            self._aggregator.open_reviews(
                reference_time, self._whodo_load_days, exclude_pr=pr_number
            ),
            self._aggregator.candidates(excluded),
        )

        scores = whodo_scores(
            candidates,
            files,
            directories,
            open_reviews,
            reference_time,
            weights=weights or self._whodo_weights,
        )
        ranked = rank(scores, top_n or self._top_n)
        logger.info(
            "whodo recommendation complete",
            candidates=len(candidates),
            directories=len(directories),
            busy=sum(1 for s in scores if s.open_reviews),
            returned=len(ranked),
        )
        return ranked

    async def workload(
        self, reference_time: datetime | str | None = None
    ) -> WorkloadReport:
        """Review workload distribution over the trailing workload window."""
        reference_time = reference_time or datetime.now(UTC)
        try:
            until = validate_reference_time(reference_time)
        except InvalidInputError as e:
            logger.warning("workload request rejected", reason=str(e))
            return WorkloadReport()

        since = until - timedelta(days=self._workload_days)
        candidates = await self._aggregator.candidates()
        counts, lines = await self._aggregator.review_load(candidates, since, until)
        report = workload_stats(candidates, counts, lines)
        logger.info(
            "workload computed",
            candidates=len(candidates),
            total_reviews=report.total_reviews,
            total_lines_reviewed=report.total_lines_reviewed,
            gini=round(report.gini, 4),
        )
        return report

    async def file_risks(
        self,
        paths: list[str],
        reference_time: datetime | str | None = None,
    ) -> list[FileRiskReport]:
        """Report abandoned and hoarded files in a change set."""
        reference_time = reference_time or datetime.now(UTC)
        try:
            activity = await self._aggregator.file_activity(paths, reference_time)
        except InvalidInputError as e:
            logger.warning("file risk request rejected", reason=str(e))
            return []
        return classify_files(activity)
