"""Contribution aggregation for reviewer scoring.

Reads contribution history for a change set and a reference time ``T``.
Historical knowledge only counts activity strictly before ``T``; window
aggregates cover ``[T - window, T]`` inclusive, so the change's own
creation instant is visible to workload statistics but never to
knowledge.
"""

from datetime import datetime, timedelta

import structlog

from reviewscout.db.timestamps import parse_timestamp
from reviewscout.errors import InvalidInputError
from reviewscout.models.contribution import ActivityType, ContributionFact
from reviewscout.models.contributor import Contributor
from reviewscout.recommendation.schemas import (
    DeveloperFileStats,
    FileActivity,
    WindowActivity,
)
from reviewscout.recommendation.whodo import parent_directory
from reviewscout.repositories.contribution_repo import ContributionRepository
from reviewscout.repositories.contributor_repo import ContributorRepository

logger = structlog.get_logger()

_ALL_TYPES = [ActivityType.COMMIT, ActivityType.REVIEW]


def validate_change_set(paths: list[str]) -> list[str]:
    """Check a change set and drop repeated paths (first occurrence wins).

    Raises:
        InvalidInputError: If the set is empty or contains a blank path
    """
    if not paths:
        msg = "Change set must contain at least one file"
        raise InvalidInputError(msg)
    cleaned: list[str] = []
    for path in paths:
        if not isinstance(path, str) or not path.strip():
            msg = f"Invalid file path in change set: {path!r}"
            raise InvalidInputError(msg)
        if path not in cleaned:
            cleaned.append(path)
    return cleaned


def validate_reference_time(value: datetime | str) -> datetime:
    """Parse a reference timestamp into an aware UTC datetime.

    Raises:
        InvalidInputError: If the value is not a valid timestamp
    """
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError) as e:
        msg = f"Invalid reference timestamp: {value!r}"
        raise InvalidInputError(msg) from e


def _excluded(fact: ContributionFact, exclude_login: str | None) -> bool:
    return exclude_login is not None and fact.login.lower() == exclude_login.lower()


def _accumulate(scope: FileActivity, fact: ContributionFact) -> None:
    dev = scope.developers.get(fact.contributor_id)
    if dev is None:
        dev = DeveloperFileStats(
            contributor_id=fact.contributor_id,
            login=fact.login,
            canonical_name=fact.canonical_name,
            path=scope.path,
        )
        scope.developers[fact.contributor_id] = dev

    if fact.activity_type == ActivityType.REVIEW:
        scope.reviews.add(fact.contribution_date)
        dev.reviews.add(fact.contribution_date)
    else:
        scope.commits.add(fact.contribution_date)
        dev.commits.add(fact.contribution_date)


class ContributionAggregator:
    """Builds per-file and project-wide statistics from contribution history.

    Read-only consumer of contributors, files and contributions.
    """

    def __init__(
        self,
        contribution_repo: ContributionRepository,
        contributor_repo: ContributorRepository,
        lookback_days: int = 365,
    ):
        """Initialize aggregator with repository dependencies.

        Args:
            contribution_repo: Contribution history storage
            contributor_repo: Contributor storage (candidate lists)
            lookback_days: Default trailing window length
        """
        self._contributions = contribution_repo
        self._contributors = contributor_repo
        self._lookback_days = lookback_days

    @property
    def lookback_days(self) -> int:
        return self._lookback_days

    async def file_activity(
        self,
        paths: list[str],
        reference_time: datetime | str,
        exclude_login: str | None = None,
    ) -> dict[str, FileActivity]:
        """Aggregate commits and reviews on each changed file before ``T``.

        Args:
            paths: Current paths of the changed files
            reference_time: Reference time ``T`` (exclusive bound)
            exclude_login: Contributor (the change author) left out entirely

        Returns:
            FileActivity per path, in change-set order; files without
            history are present with zero counts

        Raises:
            InvalidInputError: If the change set or timestamp is malformed
        """
        paths = validate_change_set(paths)
        ref = validate_reference_time(reference_time)

        facts = await self._contributions.fetch_facts(paths, _ALL_TYPES, before=ref)

        activity = {path: FileActivity(path=path) for path in paths}
        for fact in facts:
            if _excluded(fact, exclude_login) or fact.path not in activity:
                continue
            _accumulate(activity[fact.path], fact)

        logger.info(
            "file activity aggregated",
            files=len(paths),
            facts=len(facts),
            reference_time=ref.isoformat(),
        )
        return activity

    async def window_activity(
        self,
        reference_time: datetime | str,
        exclude_login: str | None = None,
        lookback_days: int | None = None,
    ) -> WindowActivity:
        """Aggregate project-wide activity in ``[T - window, T]``.

        Raises:
            InvalidInputError: If the timestamp is malformed
        """
        until = validate_reference_time(reference_time)
        since = until - timedelta(days=lookback_days or self._lookback_days)

        facts = await self._contributions.fetch_facts(
            None, _ALL_TYPES, since=since, until=until
        )

        window = WindowActivity(since=since, until=until)
        for fact in facts:
            if _excluded(fact, exclude_login):
                continue
            dev_id = fact.contributor_id
            window.counts[dev_id] = window.counts.get(dev_id, 0) + 1
            window.active_months.setdefault(dev_id, set()).add(
                fact.contribution_date.strftime("%Y-%m")
            )
            window.total += 1

        logger.info(
            "window activity aggregated",
            since=since.isoformat(),
            until=until.isoformat(),
            total=window.total,
            contributors=len(window.counts),
        )
        return window

    async def directory_activity(
        self,
        directories: list[str],
        reference_time: datetime | str,
        exclude_login: str | None = None,
    ) -> dict[str, FileActivity]:
        """Aggregate activity on every file directly inside each directory.

        Counts cover all of a directory's files before ``T``, whether or
        not they are part of the change.

        Returns:
            FileActivity per directory, in the given order

        Raises:
            InvalidInputError: If the timestamp is malformed
        """
        ref = validate_reference_time(reference_time)
        if not directories:
            return {}

        facts = await self._contributions.fetch_facts(
            None, _ALL_TYPES, directories=directories, before=ref
        )

        activity = {d: FileActivity(path=d) for d in directories}
        for fact in facts:
            directory = parent_directory(fact.path)
            if _excluded(fact, exclude_login) or directory not in activity:
                continue
            _accumulate(activity[directory], fact)

        logger.info(
            "directory activity aggregated",
            directories=len(directories),
            facts=len(facts),
            reference_time=ref.isoformat(),
        )
        return activity

    async def open_reviews(
        self,
        reference_time: datetime | str,
        window_days: int,
        exclude_pr: int | None = None,
    ) -> dict[int, int]:
        """Pull requests each contributor reviewed in ``[T - window, T]``.

        Raises:
            InvalidInputError: If the timestamp is malformed
        """
        until = validate_reference_time(reference_time)
        since = until - timedelta(days=window_days)
        return await self._contributions.open_review_counts(since, until, exclude_pr)

    async def candidates(self, exclude_login: str | None = None) -> list[Contributor]:
        """List every stored contributor except the excluded login."""
        contributors = await self._contributors.list_all()
        if exclude_login is None:
            return contributors
        return [c for c in contributors if c.login.lower() != exclude_login.lower()]

    async def review_counts(
        self,
        contributors: list[Contributor],
        since: datetime | str,
        until: datetime | str,
    ) -> dict[int, int]:
        """Count reviews per contributor in ``[since, until]``.

        Every given contributor is present; those without reviews map to 0.
        Reviews by anyone else are ignored.

        Raises:
            InvalidInputError: If a bound is malformed or the range is inverted
        """
        counts, _ = await self.review_load(contributors, since, until)
        return counts

    async def review_load(
        self,
        contributors: list[Contributor],
        since: datetime | str,
        until: datetime | str,
    ) -> tuple[dict[int, int], dict[int, int]]:
        """Reviews and reviewed lines per contributor in ``[since, until]``.

        Reviews without a recorded line count add nothing to the lines total.

        Returns:
            (review counts, lines reviewed), both keyed by contributor id

        Raises:
            InvalidInputError: If a bound is malformed or the range is inverted
        """
        start = validate_reference_time(since)
        end = validate_reference_time(until)
        if start > end:
            msg = f"Workload window starts after it ends: {start} > {end}"
            raise InvalidInputError(msg)

        counts = {c.id: 0 for c in contributors}
        lines = {c.id: 0 for c in contributors}
        facts = await self._contributions.fetch_facts(
            None, [ActivityType.REVIEW], since=start, until=end
        )
        for fact in facts:
            if fact.contributor_id in counts:
                counts[fact.contributor_id] += 1
                lines[fact.contributor_id] += fact.lines_modified or 0
        return counts, lines
