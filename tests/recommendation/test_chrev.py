"""Tests for cHRev scoring."""

from datetime import UTC, datetime, timedelta

import pytest

from reviewscout.recommendation.chrev import chrev_scores, recency_score, score_file
from reviewscout.recommendation.schemas import DeveloperFileStats, FileActivity

DAY1 = datetime(2024, 5, 1, 10, 0, tzinfo=UTC)


def _dev(cid: int, login: str, path: str) -> DeveloperFileStats:
    return DeveloperFileStats(
        contributor_id=cid, login=login, canonical_name=login, path=path
    )


def _review(file: FileActivity, dev: DeveloperFileStats, when: datetime) -> None:
    file.reviews.add(when)
    dev.reviews.add(when)
    file.developers[dev.contributor_id] = dev


def _commit(file: FileActivity, dev: DeveloperFileStats, when: datetime) -> None:
    file.commits.add(when)
    dev.commits.add(when)
    file.developers[dev.contributor_id] = dev


class TestRecencyScore:
    """Tests for recency_score."""

    def test_same_instant(self):
        """No gap scores 1."""
        assert recency_score(DAY1, DAY1) == 1.0

    def test_one_day_gap(self):
        """A one-day gap scores 1/2."""
        assert recency_score(DAY1, DAY1 + timedelta(days=1)) == pytest.approx(0.5)

    def test_missing_date(self):
        """Missing dates score 0."""
        assert recency_score(None, DAY1) == 0.0
        assert recency_score(DAY1, None) == 0.0


class TestScoreFile:
    """Tests for per-file component scoring."""

    def test_sole_reviewer_on_shared_day(self):
        """Two of two reviews on the file's only review day."""
        file = FileActivity(path="f.py")
        x = _dev(1, "x", "f.py")
        _review(file, x, DAY1)
        _review(file, x, DAY1 + timedelta(hours=2))

        breakdown = score_file(x, file)

        assert breakdown.review_share == 1.0
        assert breakdown.work_day_overlap == 1.0
        assert breakdown.review_recency == 1.0
        assert breakdown.commit_share == 0.0
        assert breakdown.commit_recency == 0.0
        assert breakdown.file_score == pytest.approx(3.0)

    def test_no_reviews_is_zero_not_nan(self):
        """A file without reviews gives zero review components."""
        file = FileActivity(path="f.py")
        x = _dev(1, "x", "f.py")
        _commit(file, x, DAY1)

        breakdown = score_file(x, file)

        assert breakdown.review_share == 0.0
        assert breakdown.work_day_overlap == 0.0
        assert breakdown.review_recency == 0.0
        assert breakdown.commit_share == 1.0

    def test_shared_file(self):
        """Shares split between two developers."""
        file = FileActivity(path="f.py")
        x = _dev(1, "x", "f.py")
        y = _dev(2, "y", "f.py")
        _review(file, x, DAY1)
        _review(file, y, DAY1 + timedelta(days=1))
        _commit(file, x, DAY1)
        _commit(file, x, DAY1)
        _commit(file, y, DAY1)
        _commit(file, y, DAY1)

        bx = score_file(x, file)

        assert bx.review_share == 0.5
        assert bx.work_day_overlap == 0.5
        assert bx.review_recency == pytest.approx(0.5)
        assert bx.commit_share == 0.5
        assert bx.commit_recency == 1.0


class TestChrevScores:
    """Tests for developer-level aggregation."""

    def test_normalized_by_change_set_size(self):
        """Scores divide by five times the number of changed files."""
        known = FileActivity(path="a.py")
        unknown = FileActivity(path="b.py")
        x = _dev(1, "x", "a.py")
        _review(known, x, DAY1)
        _commit(known, x, DAY1)

        scores = chrev_scores({"a.py": known, "b.py": unknown})

        assert len(scores) == 1
        assert scores[0].login == "x"
        assert scores[0].score == pytest.approx(5.0 / 10)
        assert [p.path for p in scores[0].per_file] == ["a.py"]

    def test_scores_bounded(self):
        """Developer scores stay in [0, 1] and file scores in [0, 5]."""
        files = {}
        for name in ["a.py", "b.py", "c.py"]:
            file = FileActivity(path=name)
            for cid, login in [(1, "x"), (2, "y")]:
                dev = _dev(cid, login, name)
                _review(file, dev, DAY1 + timedelta(days=cid))
                _commit(file, dev, DAY1 + timedelta(days=cid * 3))
            files[name] = file

        scores = chrev_scores(files)

        for score in scores:
            assert 0.0 <= score.score <= 1.0
            for breakdown in score.per_file:
                assert 0.0 <= breakdown.file_score <= 5.0

    def test_no_history_no_candidates(self):
        """Files nobody touched produce no candidates."""
        assert chrev_scores({"a.py": FileActivity(path="a.py")}) == []
