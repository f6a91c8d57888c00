"""Tests for domain models and schemas."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from reviewscout.identity.schemas import (
    DetectionReport,
    MergeDecision,
    MergeOutcome,
    MergePriority,
    MergeReport,
    MergeRule,
    MergeStatus,
)
from reviewscout.models import ActivityType, Contribution, Contributor


class TestContributor:
    """Tests for the Contributor model."""

    def test_blank_email_is_none(self):
        """Whitespace-only emails are treated as absent."""
        c = Contributor(login="alice", canonical_name="alice", email="   ")

        assert c.email is None

    def test_login_required(self):
        """An empty login is rejected."""
        with pytest.raises(ValidationError):
            Contributor(login="", canonical_name="x")

    def test_defaults_to_primary(self):
        """New contributors are primary until recorded as duplicates."""
        assert Contributor(login="a", canonical_name="a").is_primary is True


class TestContribution:
    """Tests for the Contribution model."""

    def test_activity_type_from_string(self):
        """Activity types validate from their stored values."""
        c = Contribution(
            contributor_id=1,
            file_id=1,
            activity_type="review",
            activity_id="pr-7",
            contribution_date=datetime(2024, 1, 1, tzinfo=UTC),
        )

        assert c.activity_type == ActivityType.REVIEW

    def test_negative_lines_rejected(self):
        """Line counts are non-negative."""
        with pytest.raises(ValidationError):
            Contribution(
                contributor_id=1,
                file_id=1,
                activity_type="commit",
                activity_id="sha",
                contribution_date=datetime(2024, 1, 1, tzinfo=UTC),
                lines_modified=-1,
            )


class TestIdentitySchemas:
    """Tests for identity resolution schemas."""

    def test_priority_precedence(self):
        """manual > auto-high > auto-medium."""
        assert (
            MergePriority.MANUAL.rank
            > MergePriority.AUTO_HIGH.rank
            > MergePriority.AUTO_MEDIUM.rank
        )

    def test_rule_matches_case_insensitively(self):
        """Rules compare logins, emails and names ignoring case."""
        rule = MergeRule(
            primary_login="jdoe", logins=["JD"], emails=["Jane@X.com"], names=["JANE"]
        )

        assert rule.matches(Contributor(login="jd", canonical_name="x"))
        assert rule.matches(
            Contributor(login="other", canonical_name="x", email="jane@x.com")
        )
        assert rule.matches(Contributor(login="other", canonical_name="jane"))
        assert not rule.matches(Contributor(login="other", canonical_name="x"))

    def test_similarity_bounded(self):
        """Decision similarity must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            MergeDecision(
                primary_id=1,
                primary_login="a",
                duplicate_id=2,
                duplicate_login="b",
                duplicate_canonical_name="b",
                similarity=1.5,
                priority=MergePriority.AUTO_HIGH,
            )

    def test_merge_report_counts(self):
        """Report counts outcomes by status."""
        report = MergeReport(
            outcomes=[
                MergeOutcome(record_id=1, login="a", status=MergeStatus.MERGED),
                MergeOutcome(record_id=2, login="b", status=MergeStatus.FAILED),
                MergeOutcome(record_id=3, login="c", status=MergeStatus.SKIPPED),
            ]
        )

        assert (report.merged, report.skipped, report.failed) == (1, 1, 1)
        assert not report.succeeded

    def test_detection_report_orders_manual_first(self):
        """decisions lists manual before automatic."""
        manual = MergeDecision(
            primary_id=1,
            primary_login="a",
            duplicate_id=2,
            duplicate_login="b",
            duplicate_canonical_name="b",
            similarity=1.0,
            priority=MergePriority.MANUAL,
        )
        auto = manual.model_copy(update={"priority": MergePriority.AUTO_HIGH})

        report = DetectionReport(manual_decisions=[manual], automatic_decisions=[auto])

        assert [d.priority for d in report.decisions] == [
            MergePriority.MANUAL,
            MergePriority.AUTO_HIGH,
        ]
