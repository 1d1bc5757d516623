"""Tests for relationship and commitment heuristics."""

from datetime import datetime, timedelta

import pytest

from leaderdojo.config import HeuristicsPolicy
from leaderdojo.heuristics import (
    HealthStatus,
    Staleness,
    commitment_balance,
    commitment_difference,
    commitment_priority_score,
    confidence_calibration,
    health_status,
    period_bounds,
    person_metrics,
    project_balance,
    reflection_stats,
    relationship_health_score,
    staleness_bucket,
)
from leaderdojo.models import (
    Commitment,
    CommitmentDirection,
    CommitmentStatus,
    DecisionOutcome,
    Entry,
    EntryKind,
    Person,
    Project,
    ProjectStatus,
    Reflection,
    ReflectionPeriodType,
    ReflectionType,
)

NOW = datetime(2024, 3, 15, 9, 0)


def days_ago(days: int) -> datetime:
    return NOW - timedelta(days=days)


class TestCommitmentBalance:
    """Tests for commitment_balance."""

    def test_no_commitments(self):
        assert commitment_balance(0, 0) == 0.0

    def test_they_owe_more_is_positive(self):
        assert commitment_balance(1, 3) == 0.5

    def test_i_owe_more_is_negative(self):
        assert commitment_balance(4, 0) == -1.0

    @pytest.mark.parametrize("i_owe, waiting", [(0, 5), (5, 0), (2, 7), (9, 1), (3, 3)])
    def test_range(self, i_owe, waiting):
        assert -1.0 <= commitment_balance(i_owe, waiting) <= 1.0

    def test_difference(self):
        assert commitment_difference(1, 4) == 3
        assert commitment_difference(4, 1) == -3


class TestHealthScore:
    """Tests for relationship_health_score."""

    def test_perfect(self):
        assert relationship_health_score(1, 0, 0.0) == 100

    @pytest.mark.parametrize(
        "days, expected", [(7, 100), (8, 95), (14, 95), (15, 85), (30, 85), (31, 70)]
    )
    def test_staleness_deductions(self, days, expected):
        assert relationship_health_score(days, 0, 0.0) == expected

    def test_never_interacted(self):
        assert relationship_health_score(None, 0, 0.0) == 80

    def test_overdue(self):
        assert relationship_health_score(1, 1, 0.0) == 75
        assert relationship_health_score(1, 3, 0.0) == 65

    def test_imbalance(self):
        assert relationship_health_score(1, 0, 0.5) == 90
        assert relationship_health_score(1, 0, -0.7) == 80
        assert relationship_health_score(1, 0, 0.3) == 100

    def test_reflection_bonus_capped(self):
        assert relationship_health_score(1, 0, 0.0, days_since_reflection=3) == 100
        assert relationship_health_score(20, 0, 0.0, days_since_reflection=3) == 90
        assert relationship_health_score(20, 0, 0.0, days_since_reflection=30) == 85

    def test_clamped_at_zero(self):
        assert relationship_health_score(90, 50, 1.0) == 0

    def test_non_increasing_in_silence(self):
        scores = [relationship_health_score(d, 1, 0.4) for d in range(0, 120)]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_non_increasing_in_overdue(self):
        scores = [relationship_health_score(10, n, 0.0) for n in range(0, 30)]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_custom_policy(self):
        policy = HeuristicsPolicy(first_overdue_deduction=40)
        assert relationship_health_score(1, 1, 0.0, policy=policy) == 60


class TestHealthStatus:
    @pytest.mark.parametrize(
        "score, status",
        [
            (100, HealthStatus.HEALTHY),
            (80, HealthStatus.HEALTHY),
            (79, HealthStatus.NEEDS_ATTENTION),
            (50, HealthStatus.NEEDS_ATTENTION),
            (49, HealthStatus.AT_RISK),
            (0, HealthStatus.AT_RISK),
        ],
    )
    def test_bands(self, score, status):
        assert health_status(score) is status


class TestStalenessBucket:
    @pytest.mark.parametrize(
        "days, bucket",
        [
            (0, Staleness.ACTIVE),
            (7, Staleness.ACTIVE),
            (8, Staleness.RECENT),
            (30, Staleness.RECENT),
            (31, Staleness.DORMANT),
            (None, Staleness.DORMANT),
        ],
    )
    def test_boundaries(self, days, bucket):
        assert staleness_bucket(days) is bucket


class TestPersonMetrics:
    """Tests for person_metrics."""

    @pytest.fixture
    def person(self) -> Person:
        return Person(name="Ana")

    def test_no_activity(self, person: Person):
        metrics = person_metrics(person, [], [], now=NOW)

        assert metrics.days_since_interaction is None
        assert metrics.staleness is Staleness.DORMANT
        assert metrics.health_score == 80
        assert metrics.active_commitments == 0
        assert not metrics.needs_reflection

    def test_counts_and_score(self, person: Person):
        entries = [
            Entry(title="1:1", participant_ids=[person.id], occurred_at=days_ago(10)),
            Entry(title="Old", participant_ids=[person.id], occurred_at=days_ago(40)),
            Entry(title="Other", participant_ids=["someone"], occurred_at=days_ago(1)),
        ]
        commitments = [
            Commitment(title="Plan", person_id=person.id, due_date=days_ago(2)),
            Commitment(
                title="Review",
                person_id=person.id,
                direction=CommitmentDirection.WAITING_FOR,
                status=CommitmentStatus.BLOCKED,
            ),
            Commitment(title="Done", person_id=person.id, status=CommitmentStatus.DONE),
            Commitment(title="Not theirs", person_id="someone"),
        ]

        metrics = person_metrics(person, entries, commitments, now=NOW)

        assert metrics.days_since_interaction == 10
        assert metrics.staleness is Staleness.RECENT
        assert metrics.active_commitments == 2
        assert metrics.i_owe == 1
        assert metrics.waiting_for == 1
        assert metrics.overdue == 1
        assert metrics.balance == 0.0
        # 100 - 5 (silence) - 25 (overdue)
        assert metrics.health_score == 70
        assert metrics.health_status is HealthStatus.NEEDS_ATTENTION
        assert metrics.needs_reflection

    def test_deleted_entries_ignored(self, person: Person):
        entry = Entry(title="Gone", participant_ids=[person.id], occurred_at=days_ago(1))
        entry.soft_delete(NOW)

        metrics = person_metrics(person, [entry], [], now=NOW)

        assert metrics.days_since_interaction is None

    def test_recent_reflection(self, person: Person):
        commitments = [Commitment(title="Plan", person_id=person.id)]
        reflections = [
            Reflection(
                reflection_type=ReflectionType.RELATIONSHIP,
                person_id=person.id,
                created_at=days_ago(3),
            )
        ]

        metrics = person_metrics(person, [], commitments, reflections, now=NOW)

        assert metrics.days_since_reflection == 3
        assert not metrics.needs_reflection


class TestProjectBalance:
    def test_only_active_project_commitments(self):
        project = Project(name="Apollo")
        commitments = [
            Commitment(title="a", project_id=project.id, direction=CommitmentDirection.WAITING_FOR),
            Commitment(title="b", project_id=project.id, direction=CommitmentDirection.WAITING_FOR),
            Commitment(title="c", project_id=project.id, status=CommitmentStatus.DROPPED),
            Commitment(title="d", project_id="other"),
        ]
        assert project_balance(project, commitments) == 1.0


class TestPriorityScore:
    def test_overdue_ranks_higher(self):
        overdue = Commitment(title="a", due_date=days_ago(1))
        later = Commitment(title="b", due_date=NOW + timedelta(days=30))
        assert commitment_priority_score(overdue, now=NOW) > commitment_priority_score(
            later, now=NOW
        )

    def test_project_priority_adds(self):
        c = Commitment(title="a", importance=4, urgency=2)
        assert commitment_priority_score(c, now=NOW) == 3.0
        assert commitment_priority_score(c, project_priority=5, now=NOW) == 4.0


class TestReflectionStats:
    """Tests for reflection_stats."""

    def test_period_counts(self):
        start, end = period_bounds(ReflectionPeriodType.WEEK, NOW)
        entries = [
            Entry(title="m", kind=EntryKind.MEETING, occurred_at=days_ago(2)),
            Entry(title="d", kind=EntryKind.DECISION, occurred_at=days_ago(3)),
            Entry(title="n", is_decision=True, occurred_at=days_ago(4)),
            Entry(title="old", kind=EntryKind.MEETING, occurred_at=days_ago(20)),
        ]
        commitments = [
            Commitment(title="a", created_at=days_ago(1)),
            Commitment(
                title="b",
                created_at=days_ago(30),
                due_date=days_ago(1),
                status=CommitmentStatus.DONE,
            ),
            Commitment(
                title="c", created_at=days_ago(40), direction=CommitmentDirection.WAITING_FOR
            ),
        ]
        projects = [Project(name="p1"), Project(name="p2", status=ProjectStatus.ON_HOLD)]

        stats = reflection_stats(entries, commitments, projects, start, end)

        assert stats.entries_created == 3
        assert stats.meetings_held == 1
        assert stats.decisions_recorded == 2
        assert stats.commitments_created == 2
        assert stats.commitments_completed == 1
        assert stats.i_owe_open == 1
        assert stats.waiting_for_open == 1
        assert stats.projects_active == 1

    def test_period_bounds(self):
        start, end = period_bounds(ReflectionPeriodType.QUARTER, NOW)
        assert end == NOW
        assert (end - start).days == 90


class TestConfidenceCalibration:
    def test_rates_per_level(self):
        def decision(confidence, outcome):
            return Entry(
                title="d",
                kind=EntryKind.DECISION,
                decision_confidence=confidence,
                decision_outcome=outcome,
            )

        decisions = [
            decision(5, DecisionOutcome.VALIDATED),
            decision(5, DecisionOutcome.INVALIDATED),
            decision(2, DecisionOutcome.VALIDATED),
            decision(3, DecisionOutcome.PENDING),
            decision(4, None),
        ]

        assert confidence_calibration(decisions) == {5: 50, 2: 100}
