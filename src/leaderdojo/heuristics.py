"""Relationship and commitment heuristics.

Pure functions over in-memory entities. Thresholds come from
``HeuristicsPolicy`` so they can be tuned without code changes.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .config import HeuristicsPolicy
from .models import (
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
    ReflectionStats,
)

_DEFAULT_POLICY = HeuristicsPolicy()

PERIOD_DAYS = {
    ReflectionPeriodType.WEEK: 7,
    ReflectionPeriodType.MONTH: 30,
    ReflectionPeriodType.QUARTER: 90,
}


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs_attention"
    AT_RISK = "at_risk"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class Staleness(str, Enum):
    ACTIVE = "active"
    RECENT = "recent"
    DORMANT = "dormant"


def days_between(earlier: datetime, now: datetime) -> int:
    """Whole days from ``earlier`` to ``now``, never negative."""
    return max(0, (now - earlier).days)


def commitment_balance(i_owe: int, waiting_for: int) -> float:
    """Signed ratio in [-1, 1].

    Positive means the counterparty owes the user more; negative means the
    user owes more. Zero when there are no commitments.
    """
    total = i_owe + waiting_for
    if total <= 0:
        return 0.0
    return (waiting_for - i_owe) / total


def commitment_difference(i_owe: int, waiting_for: int) -> int:
    """Signed count difference, same sign convention as ``commitment_balance``."""
    return waiting_for - i_owe


def relationship_health_score(
    days_since_interaction: int | None,
    overdue_count: int,
    balance: float,
    days_since_reflection: int | None = None,
    policy: HeuristicsPolicy | None = None,
) -> int:
    """0-100 score; more silence or more overdue items never raise it.

    Args:
        days_since_interaction: Days since the last entry with the person,
            None when there has never been one.
        overdue_count: Active commitments past their due date.
        balance: Output of ``commitment_balance``.
        days_since_reflection: Days since the last relationship reflection.
        policy: Thresholds; defaults to HeuristicsPolicy().
    """
    policy = policy or _DEFAULT_POLICY
    score = 100

    if days_since_interaction is None:
        score -= policy.no_interaction_deduction
    else:
        for threshold in sorted(policy.staleness_deductions, reverse=True):
            if days_since_interaction > threshold:
                score -= policy.staleness_deductions[threshold]
                break

    if overdue_count > 0:
        score -= policy.first_overdue_deduction
        score -= policy.extra_overdue_deduction * (overdue_count - 1)

    imbalance = abs(balance)
    if imbalance > policy.severe_imbalance:
        score -= policy.severe_imbalance_deduction
    elif imbalance > policy.mild_imbalance:
        score -= policy.mild_imbalance_deduction

    if days_since_reflection is not None and days_since_reflection < policy.reflection_bonus_days:
        score += policy.reflection_bonus

    return max(0, min(100, score))


def health_status(score: int, policy: HeuristicsPolicy | None = None) -> HealthStatus:
    policy = policy or _DEFAULT_POLICY
    if score >= policy.healthy_min_score:
        return HealthStatus.HEALTHY
    if score >= policy.needs_attention_min_score:
        return HealthStatus.NEEDS_ATTENTION
    return HealthStatus.AT_RISK


def staleness_bucket(days: int | None, policy: HeuristicsPolicy | None = None) -> Staleness:
    """<=7 days active, 8-30 recent, beyond that (or never) dormant."""
    policy = policy or _DEFAULT_POLICY
    if days is None:
        return Staleness.DORMANT
    if days <= policy.active_max_days:
        return Staleness.ACTIVE
    if days <= policy.recent_max_days:
        return Staleness.RECENT
    return Staleness.DORMANT


@dataclass(frozen=True)
class PersonMetrics:
    """Derived, non-persisted metrics for one person."""

    person_id: str
    active_commitments: int
    i_owe: int
    waiting_for: int
    overdue: int
    days_since_interaction: int | None
    days_since_reflection: int | None
    balance: float
    health_score: int
    health_status: HealthStatus
    staleness: Staleness
    needs_reflection: bool


def person_metrics(
    person: Person,
    entries: Iterable[Entry],
    commitments: Iterable[Commitment],
    reflections: Iterable[Reflection] = (),
    now: datetime | None = None,
    policy: HeuristicsPolicy | None = None,
) -> PersonMetrics:
    """Compute every relationship metric for ``person`` from full collections."""
    policy = policy or _DEFAULT_POLICY
    now = now or datetime.now()

    interactions = [
        e.occurred_at for e in entries if not e.is_deleted and person.id in e.participant_ids
    ]
    theirs = [c for c in commitments if c.person_id == person.id]
    active = [c for c in theirs if c.status.is_active]
    i_owe = sum(1 for c in active if c.direction is CommitmentDirection.I_OWE)
    waiting_for = len(active) - i_owe
    overdue = sum(1 for c in active if c.is_overdue(now))

    reflected = [r.created_at for r in reflections if r.person_id == person.id]

    days_since_interaction = days_between(max(interactions), now) if interactions else None
    days_since_reflection = days_between(max(reflected), now) if reflected else None
    balance = commitment_balance(i_owe, waiting_for)
    score = relationship_health_score(
        days_since_interaction, overdue, balance, days_since_reflection, policy
    )

    reflection_gap = days_since_reflection if days_since_reflection is not None else 30
    return PersonMetrics(
        person_id=person.id,
        active_commitments=len(active),
        i_owe=i_owe,
        waiting_for=waiting_for,
        overdue=overdue,
        days_since_interaction=days_since_interaction,
        days_since_reflection=days_since_reflection,
        balance=balance,
        health_score=score,
        health_status=health_status(score, policy),
        staleness=staleness_bucket(days_since_interaction, policy),
        needs_reflection=bool(active) and reflection_gap > policy.needs_reflection_days,
    )


def project_balance(project: Project, commitments: Iterable[Commitment]) -> float:
    """Commitment balance over a project's active commitments."""
    active = [c for c in commitments if c.project_id == project.id and c.status.is_active]
    i_owe = sum(1 for c in active if c.direction is CommitmentDirection.I_OWE)
    return commitment_balance(i_owe, len(active) - i_owe)


def commitment_priority_score(
    commitment: Commitment,
    project_priority: int | None = None,
    now: datetime | None = None,
) -> float:
    """Sort key for commitments; higher is more pressing."""
    now = now or datetime.now()
    score = (commitment.importance + commitment.urgency) / 2.0
    if commitment.is_overdue(now):
        score += 2.0
    elif commitment.due_date is not None and (commitment.due_date - now).days <= 7:
        score += 1.0
    if project_priority is not None:
        score += project_priority * 0.2
    return score


def period_bounds(period_type: ReflectionPeriodType, now: datetime) -> tuple[datetime, datetime]:
    return now - timedelta(days=PERIOD_DAYS[period_type]), now


def reflection_stats(
    entries: Iterable[Entry],
    commitments: Sequence[Commitment],
    projects: Iterable[Project],
    period_start: datetime | None = None,
    period_end: datetime | None = None,
) -> ReflectionStats:
    """Activity counts for a reflection.

    Entries are counted when they fall in the period. Commitments count by
    due date when they have one, else by creation date. Open counts cover
    every commitment regardless of period.
    """

    def in_period(moment: datetime) -> bool:
        if period_start is not None and moment < period_start:
            return False
        if period_end is not None and moment > period_end:
            return False
        return True

    relevant_entries = [e for e in entries if not e.is_deleted and in_period(e.occurred_at)]
    relevant_commitments = [c for c in commitments if in_period(c.due_date or c.created_at)]
    open_commitments = [c for c in commitments if c.status is CommitmentStatus.OPEN]

    return ReflectionStats(
        entries_created=len(relevant_entries),
        commitments_created=len(relevant_commitments),
        commitments_completed=sum(
            1 for c in relevant_commitments if c.status is CommitmentStatus.DONE
        ),
        i_owe_open=sum(1 for c in open_commitments if c.direction is CommitmentDirection.I_OWE),
        waiting_for_open=sum(
            1 for c in open_commitments if c.direction is CommitmentDirection.WAITING_FOR
        ),
        projects_active=sum(1 for p in projects if p.status is ProjectStatus.ACTIVE),
        meetings_held=sum(1 for e in relevant_entries if e.kind is EntryKind.MEETING),
        decisions_recorded=sum(1 for e in relevant_entries if e.is_decision_entry),
    )


def confidence_calibration(decisions: Iterable[Entry]) -> dict[int, int]:
    """Validation rate (0-100) per confidence level, over reviewed decisions."""
    reviewed = [d for d in decisions if d.is_decision_entry and d.has_been_reviewed]
    calibration: dict[int, int] = {}
    for confidence in range(1, 6):
        at_level = [d for d in reviewed if d.decision_confidence == confidence]
        if not at_level:
            continue
        validated = sum(1 for d in at_level if d.decision_outcome is DecisionOutcome.VALIDATED)
        calibration[confidence] = int(validated / len(at_level) * 100)
    return calibration
