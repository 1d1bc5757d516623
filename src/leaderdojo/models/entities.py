"""Read-only projections of the journal entities.

The persistence layer owns these objects; the core only reads them. Enum
``parse`` constructors are lenient: unknown strings map to a default value so
that data written by a newer client never breaks decoding.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


def _new_id() -> str:
    return str(uuid.uuid4())


class _LenientEnum(str, Enum):
    """String enum with a default used for unrecognized values."""

    @classmethod
    def default(cls) -> _LenientEnum:
        return next(iter(cls))

    @classmethod
    def parse(cls, value: object) -> _LenientEnum:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.default()

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class EntryKind(_LenientEnum):
    """Timeline card kinds."""

    MEETING = "meeting"
    UPDATE = "update"
    DECISION = "decision"
    NOTE = "note"
    PREP = "prep"
    REFLECTION = "reflection"

    @classmethod
    def default(cls) -> EntryKind:
        return cls.NOTE

    @property
    def supports_ai_summary(self) -> bool:
        return self in (EntryKind.MEETING, EntryKind.UPDATE, EntryKind.DECISION)


class DecisionStakes(_LenientEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def default(cls) -> DecisionStakes:
        return cls.MEDIUM


class DecisionOutcome(_LenientEnum):
    PENDING = "pending"
    VALIDATED = "validated"
    INVALIDATED = "invalidated"
    MIXED = "mixed"
    SUPERSEDED = "superseded"


class CommitmentDirection(_LenientEnum):
    """Who owes whom."""

    I_OWE = "i_owe"
    WAITING_FOR = "waiting_for"

    @property
    def display_name(self) -> str:
        return "I Owe" if self is CommitmentDirection.I_OWE else "Waiting For"


class CommitmentStatus(_LenientEnum):
    OPEN = "open"
    DONE = "done"
    BLOCKED = "blocked"
    DROPPED = "dropped"

    @property
    def is_active(self) -> bool:
        return self in (CommitmentStatus.OPEN, CommitmentStatus.BLOCKED)


class ProjectType(_LenientEnum):
    PROJECT = "project"
    RELATIONSHIP = "relationship"
    AREA = "area"


class ProjectStatus(_LenientEnum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class RelationshipType(_LenientEnum):
    """Classification of a counterparty."""

    MANAGER = "manager"
    DIRECT_REPORT = "direct_report"
    SKIP_LEVEL = "skip_level"
    PEER = "peer"
    CROSS_FUNCTIONAL = "cross_functional"
    STAKEHOLDER = "stakeholder"
    BOARD_MEMBER = "board_member"
    EXECUTIVE = "executive"
    FOUNDER = "founder"
    PORTFOLIO_FOUNDER = "portfolio_founder"
    INVESTOR = "investor"
    ADVISOR = "advisor"
    MENTOR = "mentor"
    MENTEE = "mentee"
    CLIENT = "client"
    VENDOR = "vendor"
    PARTNER = "partner"
    CANDIDATE = "candidate"
    OTHER = "other"

    @classmethod
    def default(cls) -> RelationshipType:
        return cls.OTHER

    @property
    def group_name(self) -> str:
        if self in _INTERNAL_TYPES:
            return "Internal"
        if self in _ADVISORY_TYPES:
            return "Investment & Advisory"
        if self is RelationshipType.OTHER:
            return "Other"
        return "External"


_INTERNAL_TYPES = frozenset(
    {
        RelationshipType.MANAGER,
        RelationshipType.DIRECT_REPORT,
        RelationshipType.SKIP_LEVEL,
        RelationshipType.PEER,
        RelationshipType.CROSS_FUNCTIONAL,
        RelationshipType.STAKEHOLDER,
        RelationshipType.EXECUTIVE,
        RelationshipType.FOUNDER,
    }
)
_ADVISORY_TYPES = frozenset(
    {
        RelationshipType.PORTFOLIO_FOUNDER,
        RelationshipType.INVESTOR,
        RelationshipType.ADVISOR,
        RelationshipType.MENTOR,
        RelationshipType.MENTEE,
        RelationshipType.BOARD_MEMBER,
    }
)


class ReflectionType(_LenientEnum):
    QUICK = "quick"
    PERIODIC = "periodic"
    PROJECT = "project"
    RELATIONSHIP = "relationship"

    @classmethod
    def default(cls) -> ReflectionType:
        return cls.PERIODIC


class ReflectionPeriodType(_LenientEnum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"

    @property
    def display_name(self) -> str:
        return {"week": "Weekly", "month": "Monthly", "quarter": "Quarterly"}[self.value]


class ReflectionMood(_LenientEnum):
    CONFIDENT = "confident"
    UNCERTAIN = "uncertain"
    ENERGIZED = "energized"
    DRAINED = "drained"
    NEUTRAL = "neutral"

    @classmethod
    def default(cls) -> ReflectionMood:
        return cls.NEUTRAL


@dataclass
class Entry:
    """One logged activity on the timeline.

    Attributes:
        kind: Card kind (meeting, decision, ...).
        title: Short title shown on the timeline.
        occurred_at: When the activity happened.
        raw_content: Free text as captured.
        ai_summary: Summary accepted from the AI, if any.
        is_decision: Marks a non-decision kind as a decision.
        project_id: Linked project, if any.
        participant_ids: Linked people.
        deleted_at: Set when soft-deleted.
    """

    title: str
    kind: EntryKind = EntryKind.NOTE
    occurred_at: datetime = field(default_factory=datetime.now)
    raw_content: str | None = None
    ai_summary: str | None = None
    is_decision: bool = False
    decision_rationale: str | None = None
    decision_assumptions: str | None = None
    decision_confidence: int | None = None
    decision_stakes: DecisionStakes | None = None
    decision_review_date: datetime | None = None
    decision_outcome: DecisionOutcome | None = None
    decision_outcome_notes: str | None = None
    decision_learning: str | None = None
    project_id: str | None = None
    participant_ids: list[str] = field(default_factory=list)
    deleted_at: datetime | None = None
    id: str = field(default_factory=_new_id)

    @property
    def display_content(self) -> str:
        """AI summary when present, otherwise raw content cut at 200 chars."""
        if self.ai_summary:
            return self.ai_summary
        if self.raw_content:
            text = self.raw_content[:200]
            return text + "..." if len(self.raw_content) > 200 else text
        return ""

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self, now: datetime | None = None) -> None:
        self.deleted_at = now or datetime.now()

    def restore(self) -> None:
        self.deleted_at = None

    @property
    def is_decision_entry(self) -> bool:
        return self.kind is EntryKind.DECISION or self.is_decision

    @property
    def has_been_reviewed(self) -> bool:
        return self.decision_outcome not in (None, DecisionOutcome.PENDING)

    def needs_decision_review(self, now: datetime | None = None) -> bool:
        """Review date has passed and no outcome was recorded yet."""
        if not self.is_decision_entry or self.decision_review_date is None:
            return False
        if self.has_been_reviewed:
            return False
        return self.decision_review_date <= (now or datetime.now())


@dataclass
class Commitment:
    """A promise in one of two directions.

    A commitment should reference at least a project or a person; callers
    check this with ``has_owner`` before saving.
    """

    title: str
    direction: CommitmentDirection = CommitmentDirection.I_OWE
    status: CommitmentStatus = CommitmentStatus.OPEN
    counterparty: str | None = None
    due_date: datetime | None = None
    importance: int = 3
    urgency: int = 3
    notes: str | None = None
    ai_generated: bool = False
    project_id: str | None = None
    person_id: str | None = None
    source_entry_id: str | None = None
    completed_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    def has_owner(self) -> bool:
        return self.project_id is not None or self.person_id is not None

    def mark_done(self, now: datetime | None = None) -> None:
        self.status = CommitmentStatus.DONE
        self.completed_at = now or datetime.now()

    def reopen(self) -> None:
        self.status = CommitmentStatus.OPEN
        self.completed_at = None

    def is_overdue(self, now: datetime | None = None) -> bool:
        if self.due_date is None or not self.status.is_active:
            return False
        return self.due_date < (now or datetime.now())


@dataclass
class Project:
    """Grouping container for entries and commitments."""

    name: str
    description: str | None = None
    type: ProjectType = ProjectType.PROJECT
    status: ProjectStatus = ProjectStatus.ACTIVE
    priority: int = 3
    owner_notes: str | None = None
    last_active_at: datetime | None = None
    id: str = field(default_factory=_new_id)

    def touch(self, now: datetime | None = None) -> None:
        """Record activity; called when entries or commitments are added."""
        self.last_active_at = now or datetime.now()


@dataclass
class Person:
    """A counterparty the user works with."""

    name: str
    organization: str | None = None
    role: str | None = None
    relationship_type: RelationshipType | None = None
    notes: str | None = None
    id: str = field(default_factory=_new_id)

    @property
    def display_name(self) -> str:
        if self.organization:
            return f"{self.name} • {self.organization}"
        return self.name


@dataclass
class ReflectionQA:
    """A question, its answer, and the entry it refers to (if any)."""

    question: str
    answer: str = ""
    linked_entry_id: str | None = None


@dataclass
class ReflectionStats:
    """Activity snapshot for a reflection period."""

    entries_created: int = 0
    commitments_created: int = 0
    commitments_completed: int = 0
    i_owe_open: int = 0
    waiting_for_open: int = 0
    projects_active: int = 0
    meetings_held: int = 0
    decisions_recorded: int = 0


@dataclass
class Reflection:
    """A saved set of question/answer pairs."""

    reflection_type: ReflectionType = ReflectionType.PERIODIC
    period_type: ReflectionPeriodType | None = None
    mood: ReflectionMood | None = None
    questions_answers: list[ReflectionQA] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    project_id: str | None = None
    person_id: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    def add_tag(self, tag: str) -> None:
        normalized = tag.strip().lower()
        if normalized and normalized not in self.tags:
            self.tags.append(normalized)

    def remove_tag(self, tag: str) -> None:
        normalized = tag.strip().lower()
        self.tags = [t for t in self.tags if t != normalized]

    @property
    def answered_count(self) -> int:
        return sum(1 for qa in self.questions_answers if qa.answer)

    @property
    def is_complete(self) -> bool:
        qa = self.questions_answers
        return bool(qa) and all(item.answer for item in qa)
