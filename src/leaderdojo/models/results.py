"""Result value types returned by the AI core. Never persisted here."""

from __future__ import annotations

from dataclasses import dataclass, field

from .entities import CommitmentDirection, ReflectionQA


@dataclass(frozen=True)
class SuggestedAction:
    """A commitment the AI proposes from an entry.

    Attributes:
        direction: Who owes whom.
        title: Brief commitment description.
        counterparty: Person or team, when the model named one.
        selected: Whether the UI pre-selects it for creation.
    """

    direction: CommitmentDirection
    title: str
    counterparty: str | None = None
    selected: bool = True


@dataclass(frozen=True)
class EntrySummaryResult:
    summary: str
    suggested_actions: list[SuggestedAction] = field(default_factory=list)
    assumptions: str | None = None
    suggested_review_days: int | None = None


@dataclass(frozen=True)
class PrepBriefingResult:
    briefing: str
    talking_points: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReflectionPromptsResult:
    questions: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReflectionQuestion:
    """A generated question and the entry it is about.

    The entry linkage travels only in ``linked_entry_id``; ``text`` mentions
    the event by title.
    """

    text: str
    linked_entry_id: str | None = None


@dataclass(frozen=True)
class ContextualReflectionResult:
    questions: list[ReflectionQuestion] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_qa(self) -> list[ReflectionQA]:
        """Unanswered rows ready for the reflection form."""
        return [
            ReflectionQA(question=q.text, linked_entry_id=q.linked_entry_id)
            for q in self.questions
        ]


@dataclass(frozen=True)
class DecisionPatternAnalysis:
    """Up to three insights and one recommendation; any may be absent."""

    calibration_insight: str | None = None
    stakes_pattern_insight: str | None = None
    timing_insight: str | None = None
    recommendation: str | None = None

    @property
    def insights(self) -> list[str]:
        return [
            i
            for i in (
                self.calibration_insight,
                self.stakes_pattern_insight,
                self.timing_insight,
            )
            if i
        ]

    @property
    def has_insights(self) -> bool:
        return bool(self.insights) or bool(self.recommendation)
