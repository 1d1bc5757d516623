"""Domain entities and AI result types."""

from .entities import (
    Commitment,
    CommitmentDirection,
    CommitmentStatus,
    DecisionOutcome,
    DecisionStakes,
    Entry,
    EntryKind,
    Person,
    Project,
    ProjectStatus,
    ProjectType,
    Reflection,
    ReflectionMood,
    ReflectionPeriodType,
    ReflectionQA,
    ReflectionStats,
    ReflectionType,
    RelationshipType,
)
from .results import (
    ContextualReflectionResult,
    DecisionPatternAnalysis,
    EntrySummaryResult,
    PrepBriefingResult,
    ReflectionPromptsResult,
    ReflectionQuestion,
    SuggestedAction,
)

__all__ = [
    "Commitment",
    "CommitmentDirection",
    "CommitmentStatus",
    "ContextualReflectionResult",
    "DecisionOutcome",
    "DecisionPatternAnalysis",
    "DecisionStakes",
    "Entry",
    "EntryKind",
    "EntrySummaryResult",
    "Person",
    "PrepBriefingResult",
    "Project",
    "ProjectStatus",
    "ProjectType",
    "Reflection",
    "ReflectionMood",
    "ReflectionPeriodType",
    "ReflectionPromptsResult",
    "ReflectionQA",
    "ReflectionQuestion",
    "ReflectionStats",
    "ReflectionType",
    "RelationshipType",
    "SuggestedAction",
]
