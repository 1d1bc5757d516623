"""Import of the web app's JSON export into in-memory entities.

The export has top-level ``projects``, ``entries``, ``commitments``,
``reflections`` and optionally ``people`` arrays. Unknown enum values fall
back to defaults and links to records that are not in the export are dropped.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .models import (
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
    ReflectionType,
    RelationshipType,
)

logger = logging.getLogger(__name__)


class ExportFormatError(Exception):
    """The export could not be decoded."""


class InvalidExportError(ExportFormatError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid JSON format: {detail}")


class MissingFieldError(ExportFormatError):
    def __init__(self, collection: str, field_name: str) -> None:
        super().__init__(f"Missing required field: {collection}.{field_name}")
        self.collection = collection
        self.field_name = field_name


@dataclass
class ImportSummary:
    projects: int = 0
    entries: int = 0
    commitments: int = 0
    reflections: int = 0
    people: int = 0


@dataclass
class JournalSnapshot:
    """Everything decoded from one export."""

    projects: list[Project] = field(default_factory=list)
    entries: list[Entry] = field(default_factory=list)
    commitments: list[Commitment] = field(default_factory=list)
    reflections: list[Reflection] = field(default_factory=list)
    people: list[Person] = field(default_factory=list)

    @property
    def summary(self) -> ImportSummary:
        return ImportSummary(
            projects=len(self.projects),
            entries=len(self.entries),
            commitments=len(self.commitments),
            reflections=len(self.reflections),
            people=len(self.people),
        )

    def find_project(self, key: str) -> Project | None:
        """Project by id, or by case-insensitive name."""
        for project in self.projects:
            if project.id == key or project.name.lower() == key.lower():
                return project
        return None

    def find_person(self, key: str) -> Person | None:
        for person in self.people:
            if person.id == key or person.name.lower() == key.lower():
                return person
        return None


def parse_datetime(value: Any) -> datetime | None:
    """ISO-8601 string to a naive local datetime; anything else to None."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Ignoring unparseable date: %s", value)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _required(item: dict[str, Any], collection: str, name: str) -> str:
    value = item.get(name)
    if not isinstance(value, str) or not value:
        raise MissingFieldError(collection, name)
    return value


def _optional_str(item: dict[str, Any], name: str) -> str | None:
    value = item.get(name)
    return value if isinstance(value, str) and value else None


def _int(item: dict[str, Any], name: str, default: int | None) -> int | None:
    value = item.get(name)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


def _records(data: dict[str, Any], name: str) -> list[dict[str, Any]]:
    records = data.get(name) or []
    if not isinstance(records, list):
        raise InvalidExportError(f"'{name}' must be an array")
    return [r for r in records if isinstance(r, dict)]


def _known(value: str | None, ids: set[str]) -> str | None:
    return value if value in ids else None


def load_export(source: str | Path) -> JournalSnapshot:
    """Decode an export from a file path or a JSON string.

    Raises:
        InvalidExportError: Not JSON, or not the expected shape.
        MissingFieldError: A record lacks its id or title/name.
    """
    if isinstance(source, Path):
        text = source.read_text(encoding="utf-8")
    else:
        text = source

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidExportError(str(e)) from e
    if not isinstance(data, dict):
        raise InvalidExportError("top level must be an object")

    snapshot = JournalSnapshot()

    for item in _records(data, "people"):
        snapshot.people.append(
            Person(
                id=_required(item, "people", "id"),
                name=_required(item, "people", "name"),
                organization=_optional_str(item, "organization"),
                role=_optional_str(item, "role"),
                relationship_type=(
                    RelationshipType.parse(item["relationshipType"])
                    if item.get("relationshipType")
                    else None
                ),
                notes=_optional_str(item, "notes"),
            )
        )
    person_ids = {p.id for p in snapshot.people}

    for item in _records(data, "projects"):
        snapshot.projects.append(
            Project(
                id=_required(item, "projects", "id"),
                name=_required(item, "projects", "name"),
                description=_optional_str(item, "description"),
                type=ProjectType.parse(item.get("type")),
                status=ProjectStatus.parse(item.get("status")),
                priority=_int(item, "priority", 3),
                owner_notes=_optional_str(item, "ownerNotes"),
                last_active_at=parse_datetime(item.get("lastActiveAt"))
                or parse_datetime(item.get("createdAt")),
            )
        )
    project_ids = {p.id for p in snapshot.projects}

    for item in _records(data, "entries"):
        participants = item.get("participantIds") or []
        snapshot.entries.append(
            Entry(
                id=_required(item, "entries", "id"),
                title=_required(item, "entries", "title"),
                kind=EntryKind.parse(item.get("kind")),
                occurred_at=parse_datetime(item.get("occurredAt")) or datetime.now(),
                raw_content=_optional_str(item, "rawContent"),
                ai_summary=_optional_str(item, "aiSummary"),
                is_decision=bool(item.get("isDecision", False)),
                decision_rationale=_optional_str(item, "decisionRationale"),
                decision_assumptions=_optional_str(item, "decisionAssumptions"),
                decision_confidence=_int(item, "decisionConfidence", None),
                decision_stakes=(
                    DecisionStakes.parse(item["decisionStakes"])
                    if item.get("decisionStakes")
                    else None
                ),
                decision_review_date=parse_datetime(item.get("decisionReviewDate")),
                decision_outcome=(
                    DecisionOutcome.parse(item["decisionOutcome"])
                    if item.get("decisionOutcome")
                    else None
                ),
                decision_learning=_optional_str(item, "decisionLearning"),
                project_id=_known(_optional_str(item, "projectId"), project_ids),
                participant_ids=[
                    p for p in participants if isinstance(p, str) and p in person_ids
                ],
                deleted_at=parse_datetime(item.get("deletedAt")),
            )
        )
    entry_ids = {e.id for e in snapshot.entries}

    for item in _records(data, "commitments"):
        commitment = Commitment(
            id=_required(item, "commitments", "id"),
            title=_required(item, "commitments", "title"),
            direction=CommitmentDirection.parse(item.get("direction")),
            status=CommitmentStatus.parse(item.get("status")),
            counterparty=_optional_str(item, "counterparty"),
            due_date=parse_datetime(item.get("dueDate")),
            importance=_int(item, "importance", 3),
            urgency=_int(item, "urgency", 3),
            notes=_optional_str(item, "notes"),
            ai_generated=bool(item.get("aiGenerated", False)),
            project_id=_known(_optional_str(item, "projectId"), project_ids),
            person_id=_known(_optional_str(item, "personId"), person_ids),
            source_entry_id=_known(_optional_str(item, "entryId"), entry_ids),
            completed_at=parse_datetime(item.get("completedAt")),
            created_at=parse_datetime(item.get("createdAt")) or datetime.now(),
        )
        if not commitment.has_owner():
            logger.warning("Commitment %s has neither project nor person", commitment.id)
        snapshot.commitments.append(commitment)

    for item in _records(data, "reflections"):
        qa_items = item.get("questionsAnswers") or []
        questions_answers = [
            ReflectionQA(
                question=qa["question"],
                answer=qa.get("answer") if isinstance(qa.get("answer"), str) else "",
                linked_entry_id=_known(qa.get("linkedEntryId"), entry_ids),
            )
            for qa in qa_items
            if isinstance(qa, dict) and isinstance(qa.get("question"), str)
        ]
        tags = [t for t in item.get("tags") or [] if isinstance(t, str)]
        reflection = Reflection(
            id=_required(item, "reflections", "id"),
            reflection_type=ReflectionType.parse(item.get("reflectionType")),
            period_type=(
                ReflectionPeriodType.parse(item["periodType"]) if item.get("periodType") else None
            ),
            mood=ReflectionMood.parse(item["mood"]) if item.get("mood") else None,
            questions_answers=questions_answers,
            project_id=_known(_optional_str(item, "projectId"), project_ids),
            person_id=_known(_optional_str(item, "personId"), person_ids),
            created_at=parse_datetime(item.get("createdAt")) or datetime.now(),
        )
        for tag in tags:
            reflection.add_tag(tag)
        snapshot.reflections.append(reflection)

    summary = snapshot.summary
    logger.info(
        "Imported %d projects, %d entries, %d commitments, %d reflections, %d people",
        summary.projects,
        summary.entries,
        summary.commitments,
        summary.reflections,
        summary.people,
    )
    return snapshot
