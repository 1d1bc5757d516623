"""Tests for prompt builders."""

from datetime import datetime, timedelta

import pytest

from leaderdojo.ai import prompts
from leaderdojo.ai.prompts import (
    build_contextual_reflection_prompt,
    build_decision_patterns_prompt,
    build_entry_summary_prompt,
    build_person_prep_prompt,
    build_prep_briefing_prompt,
    build_quick_question_prompt,
    build_reflection_questions_prompt,
    build_theme_extraction_prompt,
)
from leaderdojo.models import (
    Commitment,
    CommitmentDirection,
    DecisionOutcome,
    DecisionStakes,
    Entry,
    EntryKind,
    Person,
    Project,
    Reflection,
    ReflectionPeriodType,
    ReflectionQA,
    ReflectionStats,
    ReflectionType,
    RelationshipType,
)

NOW = datetime(2024, 3, 15, 9, 0)


@pytest.fixture
def project() -> Project:
    return Project(name="Apollo", priority=4, owner_notes="Launch in Q2", last_active_at=NOW)


def make_entries(count: int) -> list[Entry]:
    return [
        Entry(
            title=f"Sync {i}",
            kind=EntryKind.MEETING,
            occurred_at=NOW - timedelta(days=i),
            raw_content=f"notes {i}",
        )
        for i in range(count)
    ]


class TestEntrySummaryPrompt:
    """Tests for the entry summary builder."""

    def test_includes_project_kind_and_content(self):
        prompt = build_entry_summary_prompt("We agreed to ship.", "Apollo", EntryKind.MEETING)

        assert "Project: Apollo" in prompt.user
        assert "Entry Type: Meeting" in prompt.user
        assert "We agreed to ship." in prompt.user
        assert '"commitments"' in prompt.system

    def test_missing_project_placeholder(self):
        prompt = build_entry_summary_prompt("text", "", EntryKind.NOTE)
        assert "Project: Unknown" in prompt.user

    def test_decision_uses_decision_prompt(self):
        """Decision entries ask for assumptions and a review delay."""
        prompt = build_entry_summary_prompt("Hire Ana.", "Apollo", EntryKind.DECISION)

        assert "suggestedReviewDays" in prompt.system
        assert "assumptions" in prompt.system
        assert "Hire Ana." in prompt.user

    def test_deterministic(self):
        first = build_entry_summary_prompt("x", "P", EntryKind.UPDATE)
        second = build_entry_summary_prompt("x", "P", EntryKind.UPDATE)
        assert first == second


class TestPrepBriefingPrompt:
    """Tests for the project prep builder."""

    def test_project_fields(self, project: Project):
        prompt = build_prep_briefing_prompt(project, [], [])

        assert "Project: Apollo" in prompt.user
        assert "Priority: 4/5" in prompt.user
        assert "Last Active: Mar 15, 2024" in prompt.user
        assert "Owner Notes: Launch in Q2" in prompt.user
        assert "No recent entries" in prompt.user

    def test_placeholders(self):
        prompt = build_prep_briefing_prompt(Project(name="Bare"), [], [])
        assert "Last Active: Unknown" in prompt.user
        assert "Owner Notes: None" in prompt.user

    def test_recent_entries_truncated(self, project: Project):
        """Only the newest entries are included."""
        prompt = build_prep_briefing_prompt(project, make_entries(15), [])

        assert "Sync 0" in prompt.user
        assert f"Sync {prompts.MAX_RECENT_ENTRIES - 1} " in prompt.user
        assert f"Sync {prompts.MAX_RECENT_ENTRIES} " not in prompt.user

    def test_commitments_split_by_direction(self, project: Project):
        commitments = [
            Commitment(title="Send plan", direction=CommitmentDirection.I_OWE),
            Commitment(
                title="Budget",
                direction=CommitmentDirection.WAITING_FOR,
                counterparty="Finance",
                due_date=datetime(2024, 3, 20),
            ),
        ]
        prompt = build_prep_briefing_prompt(project, [], commitments)

        assert "My Open Commitments (1):\n- Send plan" in prompt.user
        assert "Waiting For (1):\n- Budget (from Finance), due Mar 20, 2024" in prompt.user

    def test_commitment_overflow_noted(self, project: Project):
        commitments = [Commitment(title=f"Task {i}") for i in range(13)]
        prompt = build_prep_briefing_prompt(project, [], commitments)

        assert "Task 9" in prompt.user
        assert "Task 10" not in prompt.user
        assert "...and 3 more" in prompt.user


class TestPersonPrepPrompt:
    """Tests for the person prep builder."""

    def test_person_fields(self):
        person = Person(
            name="Ana",
            role="VP Eng",
            organization="Acme",
            relationship_type=RelationshipType.DIRECT_REPORT,
        )
        prompt = build_person_prep_prompt(person, [], [])

        assert "Person: Ana" in prompt.user
        assert "Role: VP Eng" in prompt.user
        assert "Organization: Acme" in prompt.user
        assert "Relationship: Direct Report" in prompt.user
        assert "Past Reflections:\nNone" in prompt.user
        assert "talkingPoints" in prompt.system

    def test_unknown_placeholders(self):
        prompt = build_person_prep_prompt(Person(name="Raj"), [], [])
        assert "Role: Unknown" in prompt.user
        assert "Relationship: Unknown" in prompt.user

    def test_reflection_excerpts_limited(self):
        person = Person(name="Ana")
        reflections = [
            Reflection(
                reflection_type=ReflectionType.RELATIONSHIP,
                person_id=person.id,
                questions_answers=[ReflectionQA("How is it going?", f"Answer {i} " + "x" * 300)],
                created_at=NOW - timedelta(days=i),
            )
            for i in range(5)
        ]
        prompt = build_person_prep_prompt(person, [], [], reflections)

        assert "Answer 0" in prompt.user
        assert "Answer 2" in prompt.user
        assert "Answer 3" not in prompt.user
        assert "x" * 250 not in prompt.user

    def test_reflection_excerpt_bounded(self):
        person = Person(name="Ana")
        reflection = Reflection(
            reflection_type=ReflectionType.RELATIONSHIP,
            person_id=person.id,
            questions_answers=[ReflectionQA("How is it going?", "y" * 500)],
            created_at=NOW,
        )
        prompt = build_person_prep_prompt(person, [], [], [reflection])

        line = prompt.user.split("Past Reflections:\n", 1)[1]
        excerpt = line.split(") ", 1)[1]
        assert len(excerpt) <= prompts.REFLECTION_EXCERPT_CHARS
        assert excerpt.endswith("...")

    def test_only_relationship_reflections(self):
        person = Person(name="Ana")
        reflections = [
            Reflection(
                reflection_type=reflection_type,
                person_id=person.id,
                questions_answers=[ReflectionQA("Q?", f"{reflection_type.value} answer")],
                created_at=NOW,
            )
            for reflection_type in ReflectionType
        ]
        prompt = build_person_prep_prompt(person, [], [], reflections)

        assert "relationship answer" in prompt.user
        assert "periodic answer" not in prompt.user
        assert "quick answer" not in prompt.user


class TestReflectionPrompts:
    """Tests for the reflection question builders."""

    def test_periodic_stats(self):
        stats = ReflectionStats(entries_created=12, meetings_held=5, i_owe_open=3)
        prompt = build_reflection_questions_prompt(ReflectionPeriodType.WEEK, stats)

        assert "Reflection Period: Weekly" in prompt.user
        assert "Entries created: 12" in prompt.user
        assert "Meetings held: 5" in prompt.user
        assert 'Open "I Owe" commitments: 3' in prompt.user

    def test_contextual_ids_only_on_id_lines(self):
        """Entry ids appear on their own line and never in the title line."""
        entries = make_entries(2)
        prompt = build_contextual_reflection_prompt(
            ReflectionType.PERIODIC,
            ReflectionStats(),
            selected_entries=entries,
            period_type=ReflectionPeriodType.MONTH,
        )

        lines = prompt.user.splitlines()
        for entry in entries:
            assert f"  id: {entry.id}" in lines
            title_line = next(line for line in lines if entry.title in line)
            assert entry.id not in title_line
        assert "Period: Monthly" in prompt.user
        assert "linkedEntryId" in prompt.system
        assert "Never put ids" in prompt.system

    def test_contextual_events_truncated(self):
        entries = make_entries(12)
        prompt = build_contextual_reflection_prompt(
            ReflectionType.PROJECT, ReflectionStats(), selected_entries=entries
        )

        assert entries[prompts.MAX_SELECTED_EVENTS - 1].id in prompt.user
        assert entries[prompts.MAX_SELECTED_EVENTS].id not in prompt.user
        assert "Period:" not in prompt.user

    def test_contextual_without_events(self):
        prompt = build_contextual_reflection_prompt(ReflectionType.RELATIONSHIP, ReflectionStats())
        assert "Selected Events:\n- None" in prompt.user

    def test_contextual_person_and_project(self, project: Project):
        prompt = build_contextual_reflection_prompt(
            ReflectionType.RELATIONSHIP,
            ReflectionStats(),
            project=project,
            person=Person(name="Ana", role="CTO"),
        )
        assert "Project: Apollo (priority 4/5)" in prompt.user
        assert "Person: Ana, CTO" in prompt.user


class TestQuickQuestionPrompt:
    def test_entry_details(self):
        entry = Entry(title="Board prep", kind=EntryKind.PREP, occurred_at=NOW, raw_content="Deck")
        prompt = build_quick_question_prompt(entry)

        assert "Event: Board prep" in prompt.user
        assert "Type: Prep" in prompt.user
        assert "Date: Mar 15, 2024" in prompt.user
        assert "Details: Deck" in prompt.user

    def test_no_content_placeholder(self):
        prompt = build_quick_question_prompt(Entry(title="Empty", occurred_at=NOW))
        assert "Details: None" in prompt.user


class TestDecisionPatternsPrompt:
    def test_decision_lines(self):
        decision = Entry(
            title="Hire Ana",
            kind=EntryKind.DECISION,
            occurred_at=NOW - timedelta(days=40),
            decision_confidence=4,
            decision_stakes=DecisionStakes.HIGH,
            decision_review_date=NOW - timedelta(days=5),
        )
        prompt = build_decision_patterns_prompt([decision], NOW)

        assert "Decisions (1 of 1):" in prompt.user
        assert "confidence 4/5" in prompt.user
        assert "stakes High" in prompt.user
        assert "outcome Pending" in prompt.user
        assert "(overdue)" in prompt.user

    def test_reviewed_decision_not_overdue(self):
        decision = Entry(
            title="Pick vendor",
            kind=EntryKind.DECISION,
            occurred_at=NOW - timedelta(days=40),
            decision_outcome=DecisionOutcome.VALIDATED,
            decision_review_date=NOW - timedelta(days=5),
        )
        prompt = build_decision_patterns_prompt([decision], NOW)

        assert "outcome Validated" in prompt.user
        assert "(overdue)" not in prompt.user
        assert "confidence Unknown" in prompt.user

    def test_truncated(self):
        decisions = [
            Entry(title=f"D{i}", kind=EntryKind.DECISION, occurred_at=NOW - timedelta(days=i))
            for i in range(25)
        ]
        prompt = build_decision_patterns_prompt(decisions, NOW)
        assert f"Decisions ({prompts.MAX_DECISIONS} of 25):" in prompt.user
        assert "- D24 " not in prompt.user


class TestThemeExtractionPrompt:
    def test_only_answered_pairs(self):
        qas = [
            ReflectionQA("What went well?", "Delegated the launch"),
            ReflectionQA("What was hard?", "   "),
        ]
        prompt = build_theme_extraction_prompt(qas)

        assert "Q: What went well?\nA: Delegated the launch" in prompt.user
        assert "What was hard?" not in prompt.user
        assert "JSON array" in prompt.system
