"""Prompt builders, one per AI operation.

Every builder is a pure function of its arguments and returns a
(system, user) pair. Long inputs are truncated to keep prompts bounded;
missing optional values render as "Unknown" or "None".
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from ..models import (
    Commitment,
    CommitmentDirection,
    Entry,
    EntryKind,
    Person,
    Project,
    Reflection,
    ReflectionPeriodType,
    ReflectionQA,
    ReflectionStats,
    ReflectionType,
)

MAX_RECENT_ENTRIES = 10
MAX_COMMITMENTS_PER_DIRECTION = 10
MAX_REFLECTION_EXCERPTS = 3
REFLECTION_EXCERPT_CHARS = 200
MAX_SELECTED_EVENTS = 10
MAX_DECISIONS = 20
MAX_THEME_ANSWERS = 10

UNKNOWN = "Unknown"
NONE = "None"


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


ENTRY_SUMMARY_SYSTEM = """You are an executive assistant helping a leader process meeting notes and updates.
Analyze the content and provide:
1. A structured summary (background, key points, decisions, open questions)
2. A list of commitments (things the user owes others, or things others owe the user)

Format your response as JSON with the following structure:
{
    "summary": "Structured summary text",
    "commitments": [
        {
            "direction": "i_owe" or "waiting_for",
            "title": "Brief commitment description",
            "counterparty": "Person or team name if mentioned"
        }
    ]
}"""

DECISION_SUMMARY_SYSTEM = """You are an executive coach helping a leader record a decision well.
Analyze the decision and provide:
1. A concise summary of what was decided and why
2. The key assumptions that must hold for the decision to work
3. How many days from now the decision should be reviewed
4. Any commitments that follow from the decision

Format your response as JSON with the following structure:
{
    "summary": "What was decided and why",
    "assumptions": "What must be true for this to work",
    "suggestedReviewDays": 30,
    "commitments": [
        {
            "direction": "i_owe" or "waiting_for",
            "title": "Brief commitment description",
            "counterparty": "Person or team name if mentioned"
        }
    ]
}"""

PREP_BRIEFING_SYSTEM = """You are an executive coach helping a leader prepare for an important conversation.
Generate a brief but insightful prep briefing that includes:
1. Current project status (one sentence)
2. Key events from the timeline
3. Outstanding commitments to address
4. Suggested talking points for the upcoming conversation

Keep it concise and actionable."""

PERSON_PREP_SYSTEM = """You are an executive coach helping a leader prepare for a conversation with a specific person.
Use the relationship context to produce:
1. A short briefing on where the relationship stands
2. Promises still open in either direction
3. 3-5 talking points for the conversation

Format your response as JSON:
{
    "briefing": "Briefing text",
    "talkingPoints": ["point", "point"]
}"""

REFLECTION_QUESTIONS_SYSTEM = """You are a leadership coach helping a leader reflect on their recent work.
Based on their activity statistics, generate 3-5 thoughtful reflection questions
and 1-3 short suggestions for improvement.
Questions should help them:
- Recognize patterns in their behavior
- Learn from successes and challenges
- Improve their leadership and decision-making

Format your response as JSON:
{
    "questions": ["question", "question"],
    "suggestions": ["suggestion"]
}"""

CONTEXTUAL_REFLECTION_SYSTEM = """You are a leadership coach helping a leader reflect on specific events.
Generate 3-5 reflection questions grounded in the events, commitments and
statistics provided, plus 1-3 short suggestions.

Rules:
- Refer to an event only by its title, in plain words.
- Never put ids, brackets or reference codes inside question text.
- When a question is about one event, put that event's id in "linkedEntryId";
  otherwise use null.

Format your response as JSON:
{
    "questions": [
        {"question": "Question text", "linkedEntryId": "event id or null"}
    ],
    "suggestions": ["suggestion"]
}"""

QUICK_QUESTION_SYSTEM = """You are a leadership coach. Write ONE short reflection question
(under 20 words) about the event described. Refer to the event by its title only.
Return only the question text, with no preamble."""

DECISION_PATTERNS_SYSTEM = """You are a decision-making coach reviewing a leader's decision log.
Look for patterns across the decisions and provide:
- calibrationInsight: how well confidence matched actual outcomes
- stakesPatternInsight: how they handle low versus high stakes decisions
- timingInsight: how promptly decisions get reviewed
- recommendation: one concrete thing to try next

Each field is one or two sentences. Use null for any insight the data does not support.

Format your response as JSON:
{
    "calibrationInsight": "..." or null,
    "stakesPatternInsight": "..." or null,
    "timingInsight": "..." or null,
    "recommendation": "..." or null
}"""

THEME_EXTRACTION_SYSTEM = """You tag leadership reflections with themes.
Read the answers and return 1-5 short lowercase theme tags such as
"delegation", "feedback", "conflict", "prioritization", "communication".

Return only a JSON array of strings."""


def _format_date(value: datetime | None) -> str:
    return value.strftime("%b %d, %Y") if value else UNKNOWN


def _or_placeholder(value: object | None, placeholder: str = NONE) -> str:
    if value is None:
        return placeholder
    text = str(value).strip()
    return text or placeholder


def _excerpt(text: str, limit: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3].rstrip() + "..."


def _entry_lines(entries: Sequence[Entry]) -> str:
    recent = sorted(entries, key=lambda e: e.occurred_at, reverse=True)[:MAX_RECENT_ENTRIES]
    if not recent:
        return "No recent entries"
    lines = []
    for entry in recent:
        lines.append(
            f"- [{entry.kind.display_name}] {entry.title} ({_format_date(entry.occurred_at)})"
        )
        content = entry.display_content
        if content:
            lines.append(f"  {content}")
    return "\n".join(lines)


def _split_commitments(
    commitments: Sequence[Commitment],
) -> tuple[list[Commitment], list[Commitment]]:
    i_owe = [c for c in commitments if c.direction is CommitmentDirection.I_OWE]
    waiting = [c for c in commitments if c.direction is CommitmentDirection.WAITING_FOR]
    return i_owe, waiting


def _commitment_block(commitments: Sequence[Commitment], show_counterparty: bool) -> str:
    shown = list(commitments)[:MAX_COMMITMENTS_PER_DIRECTION]
    if not shown:
        return "- None"
    lines = []
    for c in shown:
        line = f"- {c.title}"
        if show_counterparty:
            line += f" (from {_or_placeholder(c.counterparty, 'unknown')})"
        if c.due_date:
            line += f", due {_format_date(c.due_date)}"
        lines.append(line)
    if len(commitments) > len(shown):
        lines.append(f"- ...and {len(commitments) - len(shown)} more")
    return "\n".join(lines)


def _stats_block(stats: ReflectionStats) -> str:
    return "\n".join(
        [
            f"- Entries created: {stats.entries_created}",
            f"- Meetings held: {stats.meetings_held}",
            f"- Decisions recorded: {stats.decisions_recorded}",
            f"- Commitments created: {stats.commitments_created}",
            f"- Commitments completed: {stats.commitments_completed}",
            f'- Open "I Owe" commitments: {stats.i_owe_open}',
            f'- Open "Waiting For" commitments: {stats.waiting_for_open}',
            f"- Active projects: {stats.projects_active}",
        ]
    )


def _reflection_excerpts(reflections: Sequence[Reflection]) -> str:
    """Excerpts from relationship reflections only, newest first."""
    relationship = [r for r in reflections if r.reflection_type is ReflectionType.RELATIONSHIP]
    latest = sorted(relationship, key=lambda r: r.created_at, reverse=True)
    excerpts = []
    for reflection in latest:
        answered = [qa for qa in reflection.questions_answers if qa.answer.strip()]
        if not answered:
            continue
        text = " ".join(f"{qa.question} {qa.answer}" for qa in answered)
        excerpts.append(
            f"- ({_format_date(reflection.created_at)}) "
            f"{_excerpt(text, REFLECTION_EXCERPT_CHARS)}"
        )
        if len(excerpts) == MAX_REFLECTION_EXCERPTS:
            break
    return "\n".join(excerpts) if excerpts else NONE


def build_entry_summary_prompt(raw_content: str, project_name: str, kind: EntryKind) -> Prompt:
    """Prompt for summarizing a meeting, update or note.

    Decision entries get the decision prompt instead.
    """
    if kind is EntryKind.DECISION:
        return build_decision_summary_prompt(raw_content, project_name)
    user = (
        f"Project: {_or_placeholder(project_name, UNKNOWN)}\n"
        f"Entry Type: {kind.display_name}\n\n"
        f"Content:\n{raw_content}"
    )
    return Prompt(ENTRY_SUMMARY_SYSTEM, user)


def build_decision_summary_prompt(raw_content: str, project_name: str) -> Prompt:
    user = (
        f"Project: {_or_placeholder(project_name, UNKNOWN)}\n"
        f"Entry Type: {EntryKind.DECISION.display_name}\n\n"
        f"Decision notes:\n{raw_content}"
    )
    return Prompt(DECISION_SUMMARY_SYSTEM, user)


def build_prep_briefing_prompt(
    project: Project,
    recent_entries: Sequence[Entry],
    open_commitments: Sequence[Commitment],
) -> Prompt:
    i_owe, waiting = _split_commitments(open_commitments)
    user = (
        f"Project: {project.name}\n"
        f"Priority: {project.priority}/5\n"
        f"Last Active: {_format_date(project.last_active_at)}\n"
        f"Owner Notes: {_or_placeholder(project.owner_notes)}\n\n"
        f"Recent Timeline:\n{_entry_lines(recent_entries)}\n\n"
        f"My Open Commitments ({len(i_owe)}):\n{_commitment_block(i_owe, False)}\n\n"
        f"Waiting For ({len(waiting)}):\n{_commitment_block(waiting, True)}"
    )
    return Prompt(PREP_BRIEFING_SYSTEM, user)


def build_person_prep_prompt(
    person: Person,
    recent_entries: Sequence[Entry],
    open_commitments: Sequence[Commitment],
    reflections: Sequence[Reflection] = (),
) -> Prompt:
    i_owe, waiting = _split_commitments(open_commitments)
    relationship = person.relationship_type.display_name if person.relationship_type else UNKNOWN
    user = (
        f"Person: {person.name}\n"
        f"Role: {_or_placeholder(person.role, UNKNOWN)}\n"
        f"Organization: {_or_placeholder(person.organization, UNKNOWN)}\n"
        f"Relationship: {relationship}\n"
        f"Notes: {_or_placeholder(person.notes)}\n\n"
        f"Recent Interactions:\n{_entry_lines(recent_entries)}\n\n"
        f"What I Owe Them ({len(i_owe)}):\n{_commitment_block(i_owe, False)}\n\n"
        f"What They Owe Me ({len(waiting)}):\n{_commitment_block(waiting, False)}\n\n"
        f"Past Reflections:\n{_reflection_excerpts(reflections)}"
    )
    return Prompt(PERSON_PREP_SYSTEM, user)


def build_reflection_questions_prompt(
    period_type: ReflectionPeriodType | None,
    stats: ReflectionStats,
) -> Prompt:
    period = period_type.display_name if period_type else "General"
    user = f"Reflection Period: {period}\n\nStatistics:\n{_stats_block(stats)}"
    return Prompt(REFLECTION_QUESTIONS_SYSTEM, user)


def build_contextual_reflection_prompt(
    reflection_type: ReflectionType,
    stats: ReflectionStats,
    selected_entries: Sequence[Entry] = (),
    open_commitments: Sequence[Commitment] = (),
    period_type: ReflectionPeriodType | None = None,
    project: Project | None = None,
    person: Person | None = None,
) -> Prompt:
    """Prompt for questions tied to chosen events.

    Event ids appear only on their own "id:" line so the model can return
    them in ``linkedEntryId`` without quoting them in the question.
    """
    lines = [f"Reflection Type: {reflection_type.display_name}"]
    if reflection_type is ReflectionType.PERIODIC:
        lines.append(f"Period: {period_type.display_name if period_type else 'General'}")
    if project is not None:
        lines.append(f"Project: {project.name} (priority {project.priority}/5)")
    if person is not None:
        role = f", {person.role}" if person.role else ""
        lines.append(f"Person: {person.name}{role}")

    events = list(selected_entries)[:MAX_SELECTED_EVENTS]
    lines.append("")
    lines.append("Selected Events:")
    if not events:
        lines.append("- None")
    for entry in events:
        lines.append(
            f"- [{entry.kind.display_name}] {entry.title} ({_format_date(entry.occurred_at)})"
        )
        lines.append(f"  id: {entry.id}")
        if entry.display_content:
            lines.append(f"  {_excerpt(entry.display_content, REFLECTION_EXCERPT_CHARS)}")

    i_owe, waiting = _split_commitments(open_commitments)
    lines.append("")
    lines.append(f"Open Commitments I Owe ({len(i_owe)}):")
    lines.append(_commitment_block(i_owe, False))
    lines.append(f"Waiting For ({len(waiting)}):")
    lines.append(_commitment_block(waiting, True))
    lines.append("")
    lines.append("Statistics:")
    lines.append(_stats_block(stats))

    return Prompt(CONTEXTUAL_REFLECTION_SYSTEM, "\n".join(lines))


def build_quick_question_prompt(entry: Entry) -> Prompt:
    user = (
        f"Event: {entry.title}\n"
        f"Type: {entry.kind.display_name}\n"
        f"Date: {_format_date(entry.occurred_at)}\n"
        f"Details: {_or_placeholder(_excerpt(entry.display_content, REFLECTION_EXCERPT_CHARS))}"
    )
    return Prompt(QUICK_QUESTION_SYSTEM, user)


def build_decision_patterns_prompt(decisions: Sequence[Entry], now: datetime) -> Prompt:
    recent = sorted(decisions, key=lambda e: e.occurred_at, reverse=True)[:MAX_DECISIONS]
    lines = [f"Decisions ({len(recent)} of {len(decisions)}):"]
    for d in recent:
        confidence = f"{d.decision_confidence}/5" if d.decision_confidence else UNKNOWN
        stakes = d.decision_stakes.display_name if d.decision_stakes else UNKNOWN
        outcome = d.decision_outcome.display_name if d.decision_outcome else "Pending"
        review = _format_date(d.decision_review_date)
        if d.needs_decision_review(now):
            review += " (overdue)"
        lines.append(
            f"- {d.title} ({_format_date(d.occurred_at)}): confidence {confidence}, "
            f"stakes {stakes}, outcome {outcome}, review {review}"
        )
        if d.decision_learning:
            lines.append(f"  Learning: {_excerpt(d.decision_learning, REFLECTION_EXCERPT_CHARS)}")
    return Prompt(DECISION_PATTERNS_SYSTEM, "\n".join(lines))


def build_theme_extraction_prompt(questions_answers: Sequence[ReflectionQA]) -> Prompt:
    answered = [qa for qa in questions_answers if qa.answer.strip()][:MAX_THEME_ANSWERS]
    blocks = [f"Q: {qa.question}\nA: {qa.answer.strip()}" for qa in answered]
    return Prompt(THEME_EXTRACTION_SYSTEM, "\n\n".join(blocks))
