"""Fixed question sets used when AI generation is unavailable.

Reflection must never be blocked by AI: every generator has a default here.
"""

from ..models import EntryKind, ReflectionPeriodType, ReflectionType

_PERIODIC_QUESTIONS: dict[ReflectionPeriodType | None, list[str]] = {
    ReflectionPeriodType.WEEK: [
        "What was your biggest win this week?",
        "What commitment did you struggle to keep? Why?",
        "Which conversation or decision would you handle differently?",
        "What pattern do you notice in how you spent your time?",
        "What's one thing you want to do better next week?",
    ],
    ReflectionPeriodType.MONTH: [
        "What progress did you make on your most important projects?",
        "Which relationships received the most attention? Which were neglected?",
        "What decisions are you most and least confident about?",
        "What feedback have you received and how have you acted on it?",
        "What's the most important lesson you learned this month?",
    ],
    ReflectionPeriodType.QUARTER: [
        "Looking at your projects, what themes emerge in where you invested time?",
        "How has your leadership style evolved this quarter?",
        "What commitments did you consistently keep or break?",
        "What were the three most impactful decisions you made?",
        "What do you want to be different about next quarter?",
    ],
    None: [
        "What's on your mind right now?",
        "What would you do differently if you could?",
    ],
}

_PROJECT_QUESTIONS = [
    "How am I showing up for this project?",
    "What's blocking progress that I haven't addressed?",
    "What conversation am I avoiding?",
    "What would success look like in the next 2 weeks?",
]

_RELATIONSHIP_QUESTIONS = [
    "How would this person rate my reliability?",
    "What have I promised that I haven't delivered?",
    "What's one thing I could do to strengthen this relationship?",
    "What difficult conversation am I avoiding with this person?",
]

_QUICK_QUESTIONS = {
    EntryKind.MEETING: "How confident are you in the outcomes from this meeting?",
    EntryKind.DECISION: "Looking back, how do you feel about this decision?",
    EntryKind.UPDATE: "What's the most important takeaway from this update?",
    EntryKind.NOTE: "What made this worth noting?",
    EntryKind.PREP: "How prepared do you feel after this?",
    EntryKind.REFLECTION: "What insight stands out to you?",
}

GENERIC_QUICK_QUESTION = "How confident are you in how this went?"


def default_questions(
    reflection_type: ReflectionType,
    period_type: ReflectionPeriodType | None = None,
) -> list[str]:
    """Default question set for a reflection type. Returns a fresh list."""
    if reflection_type is ReflectionType.QUICK:
        return [GENERIC_QUICK_QUESTION]
    if reflection_type is ReflectionType.PROJECT:
        return list(_PROJECT_QUESTIONS)
    if reflection_type is ReflectionType.RELATIONSHIP:
        return list(_RELATIONSHIP_QUESTIONS)
    return list(_PERIODIC_QUESTIONS.get(period_type, _PERIODIC_QUESTIONS[None]))


def default_quick_question(kind: EntryKind) -> str:
    return _QUICK_QUESTIONS.get(kind, GENERIC_QUICK_QUESTION)
