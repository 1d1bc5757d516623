"""Tolerant parsing of model responses into result types.

No function here raises for any input string. When no JSON payload can be
recovered, each parser takes an explicit degraded path instead; when a payload
is found, every field is read with a type check and a default.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Collection
from typing import Any

from ..models import (
    CommitmentDirection,
    ContextualReflectionResult,
    DecisionPatternAnalysis,
    EntrySummaryResult,
    PrepBriefingResult,
    ReflectionPromptsResult,
    ReflectionQuestion,
    SuggestedAction,
)

logger = logging.getLogger(__name__)

MAX_THEMES = 5

_NO_PAYLOAD = object()

_LIST_MARKER = re.compile(r"^(?:\d+[.)]|[-*\u2022])\s*")


def extract_json(text: str) -> str:
    """Return the span from the first '{' to the last '}', else '[' to ']'.

    Falls back to the text itself when neither pair is present.
    """
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    start, end = text.find("["), text.rfind("]")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def _candidates(text: str) -> list[str]:
    spans = [extract_json(text)]
    start, end = text.find("["), text.rfind("]")
    if start != -1 and end > start:
        spans.append(text[start : end + 1])
    spans.append(text.strip())
    return spans


def _load(text: str) -> Any:
    """First JSON value that decodes from the candidate spans, or _NO_PAYLOAD."""
    if not isinstance(text, str):
        return _NO_PAYLOAD
    for candidate in _candidates(text):
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError):
            continue
    return _NO_PAYLOAD


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value == value and abs(value) < 1e9:
        number = round(value)
    elif isinstance(value, str):
        try:
            number = round(float(value.strip()))
        except (ValueError, OverflowError):
            return None
    else:
        return None
    return number if number > 0 else None


def _string_list(value: Any, *keys: str) -> list[str]:
    """Strings from a list; dict items contribute the first matching key."""
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, dict):
            item = next((item[k] for k in keys if isinstance(item.get(k), str)), None)
        text = _text(item)
        if text:
            items.append(text)
    return items


def _fallback_lines(text: str) -> list[str]:
    """Non-empty lines with list markers removed, skipping JSON-looking ones."""
    items = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line[0] in "{[":
            continue
        line = _LIST_MARKER.sub("", line, count=1).strip()
        if line:
            items.append(line)
    return items


def _parse_actions(value: Any) -> list[SuggestedAction]:
    if not isinstance(value, list):
        return []
    actions = []
    for item in value:
        if not isinstance(item, dict):
            continue
        title = _text(item.get("title"))
        if not title:
            continue
        actions.append(
            SuggestedAction(
                direction=CommitmentDirection.parse(item.get("direction")),
                title=title,
                counterparty=_text(item.get("counterparty")),
            )
        )
    return actions


def parse_entry_summary(text: str) -> EntrySummaryResult:
    """Summary plus suggested commitments.

    Without a JSON object the whole response becomes the summary.
    """
    data = _load(text)
    if not isinstance(data, dict):
        logger.warning("Entry summary response had no JSON object, using raw text")
        summary = text if isinstance(text, str) else ""
        return EntrySummaryResult(summary=summary, suggested_actions=[])

    commitments = data.get("commitments")
    if commitments is None:
        commitments = data.get("suggestedActions")

    return EntrySummaryResult(
        summary=_text(data.get("summary")) or text,
        suggested_actions=_parse_actions(commitments),
        assumptions=_text(data.get("assumptions")),
        suggested_review_days=_positive_int(data.get("suggestedReviewDays")),
    )


def parse_questions(text: str) -> list[str]:
    """A plain question list.

    Accepts a JSON array, or an object with a "questions" array. Anything else
    falls back to lines: every non-empty line not starting with '{' or '[' is a
    question, with any leading list marker removed.
    """
    data = _load(text)
    if not isinstance(data, (dict, list)):
        logger.warning("Questions response had no JSON object or array, splitting lines")
        return _fallback_lines(text) if isinstance(text, str) else []
    if isinstance(data, dict):
        data = data.get("questions")
    return _string_list(data, "question", "text")


def parse_reflection_prompts(text: str) -> ReflectionPromptsResult:
    data = _load(text)
    if isinstance(data, dict):
        return ReflectionPromptsResult(
            questions=_string_list(data.get("questions"), "question", "text"),
            suggestions=_string_list(data.get("suggestions")),
        )
    return ReflectionPromptsResult(questions=parse_questions(text), suggestions=[])


def _parse_question_item(
    item: Any, known_entry_ids: Collection[str] | None
) -> ReflectionQuestion | None:
    if isinstance(item, str):
        return ReflectionQuestion(text=item.strip()) if item.strip() else None
    if not isinstance(item, dict):
        return None
    question = _text(item.get("question")) or _text(item.get("text"))
    if not question:
        return None
    linked = _text(item.get("linkedEntryId")) or _text(item.get("linked_entry_id"))
    if linked and known_entry_ids is not None and linked not in known_entry_ids:
        linked = None
    return ReflectionQuestion(text=question, linked_entry_id=linked)


def parse_contextual_reflection(
    text: str,
    known_entry_ids: Collection[str] | None = None,
) -> ContextualReflectionResult:
    """Questions with optional entry linkage, plus suggestions.

    Args:
        text: Raw model response.
        known_entry_ids: Ids that were offered to the model. Links to
            anything else are dropped. None accepts every id.
    """
    data = _load(text)
    suggestions: list[str] = []
    if isinstance(data, dict):
        items = data.get("questions")
        suggestions = _string_list(data.get("suggestions"))
    elif isinstance(data, list):
        items = data
    elif isinstance(text, str):
        logger.warning("Contextual reflection response had no JSON list, splitting lines")
        items = _fallback_lines(text)
    else:
        items = []

    if not isinstance(items, list):
        items = []

    questions = []
    for item in items:
        question = _parse_question_item(item, known_entry_ids)
        if question is not None:
            questions.append(question)
    return ContextualReflectionResult(questions=questions, suggestions=suggestions)


def parse_prep_briefing(text: str) -> PrepBriefingResult:
    """Briefing text and talking points; plain prose is the briefing itself."""
    data = _load(text)
    if isinstance(data, dict):
        briefing = _text(data.get("briefing"))
        if briefing:
            return PrepBriefingResult(
                briefing=briefing,
                talking_points=_string_list(data.get("talkingPoints")),
            )
    return PrepBriefingResult(briefing=text.strip() if isinstance(text, str) else "")


def parse_decision_patterns(text: str) -> DecisionPatternAnalysis:
    data = _load(text)
    if not isinstance(data, dict):
        logger.warning("Decision pattern response had no JSON object")
        return DecisionPatternAnalysis()
    return DecisionPatternAnalysis(
        calibration_insight=_text(data.get("calibrationInsight")),
        stakes_pattern_insight=_text(data.get("stakesPatternInsight")),
        timing_insight=_text(data.get("timingInsight")),
        recommendation=_text(data.get("recommendation")),
    )


def parse_themes(text: str) -> list[str]:
    """Lower-cased, trimmed, de-duplicated theme tags, at most MAX_THEMES."""
    data = _load(text)
    if isinstance(data, dict):
        data = data.get("themes")
    themes: list[str] = []
    for theme in _string_list(data):
        normalized = theme.lower()
        if normalized not in themes:
            themes.append(normalized)
        if len(themes) == MAX_THEMES:
            break
    return themes


def parse_single_question(text: str) -> str | None:
    """One question from a short response, or None when nothing usable came back."""
    if not isinstance(text, str):
        return None
    data = _load(text)
    if isinstance(data, dict):
        candidate = _text(data.get("question"))
        if candidate:
            return candidate
    elif isinstance(data, str) and data.strip():
        return data.strip()

    for line in _fallback_lines(text):
        if line.lower().startswith("question:"):
            line = line[len("question:") :]
        line = line.strip().strip('"').strip()
        if line:
            return line
    return None
