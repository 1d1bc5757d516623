"""Named AI operations.

Each operation builds a prompt, runs the completion through the timeout race
and parses the response. The service keeps no state between calls beyond its
collaborators, so one instance is created at startup and shared.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import TypeVar

from ..config import AIConfig, HeuristicsPolicy
from ..logging import JSONLLogger
from ..models import (
    Commitment,
    ContextualReflectionResult,
    DecisionPatternAnalysis,
    Entry,
    EntryKind,
    EntrySummaryResult,
    Person,
    PrepBriefingResult,
    Project,
    Reflection,
    ReflectionPeriodType,
    ReflectionPromptsResult,
    ReflectionQA,
    ReflectionQuestion,
    ReflectionStats,
    ReflectionType,
)
from . import parser, prompts
from .client import CompletionClient
from .errors import AIServiceError, AITimeoutError, NotConfiguredError
from .fallbacks import default_questions, default_quick_question
from .prompts import Prompt
from .timeout import race_with_timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AIService:
    """Leadership-journal AI operations.

    Example:
        client = CompletionClient(EnvCredentialProvider(), config)
        service = AIService(client, config)
        result = await service.summarize_entry(text, "Apollo", EntryKind.MEETING)
    """

    def __init__(
        self,
        client: CompletionClient,
        config: AIConfig | None = None,
        policy: HeuristicsPolicy | None = None,
        event_log: JSONLLogger | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            client: Completion client doing the network calls.
            config: Timeouts; defaults to the client's config.
            policy: Thresholds such as the minimum decision count.
            event_log: Optional JSONL log receiving one line per operation.
        """
        self.client = client
        self.config = config or client.config
        self.policy = policy or HeuristicsPolicy()
        self.event_log = event_log

    def is_configured(self) -> bool:
        return self.client.is_configured()

    # Plumbing

    def _record(
        self, operation: str, outcome: str, started: float, error: str | None = None
    ) -> None:
        if self.event_log is None:
            return
        self.event_log.log_ai_request(
            operation,
            outcome,
            (time.monotonic() - started) * 1000,
            model=self.client.model,
            error=error,
        )

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[str]],
        parse: Callable[[str], T],
        timeout: float,
    ) -> T:
        started = time.monotonic()
        try:
            raw = await race_with_timeout(call(), timeout)
        except AITimeoutError as e:
            logger.warning("%s timed out after %.1fs", operation, timeout)
            self._record(operation, "timeout", started, str(e))
            raise
        except NotConfiguredError as e:
            self._record(operation, "not_configured", started, str(e))
            raise
        except AIServiceError as e:
            logger.warning("%s failed: %s", operation, e)
            self._record(operation, "error", started, str(e))
            raise
        self._record(operation, "ok", started)
        return parse(raw)

    async def _complete(
        self,
        operation: str,
        prompt: Prompt,
        parse: Callable[[str], T],
        timeout: float | None = None,
    ) -> T:
        return await self._run(
            operation,
            lambda: self.client.complete(prompt.system, prompt.user),
            parse,
            timeout or self.config.timeout,
        )

    # Operations

    async def summarize_entry(
        self,
        raw_content: str,
        project_name: str,
        kind: EntryKind,
    ) -> EntrySummaryResult:
        """Summarize an entry and suggest commitments.

        Decision entries also get assumptions and a suggested review delay.
        """
        prompt = prompts.build_entry_summary_prompt(raw_content, project_name, kind)
        return await self._complete("summarize_entry", prompt, parser.parse_entry_summary)

    async def generate_prep_briefing(
        self,
        project: Project,
        recent_entries: Sequence[Entry],
        open_commitments: Sequence[Commitment],
    ) -> PrepBriefingResult:
        prompt = prompts.build_prep_briefing_prompt(project, recent_entries, open_commitments)
        return await self._complete("prep_briefing", prompt, parser.parse_prep_briefing)

    async def generate_person_prep_briefing(
        self,
        person: Person,
        recent_entries: Sequence[Entry],
        open_commitments: Sequence[Commitment],
        reflections: Sequence[Reflection] = (),
    ) -> PrepBriefingResult:
        prompt = prompts.build_person_prep_prompt(
            person, recent_entries, open_commitments, reflections
        )
        return await self._complete("person_prep_briefing", prompt, parser.parse_prep_briefing)

    async def generate_reflection_questions(
        self,
        period_type: ReflectionPeriodType | None,
        stats: ReflectionStats,
    ) -> ReflectionPromptsResult:
        prompt = prompts.build_reflection_questions_prompt(period_type, stats)
        return await self._complete(
            "reflection_questions", prompt, parser.parse_reflection_prompts
        )

    async def generate_contextual_reflection_questions(
        self,
        reflection_type: ReflectionType,
        stats: ReflectionStats,
        selected_entries: Sequence[Entry] = (),
        open_commitments: Sequence[Commitment] = (),
        period_type: ReflectionPeriodType | None = None,
        project: Project | None = None,
        person: Person | None = None,
    ) -> ContextualReflectionResult:
        prompt = prompts.build_contextual_reflection_prompt(
            reflection_type,
            stats,
            selected_entries=selected_entries,
            open_commitments=open_commitments,
            period_type=period_type,
            project=project,
            person=person,
        )
        known_ids = {e.id for e in list(selected_entries)[: prompts.MAX_SELECTED_EVENTS]}
        return await self._complete(
            "contextual_reflection",
            prompt,
            lambda raw: parser.parse_contextual_reflection(raw, known_ids),
        )

    async def reflection_questions_or_fallback(
        self,
        reflection_type: ReflectionType,
        stats: ReflectionStats,
        selected_entries: Sequence[Entry] = (),
        open_commitments: Sequence[Commitment] = (),
        period_type: ReflectionPeriodType | None = None,
        project: Project | None = None,
        person: Person | None = None,
    ) -> tuple[ContextualReflectionResult, bool]:
        """Contextual questions, or the default set when AI cannot deliver.

        Returns:
            (result, used_fallback). Falls back on any AI failure and on an
            empty question list.
        """
        try:
            result = await self.generate_contextual_reflection_questions(
                reflection_type,
                stats,
                selected_entries=selected_entries,
                open_commitments=open_commitments,
                period_type=period_type,
                project=project,
                person=person,
            )
        except AIServiceError as e:
            logger.info("Using default reflection questions: %s", e)
            result = None

        if result is None or not result.questions:
            fallback = ContextualReflectionResult(
                questions=[
                    ReflectionQuestion(q) for q in default_questions(reflection_type, period_type)
                ]
            )
            return fallback, True
        return result, False

    async def generate_quick_reflection_question(self, entry: Entry) -> str:
        """One question about an entry, with the per-kind default when parsing finds none."""
        prompt = prompts.build_quick_question_prompt(entry)
        question = await self._complete(
            "quick_question",
            prompt,
            parser.parse_single_question,
            timeout=self.config.quick_timeout,
        )
        return question or default_quick_question(entry.kind)

    async def analyze_decision_patterns(
        self,
        decisions: Sequence[Entry],
        now: datetime | None = None,
    ) -> DecisionPatternAnalysis:
        """Pattern insights across decisions.

        Below the policy's minimum decision count the result is empty and no
        request is made.
        """
        decisions = [d for d in decisions if d.is_decision_entry and not d.is_deleted]
        if len(decisions) < self.policy.min_decisions_for_patterns:
            logger.debug(
                "Skipping decision analysis: %d < %d decisions",
                len(decisions),
                self.policy.min_decisions_for_patterns,
            )
            self._record("decision_patterns", "skipped", time.monotonic())
            return DecisionPatternAnalysis()
        prompt = prompts.build_decision_patterns_prompt(decisions, now or datetime.now())
        return await self._complete("decision_patterns", prompt, parser.parse_decision_patterns)

    async def extract_reflection_themes(
        self, questions_answers: Sequence[ReflectionQA]
    ) -> list[str]:
        """Theme tags for a finished reflection.

        Tagging is optional: blank answers skip the request and a missing
        API key yields no tags. Other failures propagate.
        """
        if not any(qa.answer.strip() for qa in questions_answers):
            self._record("extract_themes", "skipped", time.monotonic())
            return []
        prompt = prompts.build_theme_extraction_prompt(questions_answers)
        try:
            return await self._complete(
                "extract_themes",
                prompt,
                parser.parse_themes,
                timeout=self.config.quick_timeout,
            )
        except NotConfiguredError:
            logger.debug("Theme extraction skipped: API key not configured")
            return []

    async def transcribe_audio(self, audio: bytes, prompt: str | None = None) -> str:
        return await self._run(
            "transcribe_audio",
            lambda: self.client.transcribe(audio, prompt),
            lambda text: text,
            self.config.timeout,
        )
