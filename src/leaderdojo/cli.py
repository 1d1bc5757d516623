"""Command-line interface.

Runs the heuristics and AI operations against a web export, so the core can
be used without the app.
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import TypeVar

from .ai import (
    AIService,
    AIServiceError,
    CompletionClient,
    EnvCredentialProvider,
    NotConfiguredError,
)
from .config import Settings, load_config
from .heuristics import HealthStatus, period_bounds, person_metrics, reflection_stats
from .importer import ExportFormatError, JournalSnapshot, load_export
from .logging import get_logger
from .models import (
    CommitmentStatus,
    EntryKind,
    ReflectionPeriodType,
    ReflectionQA,
    ReflectionType,
)

T = TypeVar("T")

CONFIG_HINT = "Set GROQ_API_KEY in your environment or in a .env file."


def _create_service(settings: Settings) -> AIService:
    """Build the AI service from environment credentials."""
    client = CompletionClient(EnvCredentialProvider(), settings.ai)
    return AIService(client, settings.ai, settings.heuristics, event_log=get_logger())


def _run_ai(settings: Settings, operation: Callable[[AIService], Awaitable[T]]) -> T:
    async def runner() -> T:
        service = _create_service(settings)
        try:
            return await operation(service)
        finally:
            await service.client.close()

    return asyncio.run(runner())


def _format_health(status: HealthStatus) -> str:
    """Format health status for display."""
    colors = {
        HealthStatus.HEALTHY: "\033[32m",
        HealthStatus.NEEDS_ATTENTION: "\033[33m",
        HealthStatus.AT_RISK: "\033[31m",
    }
    return f"{colors[status]}{status.display_name}\033[0m"


def _load(path: str) -> JournalSnapshot:
    return load_export(Path(path))


def cmd_health(args: argparse.Namespace) -> int:
    """Show relationship health for everyone in an export."""
    settings = load_config()
    snapshot = _load(args.export)

    if not snapshot.people:
        print("No people found.")
        return 0

    now = datetime.now()
    rows = [
        (
            person,
            person_metrics(
                person,
                snapshot.entries,
                snapshot.commitments,
                snapshot.reflections,
                now=now,
                policy=settings.heuristics,
            ),
        )
        for person in snapshot.people
    ]
    rows.sort(key=lambda row: row[1].health_score)

    print(f"\n{'Name':<24} {'Score':>5}  {'Health':<24} {'Last seen':<10} {'Owe':>4} {'Wait':>4}")
    print("-" * 80)
    for person, metrics in rows:
        name = person.name if len(person.name) <= 24 else person.name[:21] + "..."
        print(
            f"{name:<24} {metrics.health_score:>5}  {_format_health(metrics.health_status):<33} "
            f"{metrics.staleness.value:<10} {metrics.i_owe:>4} {metrics.waiting_for:>4}"
        )
        if metrics.needs_reflection:
            print(f"{'':<24}        needs reflection")

    print(f"\nTotal: {len(rows)} person(s)")
    return 0


def cmd_summarize(args: argparse.Namespace) -> int:
    """Summarize entry text read from a file or stdin."""
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    if not text.strip():
        print("Error: Nothing to summarize.")
        return 1

    settings = load_config()
    kind = EntryKind.parse(args.kind)
    result = _run_ai(
        settings, lambda service: service.summarize_entry(text, args.project or "", kind)
    )

    print(f"\n{result.summary}")
    if result.assumptions:
        print(f"\nAssumptions: {result.assumptions}")
    if result.suggested_review_days:
        print(f"Review in: {result.suggested_review_days} days")
    if result.suggested_actions:
        print("\nSuggested commitments:")
        for action in result.suggested_actions:
            counterparty = f" ({action.counterparty})" if action.counterparty else ""
            print(f"  [{action.direction.display_name}] {action.title}{counterparty}")
    return 0


def cmd_prep(args: argparse.Namespace) -> int:
    """Generate a prep briefing for a project or a person."""
    settings = load_config()
    snapshot = _load(args.export)
    live_entries = [e for e in snapshot.entries if not e.is_deleted]

    project = snapshot.find_project(args.name)
    if project is not None:
        entries = [e for e in live_entries if e.project_id == project.id]
        commitments = [
            c
            for c in snapshot.commitments
            if c.project_id == project.id and c.status is CommitmentStatus.OPEN
        ]
        result = _run_ai(
            settings,
            lambda service: service.generate_prep_briefing(project, entries, commitments),
        )
    else:
        person = snapshot.find_person(args.name)
        if person is None:
            print(f"Error: No project or person named '{args.name}'.")
            return 1
        entries = [e for e in live_entries if person.id in e.participant_ids]
        commitments = [
            c
            for c in snapshot.commitments
            if c.person_id == person.id and c.status is CommitmentStatus.OPEN
        ]
        reflections = [r for r in snapshot.reflections if r.person_id == person.id]
        result = _run_ai(
            settings,
            lambda service: service.generate_person_prep_briefing(
                person, entries, commitments, reflections
            ),
        )

    print(f"\n{result.briefing}")
    if result.talking_points:
        print("\nTalking points:")
        for point in result.talking_points:
            print(f"  - {point}")
    return 0


def cmd_reflect(args: argparse.Namespace) -> int:
    """Draft reflection questions for a period, falling back to defaults."""
    settings = load_config()
    snapshot = _load(args.export)
    period = ReflectionPeriodType.parse(args.period)
    start, end = period_bounds(period, datetime.now())

    stats = reflection_stats(
        snapshot.entries, snapshot.commitments, snapshot.projects, start, end
    )
    selected = sorted(
        (e for e in snapshot.entries if not e.is_deleted and start <= e.occurred_at <= end),
        key=lambda e: e.occurred_at,
        reverse=True,
    )
    open_commitments = [c for c in snapshot.commitments if c.status is CommitmentStatus.OPEN]
    titles = {e.id: e.title for e in selected}

    result, used_fallback = _run_ai(
        settings,
        lambda service: service.reflection_questions_or_fallback(
            ReflectionType.PERIODIC,
            stats,
            selected_entries=selected,
            open_commitments=open_commitments,
            period_type=period,
        ),
    )

    print(f"\n{period.display_name} reflection ({stats.entries_created} entries)")
    if used_fallback:
        print("(AI unavailable, showing default questions)")
    print("-" * 40)
    for number, question in enumerate(result.questions, 1):
        print(f"{number}. {question.text}")
        if question.linked_entry_id in titles:
            print(f"   about: {titles[question.linked_entry_id]}")
    if result.suggestions:
        print("\nSuggestions:")
        for suggestion in result.suggestions:
            print(f"  - {suggestion}")
    return 0


def cmd_themes(args: argparse.Namespace) -> int:
    """Extract theme tags from a JSON list of question/answer pairs."""
    try:
        items = json.loads(Path(args.file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.file}: {e}")
        return 1
    if not isinstance(items, list):
        print("Error: Expected a JSON array of {question, answer} objects.")
        return 1

    qas = [
        ReflectionQA(question=str(item.get("question", "")), answer=str(item.get("answer", "")))
        for item in items
        if isinstance(item, dict)
    ]

    settings = load_config()
    themes = _run_ai(settings, lambda service: service.extract_reflection_themes(qas))
    if not themes:
        print("No themes found.")
        return 0
    print(", ".join(themes))
    return 0


def cmd_transcribe(args: argparse.Namespace) -> int:
    """Transcribe a recorded voice note."""
    audio = Path(args.audio).read_bytes()
    if not audio:
        print("Error: Audio file is empty.")
        return 1

    settings = load_config()
    text = _run_ai(settings, lambda service: service.transcribe_audio(audio))
    print(text)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="leaderdojo",
        description="Leadership journal tools",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")

    subparsers = parser.add_subparsers(dest="command", help="Sub-command help")

    health_parser = subparsers.add_parser("health", help="Relationship health per person")
    health_parser.add_argument("export", help="Path to a web app JSON export")

    summarize_parser = subparsers.add_parser("summarize", help="Summarize an entry")
    summarize_parser.add_argument("file", nargs="?", help="Text file (reads stdin if omitted)")
    summarize_parser.add_argument("-p", "--project", help="Project name for context")
    summarize_parser.add_argument(
        "-k", "--kind",
        default=EntryKind.NOTE.value,
        choices=[kind.value for kind in EntryKind],
        help="Entry kind",
    )

    prep_parser = subparsers.add_parser("prep", help="Prep briefing for a project or person")
    prep_parser.add_argument("export", help="Path to a web app JSON export")
    prep_parser.add_argument("name", help="Project or person name (or id)")

    reflect_parser = subparsers.add_parser("reflect", help="Draft reflection questions")
    reflect_parser.add_argument("export", help="Path to a web app JSON export")
    reflect_parser.add_argument(
        "--period",
        default=ReflectionPeriodType.WEEK.value,
        choices=[period.value for period in ReflectionPeriodType],
        help="Reflection period",
    )

    themes_parser = subparsers.add_parser("themes", help="Extract themes from a reflection")
    themes_parser.add_argument("file", help="JSON array of {question, answer} objects")

    transcribe_parser = subparsers.add_parser("transcribe", help="Transcribe a voice note")
    transcribe_parser.add_argument("audio", help="Path to an m4a recording")

    return parser


def run_cli(argv: list[str] | None = None) -> int:
    """Run the CLI with given arguments.

    Args:
        argv: Command-line arguments. Uses sys.argv[1:] if None.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "health": cmd_health,
        "summarize": cmd_summarize,
        "prep": cmd_prep,
        "reflect": cmd_reflect,
        "themes": cmd_themes,
        "transcribe": cmd_transcribe,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except NotConfiguredError as e:
        print(f"Error: {e}")
        print(CONFIG_HINT)
        return 1
    except AIServiceError as e:
        print(f"Error: {e}")
        if e.is_retryable:
            print("Try again in a moment.")
        return 1
    except ExportFormatError as e:
        print(f"Error: {e}")
        return 1
    except OSError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(run_cli())
