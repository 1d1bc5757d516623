"""Configuration loader.

Loads AI and heuristics settings from ~/.leaderdojo/config.json, applies
environment overrides, and provides a writer for the same file.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".leaderdojo" / "config.json"

DEFAULT_MODEL = "llama-3.1-70b-versatile"
DEFAULT_TRANSCRIPTION_MODEL = "whisper-large-v3"
DEFAULT_TRANSCRIPTION_PROMPT = (
    "Transcribe this voice note from a leader's journal. "
    "Use proper punctuation and paragraph breaks."
)


@dataclass
class AIConfig:
    """Settings for the completion and transcription calls.

    Attributes:
        model: Chat completion model.
        transcription_model: Speech-to-text model.
        transcription_prompt: Formatting instruction sent with audio.
        temperature: Sampling temperature for completions.
        max_tokens: Completion length cap.
        timeout: Deadline in seconds for full generation calls.
        quick_timeout: Deadline in seconds for single-question and theme calls.
    """

    model: str = DEFAULT_MODEL
    transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL
    transcription_prompt: str = DEFAULT_TRANSCRIPTION_PROMPT
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout: float = 20.0
    quick_timeout: float = 5.0

    def __post_init__(self) -> None:
        if self.timeout <= 0 or self.quick_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be at least 1")
        if not 0 <= self.temperature <= 2:
            raise ValueError("temperature must be between 0 and 2")


@dataclass
class HeuristicsPolicy:
    """Thresholds for the relationship and decision heuristics.

    These are tunable policy, not contracts. Staleness deductions apply to
    the first band the silence exceeds.
    """

    active_max_days: int = 7
    recent_max_days: int = 30
    staleness_deductions: dict[int, int] = field(
        default_factory=lambda: {30: 30, 14: 15, 7: 5}
    )
    no_interaction_deduction: int = 20
    first_overdue_deduction: int = 25
    extra_overdue_deduction: int = 5
    severe_imbalance: float = 0.6
    severe_imbalance_deduction: int = 20
    mild_imbalance: float = 0.3
    mild_imbalance_deduction: int = 10
    reflection_bonus_days: int = 30
    reflection_bonus: int = 5
    healthy_min_score: int = 80
    needs_attention_min_score: int = 50
    needs_reflection_days: int = 14
    min_decisions_for_patterns: int = 3

    def __post_init__(self) -> None:
        if self.active_max_days >= self.recent_max_days:
            raise ValueError("active_max_days must be below recent_max_days")
        if self.needs_attention_min_score >= self.healthy_min_score:
            raise ValueError("needs_attention_min_score must be below healthy_min_score")
        if self.min_decisions_for_patterns < 1:
            raise ValueError("min_decisions_for_patterns must be at least 1")
        deductions = [self.staleness_deductions[k] for k in sorted(self.staleness_deductions)]
        if any(d < 0 for d in deductions) or deductions != sorted(deductions):
            raise ValueError("staleness deductions must grow with the threshold")
        if self.first_overdue_deduction < 0 or self.extra_overdue_deduction < 0:
            raise ValueError("overdue deductions must not be negative")


@dataclass
class Settings:
    ai: AIConfig = field(default_factory=AIConfig)
    heuristics: HeuristicsPolicy = field(default_factory=HeuristicsPolicy)


def load_config(config_path: Path | None = None) -> Settings:
    """Load Settings from a JSON file, then apply environment overrides.

    The config file looks like this:
    ```json
    {
      "ai": {"model": "llama-3.1-70b-versatile", "timeout": 20},
      "heuristics": {"min_decisions_for_patterns": 3}
    }
    ```

    Missing or unreadable files fall back to defaults.

    Args:
        config_path: Path to config file. Uses DEFAULT_CONFIG_PATH if None.

    Returns:
        Settings instance with loaded values.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    data: dict[str, Any] = {}

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
    else:
        try:
            with open(path, "r") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                data = loaded
            else:
                logger.warning("Config in %s is not an object. Using defaults.", path)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        except OSError as e:
            logger.warning("Cannot read %s: %s. Using defaults.", path, e)

    ai_data = _section(data, "ai")
    ai_data.update(_env_overrides())

    return Settings(
        ai=_build(AIConfig, ai_data),
        heuristics=_build(HeuristicsPolicy, _section(data, "heuristics")),
    )


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = data.get(key, {})
    return dict(section) if isinstance(section, dict) else {}


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if model := os.getenv("LEADERDOJO_MODEL"):
        overrides["model"] = model
    if timeout := os.getenv("LEADERDOJO_TIMEOUT"):
        try:
            overrides["timeout"] = float(timeout)
        except ValueError:
            logger.warning("Ignoring non-numeric LEADERDOJO_TIMEOUT: %s", timeout)
    return overrides


def _build(cls: type, values: dict[str, Any]) -> Any:
    """Instantiate a config dataclass, dropping unknown keys and bad values."""
    known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
    unknown = set(values) - set(known)
    if unknown:
        logger.warning("Ignoring unknown %s keys: %s", cls.__name__, sorted(unknown))
    if "staleness_deductions" in known:
        try:
            known["staleness_deductions"] = {
                int(k): int(v) for k, v in known["staleness_deductions"].items()
            }
        except (AttributeError, TypeError, ValueError):
            logger.warning("Invalid staleness_deductions, using defaults")
            del known["staleness_deductions"]
    try:
        return cls(**known)
    except (TypeError, ValueError) as e:
        logger.warning("Invalid %s settings: %s. Using defaults.", cls.__name__, e)
        return cls()


def save_config(settings: Settings, config_path: Path | None = None) -> None:
    """Save Settings to a JSON file, writing only non-default values.

    Args:
        settings: The settings to save.
        config_path: Path to write to. Uses DEFAULT_CONFIG_PATH if None.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {}
    for key, current, default in (
        ("ai", settings.ai, AIConfig()),
        ("heuristics", settings.heuristics, HeuristicsPolicy()),
    ):
        changed = {
            name: getattr(current, name)
            for name in current.__dataclass_fields__
            if getattr(current, name) != getattr(default, name)
        }
        if changed:
            data[key] = changed

    try:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise
