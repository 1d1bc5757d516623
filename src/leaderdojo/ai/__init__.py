"""AI orchestration: prompts, client, timeout race, tolerant parsing."""

from .client import CompletionClient
from .credentials import CredentialProvider, EnvCredentialProvider, StaticCredentialProvider
from .errors import (
    AIConnectionError,
    AIServiceError,
    AITimeoutError,
    APIMessageError,
    HTTPStatusError,
    InvalidResponseError,
    NotConfiguredError,
)
from .fallbacks import default_questions, default_quick_question
from .service import AIService
from .timeout import race_with_timeout

__all__ = [
    "AIConnectionError",
    "AIService",
    "AIServiceError",
    "AITimeoutError",
    "APIMessageError",
    "CompletionClient",
    "CredentialProvider",
    "EnvCredentialProvider",
    "HTTPStatusError",
    "InvalidResponseError",
    "NotConfiguredError",
    "StaticCredentialProvider",
    "default_questions",
    "default_quick_question",
    "race_with_timeout",
]
