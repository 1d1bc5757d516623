"""Completion and transcription client.

Wraps AsyncGroq so the rest of the package sees plain strings and the typed
errors from ``errors``. Each call is exactly one request: SDK retries are
disabled and retry decisions are left to the caller.
"""

import logging
from collections.abc import Callable
from typing import Any

import groq
from groq import AsyncGroq

from ..config import AIConfig
from .credentials import CredentialProvider
from .errors import (
    AIConnectionError,
    APIMessageError,
    HTTPStatusError,
    InvalidResponseError,
    NotConfiguredError,
)

logger = logging.getLogger(__name__)

AUDIO_FILENAME = "recording.m4a"
AUDIO_CONTENT_TYPE = "audio/m4a"


def _default_factory(config: AIConfig) -> Callable[[str], AsyncGroq]:
    def factory(api_key: str) -> AsyncGroq:
        return AsyncGroq(api_key=api_key, max_retries=0, timeout=config.timeout)

    return factory


def _server_message(body: object) -> str | None:
    """Pull the server-provided message out of an error body, if structured.

    Accepts both the full ``{"error": {"message": ...}}`` envelope and the
    inner error object the SDK sometimes passes along.
    """
    if not isinstance(body, dict):
        return None
    error = body.get("error", body)
    if isinstance(error, dict):
        message = error.get("message")
    else:
        message = error
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


def _map_status_error(exc: groq.APIStatusError) -> Exception:
    message = _server_message(exc.body)
    if message is not None:
        return APIMessageError(message, exc.status_code)
    return HTTPStatusError(exc.status_code)


class CompletionClient:
    """Issues chat-completion and transcription requests.

    Example:
        from leaderdojo.ai import CompletionClient, EnvCredentialProvider

        client = CompletionClient(EnvCredentialProvider())
        text = await client.complete("You are terse.", "Say hi")
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        config: AIConfig | None = None,
        client_factory: Callable[[str], AsyncGroq] | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Source of the API key, read on every call.
            config: Model and sampling settings.
            client_factory: Builds an AsyncGroq for a given key. Tests pass
                a factory returning a mock.
        """
        self.credentials = credentials
        self.config = config or AIConfig()
        self._factory = client_factory or _default_factory(self.config)
        self._client: AsyncGroq | None = None
        self._client_key: str | None = None

    @property
    def model(self) -> str:
        return self.config.model

    def is_configured(self) -> bool:
        return self.credentials.get_api_key() is not None

    def _get_client(self) -> AsyncGroq:
        api_key = self.credentials.get_api_key()
        if not api_key:
            raise NotConfiguredError()
        if self._client is None or self._client_key != api_key:
            self._client = self._factory(api_key)
            self._client_key = api_key
        return self._client

    async def complete(self, system: str, user: str) -> str:
        """Send one chat completion and return the trimmed text.

        Raises:
            NotConfiguredError: No API key.
            APIMessageError: Non-2xx with a server message.
            HTTPStatusError: Non-2xx without a structured body.
            InvalidResponseError: No text content in the envelope.
            AIConnectionError: The request never got a response.
        """
        client = self._get_client()
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]

        try:
            response = await client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except groq.APIStatusError as e:
            raise _map_status_error(e) from e
        except groq.APIConnectionError as e:
            raise AIConnectionError(str(e)) from e
        except groq.APIResponseValidationError as e:
            raise InvalidResponseError(str(e)) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise InvalidResponseError("missing choices[0].message.content") from e

        if not isinstance(content, str):
            raise InvalidResponseError("message content is not text")

        return content.strip()

    async def transcribe(self, audio: bytes, prompt: str | None = None) -> str:
        """Send recorded audio for transcription and return the trimmed text.

        Args:
            audio: m4a audio bytes.
            prompt: Formatting instruction; defaults to the configured one.

        Raises:
            Same errors as ``complete``.
        """
        client = self._get_client()

        try:
            response = await client.audio.transcriptions.create(
                file=(AUDIO_FILENAME, audio, AUDIO_CONTENT_TYPE),
                model=self.config.transcription_model,
                prompt=prompt if prompt is not None else self.config.transcription_prompt,
            )
        except groq.APIStatusError as e:
            raise _map_status_error(e) from e
        except groq.APIConnectionError as e:
            raise AIConnectionError(str(e)) from e
        except groq.APIResponseValidationError as e:
            raise InvalidResponseError(str(e)) from e

        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise InvalidResponseError("missing text")

        logger.debug("Transcribed %d bytes into %d chars", len(audio), len(text))
        return text.strip()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._client_key = None
