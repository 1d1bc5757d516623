"""Typed failures surfaced by the AI layer.

Every kind is its own class so callers can pick a fallback per failure.
The response parser never raises; these come from the client and the
timeout wrapper only.
"""


class AIServiceError(Exception):
    """Base class for AI failures."""

    is_retryable: bool = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotConfiguredError(AIServiceError):
    """No API key is stored. Send the user to settings, never retry."""

    is_retryable = False

    def __init__(self) -> None:
        super().__init__("AI API key not configured. Add your API key in settings.")


class InvalidResponseError(AIServiceError):
    """The response envelope did not contain the expected text field."""

    def __init__(self, detail: str = "") -> None:
        message = "Invalid response from AI service"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.detail = detail


class HTTPStatusError(AIServiceError):
    """Non-2xx status without a structured error body."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP error: {status_code}")
        self.status_code = status_code


class APIMessageError(AIServiceError):
    """Non-2xx status carrying a server-provided message."""

    def __init__(self, server_message: str, status_code: int | None = None) -> None:
        super().__init__(f"API error: {server_message}")
        self.server_message = server_message
        self.status_code = status_code


class AIConnectionError(AIServiceError):
    """The request never produced an HTTP response."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Could not reach AI service: {detail}")
        self.detail = detail


class AITimeoutError(AIServiceError):
    """The deadline passed before the request finished."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"AI request timed out after {timeout:g}s")
        self.timeout = timeout
