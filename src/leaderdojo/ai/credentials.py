"""Sources for the API key."""

import os
from typing import Protocol

DEFAULT_API_KEY_ENV = "GROQ_API_KEY"


class CredentialProvider(Protocol):
    """Anything that can hand out the API key, or None when unset."""

    def get_api_key(self) -> str | None: ...


class EnvCredentialProvider:
    """Reads the key from the environment on every call."""

    def __init__(self, env_var: str = DEFAULT_API_KEY_ENV) -> None:
        self.env_var = env_var

    def get_api_key(self) -> str | None:
        value = os.getenv(self.env_var)
        return value.strip() if value and value.strip() else None


class StaticCredentialProvider:
    """Holds a fixed key. Empty strings count as not configured."""

    def __init__(self, api_key: str | None) -> None:
        self._api_key = api_key

    def get_api_key(self) -> str | None:
        if self._api_key and self._api_key.strip():
            return self._api_key.strip()
        return None
