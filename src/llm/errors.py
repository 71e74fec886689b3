"""Typed exception hierarchy for text-generation client errors."""

from typing import Optional

from src.git_client.errors import SyncError


class LLMError(SyncError):
    """Base exception for all LLM client errors."""
    pass


class LLMConfigError(LLMError):
    """Raised when the client configuration is incomplete or unsupported."""

    def __init__(self, message: str):
        super().__init__(f"LLM client configuration error: {message}")


class LLMAccessError(LLMError):
    """Raised when the service stays unavailable after retries or rejects the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LLMResponseError(LLMError):
    """Raised when the service returns an empty or malformed completion."""

    def __init__(self, message: str = "LLM returned an empty or invalid response"):
        super().__init__(message)
