"""Text-generation client used for merge conflict resolution.

This package talks to an OpenAI-compatible chat-completion API with
requests, retrying rate limits and transient failures with exponential
backoff.
"""

from .errors import LLMError, LLMConfigError, LLMAccessError, LLMResponseError
from .llm_client import LLMClient
from .retry_logic import retry_on_transient_error, is_transient_error, TransientHTTPError

__all__ = [
    'LLMError',
    'LLMConfigError',
    'LLMAccessError',
    'LLMResponseError',
    'LLMClient',
    'retry_on_transient_error',
    'is_transient_error',
    'TransientHTTPError',
]
