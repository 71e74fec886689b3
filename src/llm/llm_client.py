"""Chat-completion client for OpenAI-compatible services.

This module posts chat-completion requests with the requests library and
translates HTTP failures into the LLMError hierarchy. Transient failures
go through retry_on_transient_error.
"""

import logging
from typing import Any, Dict, Optional

import requests

from src.config.models import LLMConfig
from .errors import LLMAccessError, LLMConfigError, LLMResponseError
from .retry_logic import TransientHTTPError, retry_on_transient_error

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = {'openai'}


class LLMClient:
    """Client for the chat-completion endpoint of an OpenAI-compatible API.

    Example:
        >>> client = LLMClient(LLMConfig(api_key="sk-..."))
        >>> client.generate_text("Say hello")
        'Hello!'
    """

    def __init__(self, config: LLMConfig, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            config: LLM settings
            session: requests session to use (a new one by default)

        Raises:
            LLMConfigError: If the configuration is incomplete or the provider unsupported
        """
        if config is None or not config.api_key or not config.provider or not config.model:
            raise LLMConfigError("api_key, provider and model are required")

        if config.provider.lower() not in SUPPORTED_PROVIDERS:
            raise LLMConfigError(
                f"Unsupported LLM provider: {config.provider}. Currently, only 'openai' is supported"
            )

        self.config = config
        self.endpoint = f"{config.base_url.rstrip('/')}/chat/completions"
        self._session = session or requests.Session()
        logger.info(f"LLM client initialized with model: {config.model}")

    def generate_text(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Generate a completion for a single user prompt.

        Args:
            prompt: Prompt text
            max_tokens: Override the configured response token limit
            temperature: Override the configured sampling temperature

        Returns:
            The stripped completion text

        Raises:
            LLMAccessError: If the request fails or keeps failing after retries
            LLMResponseError: If the response carries no usable text
        """
        payload = {
            'model': self.config.model,
            'messages': [{'role': 'user', 'content': prompt}],
            'max_tokens': max_tokens or self.config.max_tokens,
            'temperature': self.config.temperature if temperature is None else temperature,
        }
        logger.debug(
            f"Sending request to LLM (model={payload['model']}, "
            f"max_tokens={payload['max_tokens']}, prompt_chars={len(prompt)})"
        )

        data = retry_on_transient_error(
            self._post, payload, max_retries=self.config.max_retries
        )
        text = self._extract_text(data)
        logger.info("LLM generated text successfully")
        return text

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Send one request and decode the JSON body.

        Raises:
            TransientHTTPError: For 429 and 5xx responses (retried by the caller)
            LLMAccessError: For other non-2xx responses
            requests.exceptions.Timeout / ConnectionError: Passed to the retry layer
        """
        response = self._session.post(
            self.endpoint,
            json=payload,
            headers={
                'Authorization': f"Bearer {self.config.api_key}",
                'Content-Type': 'application/json',
            },
            timeout=self.config.timeout,
        )

        status = response.status_code
        if status == 429 or 500 <= status < 600:
            raise TransientHTTPError(status, f"HTTP {status} from LLM API")
        if status == 401 or status == 403:
            raise LLMAccessError(f"LLM API rejected the API key (HTTP {status})", status_code=status)
        if not 200 <= status < 300:
            raise LLMAccessError(
                f"LLM API request failed (HTTP {status}): {response.text[:200]}",
                status_code=status,
            )

        try:
            return response.json()
        except ValueError:
            raise LLMResponseError("LLM API returned a body that is not JSON")

    @staticmethod
    def _extract_text(data: Any) -> str:
        try:
            content = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError):
            raise LLMResponseError()

        if not isinstance(content, str) or not content.strip():
            logger.warning("LLM returned an empty response")
            raise LLMResponseError()

        return content.strip()
