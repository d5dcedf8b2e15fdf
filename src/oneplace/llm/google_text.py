"""
Text generation client for the Google generative-language API.

Wraps the `:generateText` endpoint behind the `invoke(prompt) -> str`
interface used by the chat service.
"""

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from oneplace.exceptions import GenerationError

logger = logging.getLogger(__name__)


def extract_answer(payload: Any) -> str:
    """
    Pull the generated text out of a `:generateText` response.

    Falls back to the first 500 characters of the raw JSON when none of
    the known shapes is present.
    """
    if isinstance(payload, dict):
        for key, field in (("candidates", "content"), ("output", "content"), ("responses", "text")):
            items = payload.get(key)
            if isinstance(items, list) and items and isinstance(items[0], dict):
                value = items[0].get(field)
                if value:
                    return str(value)
    return json.dumps(payload)[:500]


class GoogleTextLLM:
    """LLM client for the `:generateText` endpoint."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str],
        base_url: str,
        temperature: float = 0.0,
        max_output_tokens: int = 600,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            model: Generation model ID
            api_key: API key sent as the `key` query parameter
            base_url: REST base URL
            temperature: Sampling temperature
            max_output_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
        """
        self.model = model
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{quote(self.model, safe='')}:generateText"

    def _post(self, payload: dict[str, Any], timeout: float) -> requests.Response:
        params = {"key": self.api_key} if self.api_key else {}
        return requests.post(self.url, params=params, json=payload, timeout=timeout)

    def invoke(self, prompt: str) -> str:
        """
        Generate a completion for the prompt.

        Args:
            prompt: The full prompt text

        Returns:
            The generated text

        Raises:
            GenerationError: If the request fails or the API returns an error
        """
        payload = {
            "prompt": prompt,
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
        }

        try:
            response = self._post(payload, self.timeout)
        except requests.RequestException as e:
            raise GenerationError(f"Generation request failed: {e}") from e

        if not response.ok:
            raise GenerationError(f"Generation API error: {response.status_code} {response.text}")

        try:
            result = response.json()
        except ValueError as e:
            raise GenerationError(f"Unexpected generation response: {response.text[:500]}") from e

        return extract_answer(result)

    def health_check(self, timeout: float = 10.0) -> tuple[bool, str]:
        """
        Send a one-token prompt to verify the endpoint answers.

        Returns:
            Tuple of (is_healthy, message)
        """
        test_payload = {"prompt": "test", "temperature": 0.0, "maxOutputTokens": 1}

        try:
            response = self._post(test_payload, timeout)
        except requests.Timeout:
            error_msg = f"Endpoint timed out after {timeout}s"
            logger.error(error_msg)
            return False, error_msg
        except requests.RequestException as e:
            error_msg = f"Connection failed: {e}"
            logger.error(error_msg)
            return False, error_msg

        if not response.ok:
            error_msg = f"HTTP {response.status_code}: {response.reason}"
            logger.error(error_msg)
            return False, error_msg

        elapsed = response.elapsed.total_seconds()
        logger.info(f"Generation endpoint healthy ({elapsed:.2f}s)")
        return True, f"Endpoint healthy (responded in {elapsed:.2f}s)"
