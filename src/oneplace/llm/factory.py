"""
LLM factory for creating the answer-generation client from configuration.
"""

from typing import Protocol


class LLMProtocol(Protocol):
    """Protocol that all LLM clients must implement."""

    def invoke(self, prompt: str) -> str:
        """Call the LLM with a prompt and return the response."""
        ...

    def health_check(self, timeout: float = 10.0) -> tuple[bool, str]:
        """Check the endpoint answers; returns (is_healthy, message)."""
        ...


def create_llm(temperature: float | None = None) -> LLMProtocol:
    """
    Create an LLM client based on configuration settings.

    Args:
        temperature: Optional temperature override. If None, uses settings.llm_temperature

    Returns:
        LLM client that implements the LLMProtocol
    """
    from oneplace.config import settings
    from oneplace.llm.google_text import GoogleTextLLM

    temp = temperature if temperature is not None else settings.llm_temperature

    return GoogleTextLLM(
        model=settings.chat_model,
        api_key=settings.google_api_key_value,
        base_url=settings.google_api_base,
        temperature=temp,
        max_output_tokens=settings.llm_max_output_tokens,
        timeout=settings.request_timeout,
    )
