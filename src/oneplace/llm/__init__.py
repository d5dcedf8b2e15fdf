"""LLM clients for oneplace."""

from oneplace.llm.factory import LLMProtocol, create_llm
from oneplace.llm.google_text import GoogleTextLLM

__all__ = ["GoogleTextLLM", "LLMProtocol", "create_llm"]
