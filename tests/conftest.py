"""
Pytest configuration and shared fixtures.

Provides common fixtures for:
    - Configuration with test values
    - Deterministic fake embedder and LLM
    - Sample policy text and chunks
    - An empty policy store and a wired-up API client
"""

import os
from unittest.mock import patch

import pytest


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def mock_settings():
    """Provide test settings without requiring .env file."""
    with patch.dict(
        os.environ,
        {
            "GOOGLE_API_KEY": "test-api-key",
            "EMBEDDING_MODEL": "textembedding-gecko@001",
            "CHAT_MODEL": "text-bison-001",
            "CHUNK_SIZE": "800",
            "CHUNK_OVERLAP": "100",
            "LOG_LEVEL": "DEBUG",
        },
        clear=True,
    ):
        from oneplace.config import Settings
        yield Settings(_env_file=None)


# =============================================================================
# Fakes
# =============================================================================

VOCABULARY = ["offer", "stipend", "attendance", "internship", "backlog", "dream"]


def keyword_vector(text: str) -> list[float]:
    """Bag-of-keywords vector so related texts score high against each other."""
    lowered = text.lower()
    return [float(lowered.count(word)) for word in VOCABULARY]


class FakeEmbedder:
    """Async embedder that never leaves the process."""

    def __init__(self):
        self.calls: list[str] = []

    async def aembed_texts(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        return [keyword_vector(t) for t in texts]

    async def aembed_query(self, query: str) -> list[float]:
        self.calls.append(query)
        return keyword_vector(query)


class FakeLLM:
    """LLM stand-in that records prompts and returns a canned answer."""

    def __init__(self, answer: str = "  A student may accept one offer.\nSources: [1]  "):
        self.answer = answer
        self.prompts: list[str] = []
        self.healthy = (True, "Endpoint healthy (responded in 0.01s)")

    def invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer

    def health_check(self, timeout: float = 10.0) -> tuple[bool, str]:
        return self.healthy


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_llm():
    return FakeLLM()


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_policy_text():
    """Three distinct policy sections, each longer than one 200-char window."""
    sections = [
        "Offer rules. Once a student accepts an offer they are out of the placement process. "
        "A second offer is allowed only for a dream company with a higher package. ",
        "Internship rules. The internship stipend is paid by the company. "
        "Internship leave does not count against attendance. ",
        "Eligibility. Students with an active backlog cannot sit for campus drives. "
        "Minimum attendance of seventy five percent is required. ",
    ]
    return "\n\n".join(section * 3 for section in sections)


@pytest.fixture
def sample_chunks():
    """Provide sample policy chunks with keyword embeddings."""
    from oneplace.retrieval.chunker import build_policy_chunks

    texts = [
        "A student who accepts an offer leaves the placement process.",
        "The internship stipend is decided by the company.",
        "Minimum attendance of 75 percent is required for drives.",
        "Students with a backlog are not eligible.",
    ]
    return build_policy_chunks(texts, [keyword_vector(t) for t in texts], timestamp_ms=1700000000000)


# =============================================================================
# Store and API Fixtures
# =============================================================================

@pytest.fixture
def policy_store():
    """Provide a fresh, empty process-wide store."""
    from oneplace.retrieval.store import get_policy_store

    get_policy_store.cache_clear()
    store = get_policy_store()
    yield store
    get_policy_store.cache_clear()


@pytest.fixture
def api_client(policy_store, fake_embedder, fake_llm):
    """TestClient with the external APIs replaced by fakes."""
    from fastapi.testclient import TestClient

    from oneplace.api.main import create_app, get_embedder, get_llm, get_store

    app = create_app()
    app.dependency_overrides[get_store] = lambda: policy_store
    app.dependency_overrides[get_embedder] = lambda: fake_embedder
    app.dependency_overrides[get_llm] = lambda: fake_llm

    with TestClient(app) as client:
        yield client
