"""
Embedding generation via the Google generative-language API.

Calls the `:embedText` endpoint once per text. Requests are issued one at a
time and the first failure aborts the whole call.
"""

import json
from typing import Any, Optional
from urllib.parse import quote

import httpx

from oneplace.config import settings
from oneplace.exceptions import EmbeddingError


def extract_embedding(payload: Any) -> list[float]:
    """
    Pull the embedding vector out of an `:embedText` response.

    The API has returned several shapes across versions; the first one
    present wins.

    Raises:
        EmbeddingError: If no known shape matches
    """
    candidates = (
        ("embedding", "values"),
        ("outputs", 0, "embedding", "values"),
        ("outputs", 0, "outputEmbeddings", 0, "values"),
        ("data", 0, "embedding"),
    )
    for path in candidates:
        value = _dig(payload, path)
        if value:
            return [float(x) for x in value]

    raise EmbeddingError(f"Unexpected embedding response: {json.dumps(payload)[:800]}")


def _dig(payload: Any, path: tuple) -> Any:
    node = payload
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or len(node) <= key:
                return None
        elif not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


class GoogleEmbedder:
    """
    Generate embeddings using the Google generative-language API.

    Example:
        >>> embedder = GoogleEmbedder()
        >>> vectors = embedder.embed_texts(["Students may hold one offer."])
        >>> len(vectors)
        1
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the embedder.

        Args:
            model: Embedding model ID (default from settings)
            api_key: API key (default from settings)
            base_url: REST base URL (default from settings)
            timeout: Per-request timeout in seconds (default from settings)
        """
        self.model = model or settings.embedding_model
        self.api_key = api_key or settings.google_api_key_value
        self.base_url = (base_url or settings.google_api_base).rstrip("/")
        self.timeout = timeout or settings.request_timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{quote(self.model, safe='')}:embedText"

    @property
    def params(self) -> dict[str, str]:
        return {"key": self.api_key} if self.api_key else {}

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: Texts to embed

        Returns:
            One vector per text, in input order

        Raises:
            EmbeddingError: If any request fails
        """
        vectors: list[list[float]] = []
        with httpx.Client(timeout=self.timeout) as client:
            for text in texts:
                vectors.append(self._embed_one_sync(client, text))
        return vectors

    def embed_query(self, query: str) -> list[float]:
        """Generate the embedding for a single query."""
        with httpx.Client(timeout=self.timeout) as client:
            return self._embed_one_sync(client, query)

    async def aembed_texts(self, texts: list[str]) -> list[list[float]]:
        """
        Async version of embed_texts.

        Requests are still issued one at a time.
        """
        vectors: list[list[float]] = []
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for text in texts:
                vectors.append(await self._embed_one_async(client, text))
        return vectors

    async def aembed_query(self, query: str) -> list[float]:
        """Async version of embed_query."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._embed_one_async(client, query)

    def _embed_one_sync(self, client: httpx.Client, text: str) -> list[float]:
        try:
            response = client.post(self.url, params=self.params, json={"text": text})
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e
        return self._parse_response(response)

    async def _embed_one_async(self, client: httpx.AsyncClient, text: str) -> list[float]:
        try:
            response = await client.post(self.url, params=self.params, json={"text": text})
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e
        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> list[float]:
        if response.is_error:
            raise EmbeddingError(f"Embedding API error: {response.status_code} {response.text}")
        try:
            payload = response.json()
        except ValueError as e:
            raise EmbeddingError(f"Unexpected embedding response: {response.text[:800]}") from e
        return extract_embedding(payload)
