"""
Policy ingest and question answering.

ingest_policy: chunk pasted text, embed every chunk, replace the store.
answer_question: embed the question, rank stored chunks, decline below the
similarity threshold, otherwise ask the LLM with the top chunks as context.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from oneplace.chat.prompts import DONT_KNOW_ANSWER, build_prompt
from oneplace.config import settings
from oneplace.exceptions import InvalidRequestError, PolicyAssistantError
from oneplace.llm.factory import LLMProtocol
from oneplace.retrieval.chunker import build_policy_chunks, chunk_text
from oneplace.retrieval.similarity import best_score
from oneplace.retrieval.store import PolicyStore

logger = logging.getLogger(__name__)


class AsyncEmbedder(Protocol):
    """What the service needs from an embedder."""

    async def aembed_texts(self, texts: list[str]) -> list[list[float]]: ...

    async def aembed_query(self, query: str) -> list[float]: ...


@dataclass
class IngestResult:
    """Outcome of an ingest call."""

    ingested_chunks: int
    version: str
    ok: bool = True


@dataclass
class ChatSource:
    """A policy chunk that was offered to the model as context."""

    id: str
    source_index: int
    """1-based number used for the chunk in the prompt."""
    score: float


@dataclass
class ChatAnswer:
    """Answer returned to the user."""

    answer: str
    sources: list[ChatSource] = field(default_factory=list)


async def ingest_policy(
    text: Optional[str],
    version: Optional[str] = None,
    *,
    store: PolicyStore,
    embedder: AsyncEmbedder,
    chunk_size: Optional[int] = None,
    chunk_overlap: Optional[int] = None,
) -> IngestResult:
    """
    Replace the stored policy with the given text.

    Args:
        text: Raw policy text
        version: Version label (default 'v<epoch-millis>')
        store: Store to replace
        embedder: Embedding client
        chunk_size: Window size (default from settings)
        chunk_overlap: Window overlap (default from settings)

    Raises:
        InvalidRequestError: If text is blank
        PolicyAssistantError: If chunking yields nothing
        EmbeddingError: If the embedding API fails
    """
    if not text or not text.strip():
        raise InvalidRequestError("No text provided.")

    chunks = chunk_text(
        text,
        chunk_size if chunk_size is not None else settings.chunk_size,
        chunk_overlap if chunk_overlap is not None else settings.chunk_overlap,
    )
    if not chunks:
        raise PolicyAssistantError("Chunking produced no chunks.")

    started = time.time()
    embeddings = await embedder.aembed_texts(chunks)
    timestamp_ms = int(time.time() * 1000)
    records = build_policy_chunks(chunks, embeddings, timestamp_ms)

    version = version if version is not None else f"v{timestamp_ms}"
    store.set_policy(records, version)
    logger.info(
        f"Ingested policy {version!r}: {len(records)} chunks "
        f"from {len(text):,} characters in {time.time() - started:.2f}s"
    )

    return IngestResult(ingested_chunks=len(records), version=version)


async def answer_question(
    question: Optional[str],
    *,
    store: PolicyStore,
    embedder: AsyncEmbedder,
    llm: LLMProtocol,
    top_k: Optional[int] = None,
    threshold: Optional[float] = None,
) -> ChatAnswer:
    """
    Answer a question from the stored policy.

    Args:
        question: User question
        store: Store holding the current policy
        embedder: Embedding client
        llm: Generation client
        top_k: Number of context chunks (default from settings)
        threshold: Minimum best score to attempt an answer (default from settings)

    Raises:
        InvalidRequestError: If the question is blank or no policy is stored
        EmbeddingError: If the embedding API fails
        GenerationError: If the generation API fails
    """
    if not question or not question.strip():
        raise InvalidRequestError("No question provided")

    snapshot = store.snapshot()
    if not snapshot.chunks:
        raise InvalidRequestError("No policy ingested. Use admin to ingest first.")

    top_k = top_k if top_k is not None else settings.retrieval_top_k
    threshold = threshold if threshold is not None else settings.similarity_threshold

    query_embedding = await embedder.aembed_query(question)
    # a non-empty snapshot always carries its index
    top = snapshot.index.search(query_embedding, k=top_k)

    score = best_score(top)
    if score is None or score < threshold:
        logger.info(f"Best match {score} below threshold {threshold}; declining")
        return ChatAnswer(answer=DONT_KNOW_ANSWER, sources=[])

    prompt = build_prompt(question, top)
    answer = await asyncio.to_thread(llm.invoke, prompt)

    return ChatAnswer(
        answer=answer.strip(),
        sources=[
            ChatSource(id=item.chunk.id, source_index=i, score=item.score)
            for i, item in enumerate(top, start=1)
        ],
    )
