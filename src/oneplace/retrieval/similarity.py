"""
Cosine similarity and linear-scan ranking of policy chunks.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import ArrayLike

from oneplace.retrieval.chunker import PolicyChunk

EPSILON = 1e-12


@dataclass(frozen=True)
class ScoredChunk:
    """A policy chunk with its similarity to a query."""

    chunk: PolicyChunk
    score: float


def cosine_similarity(a: ArrayLike, b: ArrayLike) -> float:
    """
    Cosine similarity between two equal-length vectors.

    A small epsilon in the denominator makes zero vectors score 0.0
    instead of dividing by zero.

    Raises:
        ValueError: If the vectors have different lengths
    """
    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()
    if va.shape != vb.shape:
        raise ValueError(f"Vectors must have same length: got {va.size} and {vb.size}")

    dot = float(np.dot(va, vb))
    return dot / (float(np.linalg.norm(va)) * float(np.linalg.norm(vb)) + EPSILON)


def rank_chunks(
    query_embedding: ArrayLike,
    chunks: Iterable[PolicyChunk],
    top_k: int = 5,
) -> list[ScoredChunk]:
    """
    Score every chunk against the query and keep the best `top_k`.

    Args:
        query_embedding: Query vector
        chunks: Candidate chunks (scanned in full)
        top_k: Maximum number of results

    Returns:
        ScoredChunks sorted by score descending; ties keep input order
    """
    scored = [ScoredChunk(chunk=c, score=cosine_similarity(query_embedding, c.embedding)) for c in chunks]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[: max(0, top_k)]


def best_score(results: Sequence[ScoredChunk]) -> float | None:
    """Highest score among ranked results, or None when there are none."""
    if not results:
        return None
    return max(r.score for r in results)
