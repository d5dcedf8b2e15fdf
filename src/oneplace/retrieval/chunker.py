"""
Fixed-size policy chunking.

Splits pasted policy text into overlapping character windows and pairs
each window with its embedding as a PolicyChunk record.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Sequence

DEFAULT_MAX_CHARS = 1000
DEFAULT_OVERLAP = 200
MIN_MAX_CHARS = 200


@dataclass(frozen=True)
class PolicyChunk:
    """A window of policy text with its embedding vector."""

    id: str
    """Unique identifier, e.g. 'p-1718000000000-3'."""

    text: str
    """The trimmed window text."""

    embedding: tuple[float, ...] = field(repr=False)
    """Embedding vector returned by the embedding API."""

    idx: int
    """Position of the window within the ingested text."""


def chunk_text(
    text: Any,
    max_chars: Any = DEFAULT_MAX_CHARS,
    overlap: Any = DEFAULT_OVERLAP,
) -> list[str]:
    """
    Split text into overlapping windows.

    Windows start every `max_chars - overlap` characters. Each window is
    stripped and dropped if nothing is left.

    Args:
        text: Text to split (non-strings are converted, None is empty)
        max_chars: Window size; values below 200 are raised to 200
        overlap: Characters shared by neighbouring windows; zero or non-numeric
            means the default 200, negative means none, and max_chars // 4 is
            used when it is not smaller than max_chars

    Returns:
        List of non-empty window strings in document order
    """
    if not isinstance(text, str):
        text = "" if text is None else str(text)

    max_chars = _as_int(max_chars, DEFAULT_MAX_CHARS) or DEFAULT_MAX_CHARS
    overlap = _as_int(overlap, DEFAULT_OVERLAP) or DEFAULT_OVERLAP
    if max_chars < MIN_MAX_CHARS:
        max_chars = MIN_MAX_CHARS
    if overlap < 0:
        overlap = 0
    if overlap >= max_chars:
        overlap = max_chars // 4

    step = max(1, max_chars - overlap)
    chunks: list[str] = []
    for start in range(0, len(text), step):
        window = text[start : start + max_chars].strip()
        if window:
            chunks.append(window)
    return chunks


def build_policy_chunks(
    texts: Sequence[str],
    embeddings: Sequence[Sequence[float]],
    timestamp_ms: int | None = None,
) -> list[PolicyChunk]:
    """
    Pair chunk texts with their embeddings.

    Args:
        texts: Chunk texts in document order
        embeddings: One vector per text
        timestamp_ms: Millisecond timestamp used in chunk ids (default now)

    Raises:
        ValueError: If texts and embeddings have different lengths
    """
    if len(texts) != len(embeddings):
        raise ValueError(
            f"Texts and embeddings must have same length: "
            f"got {len(texts)} texts and {len(embeddings)} embeddings"
        )
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    return [
        PolicyChunk(
            id=f"p-{timestamp_ms}-{idx}",
            text=chunk,
            embedding=tuple(float(x) for x in vector),
            idx=idx,
        )
        for idx, (chunk, vector) in enumerate(zip(texts, embeddings))
    ]


def _as_int(value: Any, default: int) -> int:
    """Coerce a size argument, falling back to the default for non-numbers."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return number
