"""
Process-wide in-memory policy store.

Holds the chunks and version label of the most recent ingest. Nothing is
persisted; a restart starts empty. Each ingest replaces the whole snapshot
with one reference assignment, so readers see either the old policy or
the new one. Concurrent ingests are last-writer-wins.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Sequence

from oneplace.retrieval.chunker import PolicyChunk
from oneplace.retrieval.indexer import PolicyIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicySnapshot:
    """The chunk set of one ingest call."""

    chunks: tuple[PolicyChunk, ...] = ()
    version: Optional[str] = None
    index: Optional[PolicyIndex] = field(default=None, repr=False, compare=False)


class PolicyStore:
    """In-memory holder for the current policy snapshot."""

    def __init__(self) -> None:
        self._snapshot = PolicySnapshot()

    def set_policy(self, chunks: Sequence[PolicyChunk], version: Optional[str]) -> None:
        """
        Replace the stored policy.

        Args:
            chunks: Chunks of the new policy
            version: Advisory version label

        Raises:
            ValueError: If chunk embeddings differ in dimension
        """
        chunks = tuple(chunks)
        snapshot = PolicySnapshot(
            chunks=chunks,
            version=version,
            index=PolicyIndex.from_chunks(chunks),
        )
        self._snapshot = snapshot
        logger.info(f"Stored policy {version!r} with {len(chunks)} chunks")

    def get_chunks(self) -> tuple[PolicyChunk, ...]:
        return self._snapshot.chunks

    def get_version(self) -> Optional[str]:
        return self._snapshot.version

    def get_index(self) -> Optional[PolicyIndex]:
        return self._snapshot.index

    def snapshot(self) -> PolicySnapshot:
        """Current snapshot; stays consistent even if an ingest lands meanwhile."""
        return self._snapshot

    @property
    def is_empty(self) -> bool:
        return not self._snapshot.chunks

    def clear(self) -> None:
        self._snapshot = PolicySnapshot()


@lru_cache(maxsize=1)
def get_policy_store() -> PolicyStore:
    """
    Get the process-wide policy store.

    Call `get_policy_store.cache_clear()` in tests to start from an empty store.
    """
    return PolicyStore()
