"""
FAISS index over the ingested policy chunks.

IndexFlatIP performs an exact linear scan; with unit-length vectors the
inner product is the cosine similarity.
"""

from typing import Sequence

import faiss
import numpy as np
from numpy.typing import ArrayLike, NDArray

from oneplace.retrieval.chunker import PolicyChunk
from oneplace.retrieval.similarity import ScoredChunk


class PolicyIndex:
    """
    Exact cosine-similarity search over one policy's chunks.

    Example:
        >>> index = PolicyIndex.from_chunks(chunks)
        >>> results = index.search(query_embedding, k=5)
    """

    def __init__(self, dimension: int) -> None:
        """
        Initialize an empty index.

        Args:
            dimension: Embedding vector dimension
        """
        if dimension <= 0:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.dimension = dimension
        self._index = faiss.IndexFlatIP(dimension)
        self._chunks: list[PolicyChunk] = []

    @property
    def size(self) -> int:
        """Number of vectors in the index."""
        return int(self._index.ntotal)

    @classmethod
    def from_chunks(cls, chunks: Sequence[PolicyChunk]) -> "PolicyIndex | None":
        """
        Build an index from chunks, or return None when there are none.

        Raises:
            ValueError: If chunk embeddings differ in dimension
        """
        if not chunks:
            return None
        index = cls(dimension=len(chunks[0].embedding))
        index.add(chunks)
        return index

    def add(self, chunks: Sequence[PolicyChunk]) -> None:
        """
        Add chunks to the index.

        Raises:
            ValueError: If any embedding has the wrong dimension
        """
        if not chunks:
            return
        for chunk in chunks:
            if len(chunk.embedding) != self.dimension:
                raise ValueError(
                    f"Embeddings must have dimension {self.dimension}, "
                    f"got {len(chunk.embedding)} for chunk {chunk.id}"
                )

        vectors = np.array([c.embedding for c in chunks], dtype=np.float32)
        self._index.add(self._normalize_embeddings(vectors))
        self._chunks.extend(chunks)

    def search(self, query_embedding: ArrayLike, k: int = 5) -> list[ScoredChunk]:
        """
        Return the `k` chunks most similar to the query.

        Args:
            query_embedding: Query vector of shape (dimension,)
            k: Number of results to return

        Returns:
            ScoredChunks sorted by score descending, equal scores in the
            order the chunks were added

        Raises:
            ValueError: If the query has the wrong dimension
        """
        query = np.asarray(query_embedding, dtype=np.float32).reshape(1, -1)
        if query.shape[1] != self.dimension:
            raise ValueError(
                f"Query must have dimension {self.dimension}, got {query.shape[1]}"
            )
        if self.size == 0 or k <= 0:
            return []

        # FAISS orders tied scores arbitrarily, so score every chunk and
        # break ties on insertion position before truncating.
        scores, indices = self._index.search(self._normalize_embeddings(query), self.size)
        hits = sorted(
            (
                (float(score), int(idx))
                for idx, score in zip(indices[0], scores[0])
                if idx >= 0
            ),
            key=lambda hit: (-hit[0], hit[1]),
        )

        return [
            ScoredChunk(chunk=self._chunks[idx], score=score)
            for score, idx in hits[:k]
        ]

    def _normalize_embeddings(self, embeddings: NDArray[np.float32]) -> NDArray[np.float32]:
        """
        Normalize embeddings to unit length for cosine similarity.

        Args:
            embeddings: Array of shape (n, dimension)

        Returns:
            Contiguous float32 array of the same shape
        """
        norms = np.linalg.norm(embeddings, axis=1, keepdims=True)
        # Zero vectors stay zero and score 0 against everything
        norms = np.where(norms == 0, 1, norms)
        return np.ascontiguousarray(embeddings / norms, dtype=np.float32)
