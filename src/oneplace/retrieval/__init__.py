"""
Policy retrieval components.

Components:
    - chunker: Split policy text into overlapping windows
    - similarity: Cosine similarity and linear-scan ranking
    - embeddings: Generate vectors via the Google generative-language API
    - indexer: FAISS index over the ingested chunks
    - store: Process-wide in-memory policy store
"""

from oneplace.retrieval.chunker import PolicyChunk, build_policy_chunks, chunk_text
from oneplace.retrieval.embeddings import GoogleEmbedder
from oneplace.retrieval.indexer import PolicyIndex
from oneplace.retrieval.similarity import ScoredChunk, cosine_similarity, rank_chunks
from oneplace.retrieval.store import PolicyStore, get_policy_store

__all__ = [
    "PolicyChunk",
    "build_policy_chunks",
    "chunk_text",
    "GoogleEmbedder",
    "PolicyIndex",
    "ScoredChunk",
    "cosine_similarity",
    "rank_chunks",
    "PolicyStore",
    "get_policy_store",
]
