"""
OnePlace: placement-policy assistant for the SCET OnePlace portal

Admins paste the training-and-placement policy into the portal; students
ask questions about it in a chat widget. Answers are generated only from
the most similar policy excerpts.

Key Components:
    - retrieval: Chunking, embeddings, cosine ranking and the in-memory store
    - llm: Google text-generation client
    - chat: Prompt assembly and the ingest / answer flows
    - api: FastAPI REST endpoints
    - cli: Typer command-line interface
"""

__version__ = "0.1.0"

from oneplace.config import settings

__all__ = [
    "__version__",
    "settings",
]
