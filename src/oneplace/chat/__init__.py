"""
Policy chat: prompt assembly and the ingest / answer flows.
"""

from oneplace.chat.prompts import DONT_KNOW_ANSWER, build_prompt
from oneplace.chat.service import (
    ChatAnswer,
    ChatSource,
    IngestResult,
    answer_question,
    ingest_policy,
)

__all__ = [
    "DONT_KNOW_ANSWER",
    "build_prompt",
    "ChatAnswer",
    "ChatSource",
    "IngestResult",
    "answer_question",
    "ingest_policy",
]
