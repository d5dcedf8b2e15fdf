"""
Prompt assembly for the policy assistant.

The model is told to answer from the numbered policy excerpts only and to
reply with a fixed sentence when they do not cover the question.
"""

from typing import Sequence

from oneplace.retrieval.similarity import ScoredChunk

DONT_KNOW_ANSWER = "I don't know based on the provided policy and information."

SOURCE_SEPARATOR = "\n\n---\n\n"

SYSTEM_PROMPT = """You are the SCET OnePlace Assistant. You MUST answer strictly using ONLY the CONTEXT provided below.
- If the user's question cannot be answered from the CONTEXT, respond exactly: "{dont_know}"
- Do NOT hallucinate or use any external knowledge.
- If you answer, include a single line "Sources: [n]" showing which source numbers you used.
CONTEXT:
{context}"""


def build_context(top: Sequence[ScoredChunk]) -> str:
    """Render ranked chunks as numbered sources, best first."""
    return SOURCE_SEPARATOR.join(
        f"Source {i} (score={item.score:.3f}):\n{item.chunk.text}"
        for i, item in enumerate(top, start=1)
    )


def build_prompt(question: str, top: Sequence[ScoredChunk]) -> str:
    """Full generation prompt: system rules, context, then the user turn."""
    system_prompt = SYSTEM_PROMPT.format(
        dont_know=DONT_KNOW_ANSWER,
        context=build_context(top),
    ).strip()
    return f"{system_prompt}\n\nUser: {question}\nAssistant:"
