"""
Pydantic models for API request and response schemas.

Field names on the wire are camelCase to match the portal front end.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IngestRequest(BaseModel):
    """Request schema for the /api/ingest endpoint."""

    text: Optional[str] = Field(
        default=None,
        description="Full policy text pasted by an admin",
    )
    version: Optional[str] = Field(
        default=None,
        description="Version label for this policy (generated when omitted)",
        examples=["2024-25"],
    )


class IngestResponse(BaseModel):
    """Response schema for the /api/ingest endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    ingested_chunks: int = Field(
        alias="ingestedChunks",
        description="Number of chunks now stored",
    )
    version: str = Field(description="Version label of the stored policy")


class ChatRequest(BaseModel):
    """Request schema for the /api/chat endpoint."""

    question: Optional[str] = Field(
        default=None,
        description="Natural language question about the placement policy",
        examples=["How many offers can a student accept?"],
    )


class SourceSchema(BaseModel):
    """A policy chunk used as context for the answer."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Chunk identifier")
    source_index: int = Field(
        alias="sourceIndex",
        description="1-based source number as cited in the answer",
    )
    score: float = Field(description="Cosine similarity to the question")


class ChatResponse(BaseModel):
    """Response schema for the /api/chat endpoint."""

    answer: str
    sources: list[SourceSchema] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "answer": "A student may accept only one offer.\nSources: [1]",
                    "sources": [{"id": "p-1718000000000-0", "sourceIndex": 1, "score": 0.82}],
                }
            ]
        },
    )


class PolicyStatusResponse(BaseModel):
    """Response schema for the /api/policy endpoint."""

    version: Optional[str] = Field(description="Version label of the stored policy")
    chunks: int = Field(description="Number of stored chunks")


class HealthResponse(BaseModel):
    """Response schema for the /health endpoint."""

    status: str = Field(
        description="Health status",
        examples=["healthy", "degraded"],
    )
    version: str = Field(description="API version")
    policy_loaded: bool = Field(description="Whether a policy has been ingested")
    upstream_ok: Optional[bool] = Field(
        default=None,
        description="Generation endpoint check result, only when requested",
    )
    upstream_message: Optional[str] = Field(
        default=None,
        examples=["Endpoint healthy (responded in 0.42s)"],
    )


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    error: str = Field(
        description="Human-readable error message",
        examples=["No question provided"],
    )
