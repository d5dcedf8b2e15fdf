"""
FastAPI application for the OnePlace policy assistant.

Run with:
    uvicorn oneplace.api.main:app --reload

Or use the CLI:
    oneplace serve
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from oneplace import __version__
from oneplace.api.models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    IngestRequest,
    IngestResponse,
    PolicyStatusResponse,
    SourceSchema,
)
from oneplace.chat.service import answer_question, ingest_policy
from oneplace.config import settings
from oneplace.exceptions import PolicyAssistantError
from oneplace.llm.factory import LLMProtocol, create_llm
from oneplace.logging_config import setup_logging
from oneplace.retrieval.embeddings import GoogleEmbedder
from oneplace.retrieval.store import PolicyStore, get_policy_store

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Internal or upstream API error"},
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The policy store starts empty; an admin must ingest before chat works.
    """
    setup_logging(settings.log_level)
    logger.info("Starting OnePlace assistant...")

    if not settings.google_api_key_value:
        logger.warning("GOOGLE_API_KEY not set; embedding and generation calls will fail")

    yield

    logger.info("Shutting down OnePlace assistant...")


# =============================================================================
# Dependencies
# =============================================================================

def get_store() -> PolicyStore:
    return get_policy_store()


def get_embedder() -> GoogleEmbedder:
    return GoogleEmbedder()


def get_llm() -> LLMProtocol:
    return create_llm()


# =============================================================================
# Routes
# =============================================================================

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(
    upstream: bool = Query(False, description="Also check the generation endpoint"),
    store: PolicyStore = Depends(get_store),
    llm: LLMProtocol = Depends(get_llm),
) -> HealthResponse:
    """
    Health check endpoint for liveness and readiness checks.

    With `?upstream=true` a one-token prompt is sent to the generation API;
    a failure reports status "degraded" rather than an error.
    """
    response = HealthResponse(
        status="healthy",
        version=__version__,
        policy_loaded=not store.is_empty,
    )
    if upstream:
        ok, message = await asyncio.to_thread(llm.health_check)
        response.upstream_ok = ok
        response.upstream_message = message
        if not ok:
            response.status = "degraded"
    return response


@router.post(
    "/api/ingest",
    response_model=IngestResponse,
    responses=ERROR_RESPONSES,
    tags=["Policy"],
)
async def ingest_endpoint(
    request: IngestRequest,
    store: PolicyStore = Depends(get_store),
    embedder: GoogleEmbedder = Depends(get_embedder),
) -> IngestResponse:
    """
    Replace the stored policy with pasted text.

    The text is split into overlapping windows and every window is
    embedded. The previous policy is discarded.
    """
    try:
        result = await ingest_policy(
            request.text,
            request.version,
            store=store,
            embedder=embedder,
        )
    except PolicyAssistantError:
        raise
    except Exception as e:
        logger.exception("Ingest error")
        raise PolicyAssistantError(str(e)) from e

    return IngestResponse(
        ok=result.ok,
        ingested_chunks=result.ingested_chunks,
        version=result.version,
    )


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses=ERROR_RESPONSES,
    tags=["Chat"],
)
async def chat_endpoint(
    request: ChatRequest,
    store: PolicyStore = Depends(get_store),
    embedder: GoogleEmbedder = Depends(get_embedder),
    llm: LLMProtocol = Depends(get_llm),
) -> ChatResponse:
    """
    Answer a question strictly from the stored policy.

    Returns a fixed "I don't know" answer with no sources when no stored
    chunk is similar enough to the question.
    """
    try:
        result = await answer_question(
            request.question,
            store=store,
            embedder=embedder,
            llm=llm,
        )
    except PolicyAssistantError:
        raise
    except Exception as e:
        logger.exception("Chat error")
        raise PolicyAssistantError(str(e)) from e

    return ChatResponse(
        answer=result.answer,
        sources=[
            SourceSchema(id=s.id, source_index=s.source_index, score=s.score)
            for s in result.sources
        ],
    )


@router.get("/api/policy", response_model=PolicyStatusResponse, tags=["Policy"])
async def policy_status(store: PolicyStore = Depends(get_store)) -> PolicyStatusResponse:
    """Version label and size of the stored policy."""
    snapshot = store.snapshot()
    return PolicyStatusResponse(version=snapshot.version, chunks=len(snapshot.chunks))


# =============================================================================
# Error handlers
# =============================================================================

async def assistant_error_handler(request: Request, exc: PolicyAssistantError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {detail}"})


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="OnePlace Policy Assistant",
        description="Placement-policy question answering for the SCET OnePlace portal",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PolicyAssistantError, assistant_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(router)

    return app


# Create app instance
app = create_app()
