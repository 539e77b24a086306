"""
docseek - FastAPI application serving ranked full-text search

Serves a TF-IDF index built offline by `docseek index`:
- Index loaded once at startup (a corrupt index file aborts startup)
- POST /api/search: raw UTF-8 body in, JSON [[document_id, score], ...] out
- POST /v1/index/reload: load the index file again and swap it in

Each search runs the synchronous core in the threadpool against the index
snapshot taken at the start of the request.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

# Load environment variables from .env.local (local dev) or .env (production)
from dotenv import load_dotenv

# Load .env.local first (highest priority), then .env as fallback
env_local = Path(__file__).parent.parent / ".env.local"
env_file = Path(__file__).parent.parent / ".env"

if env_local.exists():
    print(f"Loading environment from: {env_local}")
    load_dotenv(env_local, override=True)
elif env_file.exists():
    print(f"Loading environment from: {env_file}")
    load_dotenv(env_file, override=True)

# Configure logging: console (brief) + file (detailed)
# `docseek serve` configures it before importing this module
from docseek.logging_config import logging_configured, setup_logging

if not logging_configured():
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    console_level = getattr(logging, log_level, logging.INFO)
    setup_logging(
        log_file=os.getenv("LOG_FILE", "logs/docseek.log") or None,
        console_level=console_level,
        file_level=logging.DEBUG  # Always DEBUG in file for troubleshooting
    )

logger = logging.getLogger(__name__)


from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from .query_service import (
    DEFAULT_RESULT_LIMIT,
    IndexSnapshot,
    answer_query,
    encode_results,
    parse_result_limit,
)
from .tfidf.errors import DecodeError, EncodingError, SerializationError
from .tfidf.persistence import load_index_file

# Configuration from environment variables
INDEX_PATH = os.getenv("INDEX_PATH", "index.json")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "6969"))
SEARCH_RESULT_LIMIT = parse_result_limit(os.getenv("SEARCH_RESULT_LIMIT", str(DEFAULT_RESULT_LIMIT)))

# Version tracking
APP_VERSION = "0.1.0"
APP_START_TIME = datetime.now(timezone.utc)

# Index currently served
index_snapshot = IndexSnapshot()


def error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    """JSON error body shared by every route: {"error": ..., "detail": ...}"""
    return JSONResponse(status_code=status_code, content={"error": error, "detail": detail})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the index before accepting requests"""
    logger.info(f"Reading {INDEX_PATH} index file...")
    try:
        index = load_index_file(INDEX_PATH)
    except SerializationError as e:
        logger.error(f"Refusing to start with an unusable index: {e}")
        raise

    index_snapshot.install(index)
    logger.info(f"Serving {len(index)} documents")

    yield

    logger.info("Shutting down...")


# FastAPI app
app = FastAPI(
    title="docseek API",
    description="TF-IDF ranked search over an indexed document directory",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS middleware for browser frontends served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Response models
class HealthResponse(BaseModel):
    status: str
    index_path: str
    documents: int
    terms: int
    version: str
    started_at: str
    uptime_seconds: float


class ReloadResponse(BaseModel):
    index_path: str
    documents: int
    previous_documents: int


# Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint"""
    return {
        "service": "docseek",
        "version": APP_VERSION,
        "status": "running",
        "search": "POST /api/search",
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check with index statistics"""
    index = index_snapshot.current()
    uptime = (datetime.now(timezone.utc) - APP_START_TIME).total_seconds()

    return HealthResponse(
        status="healthy",
        index_path=str(INDEX_PATH),
        documents=len(index),
        terms=len(index.document_frequencies),
        version=APP_VERSION,
        started_at=APP_START_TIME.isoformat(),
        uptime_seconds=round(uptime, 2),
    )


@app.post("/api/search")
async def search(request: Request):
    """
    Rank indexed documents against the raw request body.

    Body: query text (UTF-8), e.g. `bind texture`
    Response: JSON array of [document_id, score], best first, at most 20
    """
    body = await request.body()
    index = index_snapshot.current()

    try:
        results = await run_in_threadpool(answer_query, index, body, SEARCH_RESULT_LIMIT)
        payload = encode_results(results)

    except DecodeError as e:
        logger.warning(f"Rejected search request: {e}")
        return error_response(status.HTTP_400_BAD_REQUEST, "Bad request", str(e))
    except EncodingError as e:
        logger.error(f"Search failed: {e}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(e))

    logger.info(f"Search {body[:80]!r}: {len(results)} results")
    return Response(content=payload, media_type="application/json")


@app.post("/v1/index/reload", response_model=ReloadResponse)
async def reload_index():
    """
    Load the index file again and install it as the served snapshot.

    A corrupt file leaves the current snapshot in place.
    """
    try:
        index = await run_in_threadpool(load_index_file, INDEX_PATH)
    except SerializationError as e:
        logger.error(f"Index reload failed, keeping current snapshot: {e}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Index reload failed",
            f"Failed to reload index: {e}",
        )

    previous = index_snapshot.install(index)

    return ReloadResponse(
        index_path=str(INDEX_PATH),
        documents=len(index),
        previous_documents=len(previous),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(exc))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docseek.main:app",
        host=HOST,
        port=PORT,
    )
