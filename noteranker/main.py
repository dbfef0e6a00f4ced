"""
Note Ranker - FastAPI service suggesting destination folders and tags for notes

Ranks a caller-supplied list of folder (or tag) names against a note using:
- BM25 over stemmed, negation-aware tokens of the names
- Embedding cosine similarity (OpenAI, Vertex AI or local sentence-transformers)
- Independent max-normalization and weighted fusion (0.7 semantic / 0.3 keyword)

Authentication, billing and token accounting belong to the calling gateway.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional

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

from noteranker.logging_config import setup_logging

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
setup_logging(
    log_file=os.getenv("LOG_FILE", "logs/note-ranker.log"),
    console_level=getattr(logging, log_level, logging.INFO),
    file_level=logging.DEBUG  # Always DEBUG in file for troubleshooting
)

logger = logging.getLogger(__name__)

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .bm25.index import LexicalIndexCache
from .config import EmbeddingSettings, RankingSettings
from .embeddings import EmbeddingFactory
from .errors import InvalidInputError, ProviderError
from .ranking import HybridRanker, RankedCandidate
from .text import build_query_text

PORT = int(os.getenv("PORT", "8080"))
APP_START_TIME = datetime.utcnow().isoformat() + "Z"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Select the embedding provider once and build the ranker"""
    ranking_settings = RankingSettings.from_env()
    embedding_settings = EmbeddingSettings.from_env()

    logger.info(f"Initializing embedding provider: {embedding_settings.provider}")
    embedder = EmbeddingFactory.create(embedding_settings)
    app.state.ranker = HybridRanker(
        embedder,
        settings=ranking_settings,
        index_cache=LexicalIndexCache(max_entries=ranking_settings.index_cache_size),
        embedding_timeout=embedding_settings.timeout_seconds,
    )
    logger.info(
        f"Ranker ready (embedding_weight={ranking_settings.embedding_weight}, "
        f"keyword_weight={ranking_settings.keyword_weight})"
    )

    yield

    logger.info("Shutting down...")
    await EmbeddingFactory.acleanup()
    app.state.ranker = None


app = FastAPI(
    title="Note Ranker API",
    description="Hybrid BM25 + embedding ranking of folders and tags for notes",
    version=__version__,
    lifespan=lifespan,
)


def get_ranker(request: Request) -> HybridRanker:
    ranker = getattr(request.app.state, "ranker", None)
    if ranker is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Ranker not initialized")
    return ranker


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    embedding_model: dict
    cached_indexes: int


class RankRequest(BaseModel):
    """Fields shared by folder and tag ranking requests"""
    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(default="", description="Note content")
    file_name: Optional[str] = Field(default=None, alias="fileName", description="Note path; base name joins the query")
    top_k: Optional[int] = Field(default=None, alias="topK", gt=0, le=100, description="Results to return")


class FolderRankRequest(RankRequest):
    folders: List[str] = Field(..., description="Existing folder paths to choose from")


class TagRankRequest(RankRequest):
    tags: List[str] = Field(..., description="Existing tags to choose from")


class ScoredName(BaseModel):
    name: str
    score: float
    keyword_score: float
    semantic_score: float


class FolderRankResponse(BaseModel):
    folders: List[str]
    scores: List[ScoredName]


class TagRankResponse(BaseModel):
    tags: List[str]
    scores: List[ScoredName]


def _scored(results: List[RankedCandidate]) -> List[ScoredName]:
    return [
        ScoredName(
            name=r.name,
            score=round(r.score, 6),
            keyword_score=round(r.keyword_score, 6),
            semantic_score=round(r.semantic_score, 6),
        )
        for r in results
    ]


async def _rank(ranker: HybridRanker, request: RankRequest, candidates: List[str]) -> List[RankedCandidate]:
    query_text = build_query_text(request.content, request.file_name)
    try:
        return await ranker.rank(query_text, candidates, top_k=request.top_k)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProviderError as e:
        logger.error(f"Embedding provider failure ({e.provider}): {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Embedding provider unavailable, try again later"
        )


@app.get("/", response_model=dict)
async def root():
    return {
        "service": "note-ranker",
        "version": __version__,
        "endpoints": ["/health", "/v1/folders/embeddings", "/v1/tags/embeddings"],
    }


@app.get("/health", response_model=HealthResponse)
async def health(ranker: HybridRanker = Depends(get_ranker)):
    return HealthResponse(
        status="healthy",
        version=__version__,
        started_at=APP_START_TIME,
        embedding_model=ranker.embedder.get_model_info(),
        cached_indexes=len(ranker.index_cache),
    )


@app.post("/v1/folders/embeddings", response_model=FolderRankResponse)
async def suggest_folders(request: FolderRankRequest, ranker: HybridRanker = Depends(get_ranker)):
    """Suggest the best existing folders for a note"""
    logger.info(f"Folder suggestion: {len(request.folders)} folders, {len(request.content)} chars")
    results = await _rank(ranker, request, request.folders)
    return FolderRankResponse(folders=[r.name for r in results], scores=_scored(results))


@app.post("/v1/tags/embeddings", response_model=TagRankResponse)
async def suggest_tags(request: TagRankRequest, ranker: HybridRanker = Depends(get_ranker)):
    """Suggest the best existing tags for a note"""
    logger.info(f"Tag suggestion: {len(request.tags)} tags, {len(request.content)} chars")
    results = await _rank(ranker, request, request.tags)
    return TagRankResponse(tags=[r.name for r in results], scores=_scored(results))


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
