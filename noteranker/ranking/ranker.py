"""
Hybrid (BM25 + embedding) ranking of a fixed candidate set against a note.

Pipeline per request:
1. Sanitize candidates (trim, drop empty, drop duplicates)
2. Lexical: BM25 index over candidates (cached) scores the query
3. Semantic: one batched embedding call for [query] + candidates, cosine similarity
4. Normalize both score vectors independently into [0, 1]
5. Fuse: semantic × embedding_weight + keyword × keyword_weight
6. Stable sort descending, keep top_k

Steps 2 and 3 are independent and run concurrently. Embedding failures are
propagated: there is no lexical-only fallback.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from ..bm25.index import LexicalIndexCache, get_default_cache
from ..config import RankingSettings
from ..embeddings.base import BaseEmbedder, EmbeddingBatch
from ..errors import EmbeddingTimeoutError, InvalidInputError, ProviderError
from ..text import normalize_for_embedding
from .fusion import RankedCandidate, normalize_scores, rank_top_k, weighted_fusion
from .similarity import cosine_similarities

logger = logging.getLogger(__name__)


def sanitize_candidates(candidates: Optional[Sequence[str]]) -> List[str]:
    """
    Trim candidate names, drop empty ones and drop duplicates (first wins).

    Raises:
        InvalidInputError: a candidate is not a string
    """
    if not candidates:
        return []
    if isinstance(candidates, str):
        raise InvalidInputError("candidates must be a list of names, not a string")

    seen = set()
    cleaned = []
    for candidate in candidates:
        if not isinstance(candidate, str):
            raise InvalidInputError(f"Candidate names must be strings, got {type(candidate).__name__}")
        name = candidate.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        cleaned.append(name)

    dropped = len(candidates) - len(cleaned)
    if dropped:
        logger.warning(f"Dropped {dropped} empty or duplicate candidates ({len(cleaned)} remain)")
    return cleaned


def _validate_top_k(top_k) -> int:
    if isinstance(top_k, bool) or not isinstance(top_k, int):
        raise InvalidInputError(f"top_k must be an integer, got {top_k!r}")
    if top_k <= 0:
        raise InvalidInputError(f"top_k must be positive, got {top_k}")
    return top_k


class HybridRanker:
    """
    Ranks candidate names (folders, tags) for a query document.

    The embedder is chosen once at startup; the BM25 index cache is injectable
    so tests and tenants can use isolated caches.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        settings: Optional[RankingSettings] = None,
        index_cache: Optional[LexicalIndexCache] = None,
        embedding_timeout: Optional[float] = 30.0,
    ):
        """
        Args:
            embedder: Embedding provider
            settings: Fusion weights, normalization floor, default top_k
            index_cache: BM25 index cache (process-wide default if omitted)
            embedding_timeout: Seconds to wait for the embedding batch (None = no limit)
        """
        self.embedder = embedder
        self.settings = settings or RankingSettings()
        if index_cache is None:
            index_cache = get_default_cache(self.settings.index_cache_size)
        self.index_cache = index_cache
        self.embedding_timeout = embedding_timeout

    def keyword_scores(self, query_text: str, candidates: Sequence[str]) -> List[float]:
        """Raw BM25 scores aligned to candidate order (0.0 for no overlap)."""
        index = self.index_cache.get_or_build(candidates)
        return index.dense_scores(query_text)

    async def semantic_scores(self, query_text: str, candidates: Sequence[str]) -> List[float]:
        """Raw cosine similarities of candidates to the query, from one batched embedding call."""
        texts = [normalize_for_embedding(query_text)] + [normalize_for_embedding(c) for c in candidates]
        batch = await self._embed(texts)

        try:
            return cosine_similarities(batch.vectors[0], batch.vectors[1:])
        except ValueError as e:
            raise ProviderError(f"Malformed embeddings: {e}", provider=self.embedder.provider.value) from e

    async def _embed(self, texts: List[str]) -> EmbeddingBatch:
        try:
            if self.embedding_timeout is None:
                batch = await self.embedder.embed_batch(texts)
            else:
                batch = await asyncio.wait_for(self.embedder.embed_batch(texts), timeout=self.embedding_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Embedding batch of {len(texts)} texts timed out after {self.embedding_timeout}s")
            raise EmbeddingTimeoutError(
                f"Embedding generation timeout ({self.embedding_timeout}s)",
                provider=self.embedder.provider.value,
            )

        if len(batch.vectors) != len(texts):
            raise ProviderError(
                f"Expected {len(texts)} embeddings, got {len(batch.vectors)}",
                provider=self.embedder.provider.value,
            )
        if batch.usage_tokens:
            logger.info(f"Embedding usage: {batch.usage_tokens} tokens ({len(texts)} texts)")
        return batch

    async def rank(
        self,
        query_text: str,
        candidates: Sequence[str],
        top_k: Optional[int] = None,
    ) -> List[RankedCandidate]:
        """
        Rank candidates against the query document.

        Args:
            query_text: Note content (optionally prefixed with its file name)
            candidates: Candidate names; trimmed and deduplicated here
            top_k: Number of results (settings.default_top_k if omitted)

        Returns:
            min(top_k, len(candidates)) RankedCandidate, sorted by fused score
            (descending); unmatched candidates rank last, never excluded

        Raises:
            InvalidInputError: top_k is not a positive integer
            ProviderError: embedding call failed or timed out
        """
        top_k = _validate_top_k(self.settings.default_top_k if top_k is None else top_k)
        candidates = sanitize_candidates(candidates)
        if not candidates:
            return []

        query_text = query_text or ""

        raw_keyword, raw_semantic = await asyncio.gather(
            asyncio.to_thread(self.keyword_scores, query_text, candidates),
            self.semantic_scores(query_text, candidates),
        )

        keyword = normalize_scores(raw_keyword, floor=self.settings.normalization_floor)
        semantic = normalize_scores(raw_semantic, floor=self.settings.normalization_floor)
        hybrid = weighted_fusion(
            semantic,
            keyword,
            embedding_weight=self.settings.embedding_weight,
            keyword_weight=self.settings.keyword_weight,
        )

        results = rank_top_k(candidates, hybrid, top_k, keyword_scores=keyword, semantic_scores=semantic)

        matched = sum(1 for s in raw_keyword if s > 0)
        logger.info(
            f"Ranked {len(candidates)} candidates ({matched} keyword matches), "
            f"top: {results[0].name!r} ({results[0].score:.3f})"
        )
        for item in results:
            logger.debug(
                f"{item.name!r}: hybrid={item.score:.3f} "
                f"semantic={item.semantic_score:.3f} keyword={item.keyword_score:.3f}"
            )
        return results
