"""
OpenAI embeddings API implementation.

Requires OPENAI_API_KEY environment variable.
Default model: text-embedding-ada-002.
"""

import asyncio
import logging
import os
from typing import List, Optional, Sequence, Tuple

from openai import AsyncOpenAI

from ..errors import ProviderError
from .base import BaseEmbedder, EmbeddingBatch, EmbeddingProvider

logger = logging.getLogger(__name__)


class OpenAIEmbedder(BaseEmbedder):
    """
    OpenAI embeddings (batched: one request per MAX_BATCH_SIZE inputs).
    """

    provider = EmbeddingProvider.OPENAI
    DEFAULT_MODEL = "text-embedding-ada-002"
    MAX_BATCH_SIZE = 2048  # API limit on inputs per embeddings request

    def __init__(self, model: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        """
        Initialize OpenAI embedder.

        Args:
            model: OpenAI embedding model
                - 'text-embedding-ada-002' (1536 dims, default)
                - 'text-embedding-3-small' / 'text-embedding-3-large'
            client: Preconfigured AsyncOpenAI client (reads OPENAI_API_KEY if omitted)
        """
        self.model = model or self.DEFAULT_MODEL

        if client is None:
            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY environment variable required for OpenAI embeddings")
            client = AsyncOpenAI(api_key=api_key)

        self.client = client
        logger.info(f"OpenAIEmbedder initialized with model: {self.model}")

    async def _embed_chunk(self, inputs: List[str]) -> Tuple[List[List[float]], int]:
        try:
            response = await self.client.embeddings.create(model=self.model, input=inputs)
        except Exception as e:
            logger.error(f"OpenAI embedding request failed ({len(inputs)} inputs): {e}")
            raise ProviderError(f"OpenAI embedding request failed: {e}", provider=self.provider.value) from e

        # Responses carry an index per item; do not rely on list order
        data = sorted(response.data, key=lambda item: item.index)
        vectors = self._check_batch(inputs, [list(item.embedding) for item in data])

        usage = getattr(response, "usage", None)
        return vectors, int(getattr(usage, "total_tokens", 0) or 0)

    async def embed_batch(self, texts: Sequence[str]) -> EmbeddingBatch:
        """Embed texts, one embeddings.create call per chunk, chunks in parallel."""
        if not texts:
            return EmbeddingBatch(vectors=[], model=self.model)

        # The API rejects empty strings
        inputs = [text if text and text.strip() else " " for text in texts]
        chunks = self._split(inputs)

        results = await asyncio.gather(*[self._embed_chunk(chunk) for chunk in chunks])

        vectors = [vector for chunk_vectors, _ in results for vector in chunk_vectors]
        tokens = sum(chunk_tokens for _, chunk_tokens in results)
        logger.debug(f"OpenAI embedded {len(vectors)} texts in {len(chunks)} requests ({tokens} tokens)")
        return EmbeddingBatch(vectors=vectors, usage_tokens=tokens, model=self.model)

    def get_model_info(self) -> dict:
        """Get model metadata."""
        return {
            "name": self.model,
            "type": "api",
            "provider": "openai"
        }

    def close(self):
        """Drop the client reference (use aclose() to release its connection pool)."""
        self.client = None

    async def aclose(self):
        """Close the AsyncOpenAI HTTP connection pool."""
        if self.client is not None:
            await self.client.close()
            self.client = None
