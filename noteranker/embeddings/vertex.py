"""
Vertex AI embeddings via the Google Gen AI SDK.

Uses text-embedding-005 by default. The SDK call is blocking, so it runs in a
worker thread to keep the event loop free.
"""

import asyncio
import logging
import os
from typing import List, Optional, Sequence

from google import genai

from ..errors import ProviderError
from .base import BaseEmbedder, EmbeddingBatch, EmbeddingProvider

logger = logging.getLogger(__name__)


class VertexAIEmbedder(BaseEmbedder):
    """
    Vertex AI text embeddings (one embed_content call per MAX_BATCH_SIZE inputs).
    """
    
    provider = EmbeddingProvider.VERTEX_AI
    DEFAULT_MODEL = "text-embedding-005"
    MAX_BATCH_SIZE = 250  # text-embedding-005 limit on instances per request
    
    def __init__(
        self,
        model: Optional[str] = None,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        """
        Initialize Vertex AI embedder.
        
        Args:
            model: Vertex embedding model (default: text-embedding-005, 768 dims)
            project_id: GCP project (GOOGLE_CLOUD_PROJECT / GCP_PROJECT_ID if omitted)
            location: GCP region (GOOGLE_CLOUD_LOCATION / GCP_REGION, default us-central1)
            client: Preconfigured genai.Client
        """
        self.model = model or self.DEFAULT_MODEL
        self.project_id = project_id or os.getenv("GOOGLE_CLOUD_PROJECT") or os.getenv("GCP_PROJECT_ID")
        self.location = location or os.getenv("GOOGLE_CLOUD_LOCATION") or os.getenv("GCP_REGION") or "us-central1"
        
        if client is None:
            if not self.project_id:
                raise ValueError(
                    "GCP project ID required. Set GOOGLE_CLOUD_PROJECT env var or pass project_id parameter."
                )
            client = genai.Client(vertexai=True, project=self.project_id, location=self.location)
        
        self.client = client
        logger.info(
            f"VertexAIEmbedder initialized: {self.model} "
            f"(project={self.project_id}, location={self.location})"
        )
    
    def _embed_sync(self, texts: List[str]) -> EmbeddingBatch:
        vectors: List[List[float]] = []
        tokens = 0
        for chunk in self._split(texts):
            response = self.client.models.embed_content(model=self.model, contents=chunk)
            embeddings = response.embeddings or []
            vectors.extend(self._check_batch(chunk, [list(e.values) for e in embeddings]))
            
            for embedding in embeddings:
                statistics = getattr(embedding, "statistics", None)
                if statistics is not None and getattr(statistics, "token_count", None):
                    tokens += int(statistics.token_count)
        return EmbeddingBatch(vectors=vectors, usage_tokens=tokens, model=self.model)
    
    async def embed_batch(self, texts: Sequence[str]) -> EmbeddingBatch:
        """Embed texts in a worker thread."""
        if not texts:
            return EmbeddingBatch(vectors=[], model=self.model)
        
        try:
            batch = await asyncio.to_thread(self._embed_sync, list(texts))
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Vertex AI embedding request failed ({len(texts)} inputs): {e}")
            raise ProviderError(f"Vertex AI embedding request failed: {e}", provider=self.provider.value) from e
        
        logger.debug(f"Vertex AI embedded {len(batch)} texts ({batch.usage_tokens} tokens)")
        return batch
    
    def get_model_info(self) -> dict:
        """Get information about the Vertex AI embedder."""
        return {
            "name": self.model,
            "type": "api",
            "provider": "Google Vertex AI",
            "project": self.project_id,
            "location": self.location,
        }
