"""
Local embeddings using sentence-transformers.

Supports any HuggingFace sentence-embedding model.
Model loads once and stays in memory for fast inference.
"""

import asyncio
import logging
import threading
from typing import List, Optional, Sequence

from ..errors import ProviderError
from .base import BaseEmbedder, EmbeddingBatch, EmbeddingProvider

logger = logging.getLogger(__name__)


class LocalSentenceTransformerEmbedder(BaseEmbedder):
    """
    Local sentence-transformers embedder (no network, no token usage).
    """
    
    provider = EmbeddingProvider.SENTENCE_TRANSFORMERS
    DEFAULT_MODEL = "all-MiniLM-L6-v2"
    
    def __init__(self, model_name: Optional[str] = None):
        """
        Initialize local embedder.
        
        Args:
            model_name: HuggingFace model identifier
                - 'all-MiniLM-L6-v2' (384 dims, fast, default)
                - 'BAAI/bge-small-en-v1.5' (384 dims, better quality)
        """
        self.model_name = model_name or self.DEFAULT_MODEL
        self.model = None  # Lazy loading
        self._load_lock = threading.Lock()
        logger.info(f"LocalSentenceTransformerEmbedder initialized (model will load on first use): {self.model_name}")
    
    def _ensure_loaded(self):
        """Lazy load model on first use (avoid startup overhead)"""
        if self.model is not None:
            return
        with self._load_lock:
            if self.model is None:
                logger.info(f"Loading sentence-transformers model: {self.model_name}")
                from sentence_transformers import SentenceTransformer
                self.model = SentenceTransformer(self.model_name)
                logger.info(f"Model loaded successfully: {self.model_name}")
    
    def _encode(self, texts: List[str]) -> List[List[float]]:
        self._ensure_loaded()
        embeddings = self.model.encode(texts, show_progress_bar=False)
        return [[float(x) for x in row] for row in embeddings]
    
    async def embed_batch(self, texts: Sequence[str]) -> EmbeddingBatch:
        """Encode texts in a worker thread."""
        if not texts:
            return EmbeddingBatch(vectors=[], model=self.model_name)
        
        try:
            vectors = await asyncio.to_thread(self._encode, list(texts))
        except Exception as e:
            logger.error(f"Local embedding failed for {self.model_name}: {e}")
            raise ProviderError(f"Local embedding failed: {e}", provider=self.provider.value) from e
        
        return EmbeddingBatch(vectors=self._check_batch(texts, vectors), model=self.model_name)
    
    def get_model_info(self) -> dict:
        """Get model metadata."""
        return {
            "name": self.model_name,
            "type": "local",
            "provider": "sentence-transformers",
            "loaded": self.model is not None
        }
    
    def close(self):
        """Free model memory."""
        if self.model is not None:
            logger.info(f"Closing model: {self.model_name}")
            del self.model
            self.model = None
