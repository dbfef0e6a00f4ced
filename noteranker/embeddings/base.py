"""
Abstract base class for embedding providers.

All providers implement this interface so the ranker never knows which
backend produced a vector.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..errors import ProviderError


class EmbeddingProvider(Enum):
    """Supported embedding backends"""
    OPENAI = "openai"  # OpenAI embeddings API
    VERTEX_AI = "vertex_ai"  # Google Vertex AI text-embedding-005
    SENTENCE_TRANSFORMERS = "sentence_transformers"  # Local open-source models


@dataclass
class EmbeddingBatch:
    """Vectors for a batch of texts, in input order"""
    vectors: List[List[float]]
    usage_tokens: int = 0  # Billed tokens reported by the provider (0 if unknown)
    model: str = ""

    def __len__(self) -> int:
        return len(self.vectors)


class BaseEmbedder(ABC):
    """
    Abstract base class for embedding providers.
    
    Implementations wrap every SDK failure in ProviderError.
    """
    
    provider: EmbeddingProvider
    MAX_BATCH_SIZE: Optional[int] = None  # Inputs per provider request (None = unlimited)
    
    @abstractmethod
    async def embed_batch(self, texts: Sequence[str]) -> EmbeddingBatch:
        """
        Embed a batch of texts with a single provider round trip where possible.
        
        Args:
            texts: Texts to embed
            
        Returns:
            EmbeddingBatch with len(texts) vectors in input order
            
        Raises:
            ProviderError: network, auth or quota failure
        """
        pass
    
    @abstractmethod
    def get_model_info(self) -> dict:
        """
        Get information about the embedding model.
        
        Returns:
            Dict with keys: name, type, provider
        """
        pass
    
    def close(self):
        """Optional cleanup (close API clients, free model memory, etc.)"""
        pass

    async def aclose(self):
        """Async cleanup for providers holding async HTTP clients (defaults to close())"""
        self.close()
    
    def _check_batch(self, texts: Sequence[str], vectors: List[List[float]]) -> List[List[float]]:
        """Verify the provider returned one vector per input."""
        if len(vectors) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(texts)} inputs",
                provider=self.provider.value,
            )
        return vectors
    
    def _split(self, texts: Sequence[str]) -> List[List[str]]:
        """Chunk texts into provider-sized requests, preserving order."""
        texts = list(texts)
        size = self.MAX_BATCH_SIZE or len(texts) or 1
        return [texts[i:i + size] for i in range(0, len(texts), size)]
