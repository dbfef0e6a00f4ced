"""
Embedding providers for the semantic ranking signal.

Usage:
    # Provider selected by EMBEDDING_PROVIDER (once, at startup):
    from noteranker.embeddings import get_embedder
    
    embedder = get_embedder()
    batch = await embedder.embed_batch(["invoice from acme", "finance invoices"])
    
    # Or create a specific implementation:
    from noteranker.embeddings import OpenAIEmbedder
    
    embedder = OpenAIEmbedder("text-embedding-3-small")
"""

from typing import Optional

from ..config import EmbeddingSettings
from .base import BaseEmbedder, EmbeddingBatch, EmbeddingProvider
from .local import LocalSentenceTransformerEmbedder
from .openai import OpenAIEmbedder
from .vertex import VertexAIEmbedder
from .factory import EmbeddingFactory


def get_embedder(settings: Optional[EmbeddingSettings] = None, force_reload: bool = False) -> BaseEmbedder:
    """Get the configured embedder instance (factory convenience function)."""
    return EmbeddingFactory.create(settings=settings, force_reload=force_reload)


__all__ = [
    'BaseEmbedder',
    'EmbeddingBatch',
    'EmbeddingProvider',
    'OpenAIEmbedder',
    'VertexAIEmbedder',
    'LocalSentenceTransformerEmbedder',
    'EmbeddingFactory',
    'get_embedder',
]
