"""
Factory to create the embedding provider selected by configuration.
"""

from typing import Optional
import logging

from ..config import EmbeddingSettings
from .base import BaseEmbedder, EmbeddingProvider
from .local import LocalSentenceTransformerEmbedder
from .openai import OpenAIEmbedder
from .vertex import VertexAIEmbedder

logger = logging.getLogger(__name__)


class EmbeddingFactory:
    """Factory to create the process-wide embedding provider."""
    
    _instance: Optional[BaseEmbedder] = None  # Singleton cache
    
    @classmethod
    def create(cls, settings: Optional[EmbeddingSettings] = None, force_reload: bool = False) -> BaseEmbedder:
        """
        Create the embedding provider named by configuration.
        
        Config (env vars, see EmbeddingSettings):
            EMBEDDING_PROVIDER: "openai" | "vertex_ai" | "sentence_transformers" (default: openai)
            EMBEDDING_MODEL: Model identifier (provider default if unset)
        
        Args:
            settings: Explicit settings (read from environment if omitted)
            force_reload: If True, recreate instance even if cached
            
        Returns:
            Embedding provider instance
            
        Raises:
            ValueError: unknown provider or missing credentials
        """
        if cls._instance is not None and not force_reload:
            return cls._instance
        
        settings = settings or EmbeddingSettings.from_env()
        
        try:
            provider = EmbeddingProvider(settings.provider)
        except ValueError:
            valid = ", ".join(p.value for p in EmbeddingProvider)
            raise ValueError(f"Unknown embedding provider: {settings.provider}. Valid options: {valid}")
        
        try:
            if provider == EmbeddingProvider.OPENAI:
                logger.info(f"Creating OpenAI embedder: {settings.model or OpenAIEmbedder.DEFAULT_MODEL}")
                instance = OpenAIEmbedder(model=settings.model)
            
            elif provider == EmbeddingProvider.VERTEX_AI:
                logger.info(f"Creating Vertex AI embedder: {settings.model or VertexAIEmbedder.DEFAULT_MODEL}")
                instance = VertexAIEmbedder(model=settings.model)
            
            else:
                logger.info(
                    f"Creating local sentence-transformers embedder: "
                    f"{settings.model or LocalSentenceTransformerEmbedder.DEFAULT_MODEL}"
                )
                instance = LocalSentenceTransformerEmbedder(model_name=settings.model)
        
        except Exception as e:
            logger.error(f"Failed to create embedder ({provider.value}): {e}")
            raise
        
        if cls._instance is not None:
            cls._instance.close()
        cls._instance = instance
        return instance
    
    @classmethod
    def cleanup(cls):
        """Cleanup cached embedder instance."""
        if cls._instance is not None:
            logger.info("Cleaning up embedder instance")
            cls._instance.close()
            cls._instance = None
    
    @classmethod
    async def acleanup(cls):
        """Cleanup cached embedder instance, closing async HTTP clients."""
        if cls._instance is not None:
            logger.info("Closing embedder instance")
            instance, cls._instance = cls._instance, None
            await instance.aclose()
