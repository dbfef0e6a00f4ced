"""
Runtime configuration for the ranking service.

All values come from environment variables (optionally loaded from
.env.local / .env by the application entry point). Settings are read once at
startup and passed explicitly to the components that need them.

Ranking:
    RANKING_EMBEDDING_WEIGHT     weight of the semantic signal (default 0.7)
    RANKING_KEYWORD_WEIGHT       weight of the BM25 signal (default 0.3)
    RANKING_NORMALIZATION_FLOOR  lower bound of the normalization divisor (default 1)
    RANKING_DEFAULT_TOP_K        results returned when caller omits topK (default 2)
    RANKING_INDEX_CACHE_SIZE     BM25 indexes kept in the LRU cache (default 128)

Embeddings:
    EMBEDDING_PROVIDER           openai | vertex_ai | sentence_transformers
    EMBEDDING_MODEL              model identifier (provider default if unset)
    EMBEDDING_TIMEOUT_SECONDS    timeout of the batched embedding call (default 30)
"""

import os
from dataclasses import dataclass
from typing import Optional

# Not calibrated; tune per vault
DEFAULT_EMBEDDING_WEIGHT = 0.7
DEFAULT_KEYWORD_WEIGHT = 0.3
# Scores never get scaled up: a raw max below 1 is not stretched to 1.0
DEFAULT_NORMALIZATION_FLOOR = 1.0


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class RankingSettings:
    """Weights and limits of the hybrid ranker"""
    embedding_weight: float = DEFAULT_EMBEDDING_WEIGHT
    keyword_weight: float = DEFAULT_KEYWORD_WEIGHT
    normalization_floor: float = DEFAULT_NORMALIZATION_FLOOR
    default_top_k: int = 2
    index_cache_size: int = 128

    def __post_init__(self):
        if self.embedding_weight < 0 or self.keyword_weight < 0:
            raise ValueError("Ranking weights must be non-negative")
        if self.embedding_weight + self.keyword_weight == 0:
            raise ValueError("At least one ranking weight must be positive")
        if self.normalization_floor < 0:
            raise ValueError("RANKING_NORMALIZATION_FLOOR must be >= 0")
        if self.default_top_k <= 0:
            raise ValueError("RANKING_DEFAULT_TOP_K must be positive")
        if self.index_cache_size <= 0:
            raise ValueError("RANKING_INDEX_CACHE_SIZE must be positive")

    @classmethod
    def from_env(cls) -> "RankingSettings":
        return cls(
            embedding_weight=_env_float("RANKING_EMBEDDING_WEIGHT", DEFAULT_EMBEDDING_WEIGHT),
            keyword_weight=_env_float("RANKING_KEYWORD_WEIGHT", DEFAULT_KEYWORD_WEIGHT),
            normalization_floor=_env_float("RANKING_NORMALIZATION_FLOOR", DEFAULT_NORMALIZATION_FLOOR),
            default_top_k=_env_int("RANKING_DEFAULT_TOP_K", 2),
            index_cache_size=_env_int("RANKING_INDEX_CACHE_SIZE", 128),
        )


@dataclass(frozen=True)
class EmbeddingSettings:
    """Embedding backend selection (one provider per process)"""
    provider: str = "openai"
    model: Optional[str] = None
    timeout_seconds: float = 30.0

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ValueError("EMBEDDING_TIMEOUT_SECONDS must be positive")

    @classmethod
    def from_env(cls) -> "EmbeddingSettings":
        return cls(
            provider=(os.getenv("EMBEDDING_PROVIDER") or "openai").lower(),
            model=os.getenv("EMBEDDING_MODEL") or None,
            timeout_seconds=_env_float("EMBEDDING_TIMEOUT_SECONDS", 30.0),
        )
