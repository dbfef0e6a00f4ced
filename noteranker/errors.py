"""
Exception hierarchy for the ranking core.

- ProviderError: embedding provider call failed (network, auth, quota).
  Never retried here, always propagated to the caller.
- EmbeddingTimeoutError: provider did not answer within the configured timeout.
- InvalidInputError: malformed request (top_k <= 0, no usable input).
- IndexCacheError: lexical index cache returned an index built for a
  different candidate set.
"""


class RankingError(Exception):
    """Base class for all ranking errors"""


class ProviderError(RankingError):
    """Embedding provider failure (network/auth/rate-limit)"""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class EmbeddingTimeoutError(ProviderError):
    """Embedding provider exceeded the request timeout"""


class InvalidInputError(RankingError, ValueError):
    """Malformed ranking input"""


class IndexCacheError(RankingError):
    """Cached lexical index does not match the requested candidates"""
