"""Unit test configuration - stub embedding provider and isolated caches"""

import os
import tempfile
from pathlib import Path

import pytest

# noteranker.main configures file logging on import; keep it out of the repo
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "note-ranker-tests" / "note-ranker.log"))

from noteranker.bm25.index import LexicalIndexCache
from noteranker.config import RankingSettings
from noteranker.ranking import HybridRanker

from embedding_stubs import StubEmbedder


@pytest.fixture
def stub_embedder():
    return StubEmbedder()


@pytest.fixture
def index_cache():
    """Isolated BM25 index cache (never the process-wide one)"""
    return LexicalIndexCache(max_entries=8)


@pytest.fixture
def ranker(stub_embedder, index_cache):
    return HybridRanker(stub_embedder, settings=RankingSettings(), index_cache=index_cache)
