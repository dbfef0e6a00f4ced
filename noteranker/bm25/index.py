"""
BM25 inverted index over a candidate set, plus the LRU cache that memoizes it.

A candidate set (a user's folder or tag names) usually repeats across
consecutive requests from the same vault, so indexes are cached by the exact
candidate sequence. Built indexes are immutable: a request keeps scoring a
consistent index even while other requests add or evict cache entries.
"""

import hashlib
import logging
import threading
from collections import OrderedDict, defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import IndexCacheError
from .scorer import BM25Scorer
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


class BM25Index:
    """
    Immutable BM25 index; document ids are candidate positions.

    Use BM25Index.build() to create one.
    """

    def __init__(
        self,
        candidates: Tuple[str, ...],
        doc_terms: List[Dict[str, int]],
        scorer: BM25Scorer,
    ):
        self.candidates = candidates
        self.scorer = scorer
        self._doc_terms = doc_terms
        self._doc_lengths = [sum(terms.values()) for terms in doc_terms]
        self.avg_doc_length = sum(self._doc_lengths) / len(doc_terms) if doc_terms else 0.0

        postings: Dict[str, List[int]] = defaultdict(list)
        for doc_id, terms in enumerate(doc_terms):
            for term in terms:
                postings[term].append(doc_id)
        self._postings = dict(postings)
        self._idf = {
            term: BM25Scorer.idf(len(doc_terms), len(docs))
            for term, docs in self._postings.items()
        }

    @classmethod
    def build(cls, candidates: Sequence[str], scorer: Optional[BM25Scorer] = None) -> "BM25Index":
        """
        Tokenize every candidate and build the inverted index.

        Args:
            candidates: Candidate names, position = document id
            scorer: BM25 parameters (default k1=1.5, b=0.75, field weight 1.0)

        Returns:
            Consolidated index (empty when there are no candidates)
        """
        doc_terms: List[Dict[str, int]] = []
        for candidate in candidates:
            term_frequencies: Dict[str, int] = defaultdict(int)
            for term in tokenize(candidate):
                term_frequencies[term] += 1
            doc_terms.append(dict(term_frequencies))

        index = cls(tuple(candidates), doc_terms, scorer or BM25Scorer())
        logger.debug(f"Built BM25 index: {index.vocabulary_size} unique terms from {len(candidates)} candidates")
        return index

    def __len__(self) -> int:
        return len(self.candidates)

    @property
    def vocabulary_size(self) -> int:
        return len(self._postings)

    def score(self, query_text: str) -> Dict[int, float]:
        """
        Score every candidate sharing at least one term with the query.

        Args:
            query_text: Raw query document (tokenized here with the index tokenizer)

        Returns:
            Sparse mapping {candidate position: raw BM25 score}; candidates
            without overlapping terms are absent (score 0 for the caller)
        """
        query_terms = tokenize(query_text)
        if not query_terms or not self._postings:
            return {}

        matched = sorted({doc_id for term in query_terms for doc_id in self._postings.get(term, ())})
        scores = {
            doc_id: self.scorer.score(
                query_terms, self._doc_terms[doc_id], self._doc_lengths[doc_id], self.avg_doc_length, self._idf
            )
            for doc_id in matched
        }
        # idf is 0 only in degenerate collections; keep the mapping sparse
        return {doc_id: score for doc_id, score in scores.items() if score > 0}

    def dense_scores(self, query_text: str) -> List[float]:
        """Scores aligned to candidate order, 0.0 for unmatched candidates."""
        sparse = self.score(query_text)
        return [sparse.get(i, 0.0) for i in range(len(self.candidates))]


def candidate_key(candidates: Sequence[str]) -> str:
    """Stable cache key of an ordered candidate sequence."""
    digest = hashlib.sha256()
    for candidate in candidates:
        encoded = candidate.encode("utf-8")
        # Length prefix keeps element boundaries unambiguous
        digest.update(len(encoded).to_bytes(8, "big"))
        digest.update(encoded)
    return digest.hexdigest()


class LexicalIndexCache:
    """
    Bounded LRU of BM25 indexes keyed by candidate sequence.

    An index is reused only when the requested sequence is element-wise and
    length-wise identical to the one it was built from; any difference
    (order included) builds a new index.

    Thread-safe: map access is serialized, builds of the same key are
    serialized by a per-key lock, builds of different keys run in parallel.
    """

    def __init__(self, max_entries: int = 128, scorer: Optional[BM25Scorer] = None):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.scorer = scorer or BM25Scorer()
        self.builds = 0
        self.hits = 0
        self._entries: "OrderedDict[str, BM25Index]" = OrderedDict()
        self._key_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _lookup(self, key: str, candidates: Tuple[str, ...]) -> Optional[BM25Index]:
        # Caller holds self._lock
        index = self._entries.get(key)
        if index is None:
            return None
        if index.candidates != candidates:
            raise IndexCacheError(
                f"Cached BM25 index {key[:12]} was built for {len(index.candidates)} other candidates"
            )
        self._entries.move_to_end(key)
        self.hits += 1
        return index

    def get_or_build(self, candidates: Sequence[str]) -> BM25Index:
        """
        Return the cached index for `candidates`, building it if needed.

        Args:
            candidates: Ordered, deduplicated candidate names

        Returns:
            BM25Index whose `candidates` equal the requested sequence
        """
        requested = tuple(candidates)
        key = candidate_key(requested)

        with self._lock:
            index = self._lookup(key, requested)
            if index is not None:
                logger.debug(f"BM25 index cache hit ({len(requested)} candidates)")
                return index
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            # Another request may have built it while we waited
            with self._lock:
                index = self._lookup(key, requested)
                if index is not None:
                    return index

            index = BM25Index.build(requested, self.scorer)

            with self._lock:
                self._entries[key] = index
                self._entries.move_to_end(key)
                self.builds += 1
                while len(self._entries) > self.max_entries:
                    evicted_key, _ = self._entries.popitem(last=False)
                    logger.debug(f"Evicted BM25 index {evicted_key[:12]}")
                self._key_locks.pop(key, None)

        logger.debug(f"BM25 index rebuilt ({len(requested)} candidates, build #{self.builds})")
        return index

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()


_default_cache: Optional[LexicalIndexCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache(max_entries: int = 128) -> LexicalIndexCache:
    """Process-wide cache shared by rankers that were not given their own."""
    global _default_cache

    if _default_cache is not None:
        return _default_cache

    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = LexicalIndexCache(max_entries=max_entries)
    return _default_cache
