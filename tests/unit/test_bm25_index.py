"""
Unit tests for the BM25 inverted index and its LRU cache.
"""

import math
import threading

import pytest

from noteranker.bm25.index import BM25Index, LexicalIndexCache, candidate_key, get_default_cache
from noteranker.bm25.scorer import BM25Scorer
from noteranker.errors import IndexCacheError

pytestmark = pytest.mark.unit

FOLDERS = ["Finance/Invoices", "Work/Meetings", "Personal/Recipes"]


class TestBM25Index:
    """Test index build and query scoring"""
    
    def test_build_records_candidates(self):
        index = BM25Index.build(FOLDERS)
        assert index.candidates == tuple(FOLDERS)
        assert len(index) == 3
        assert index.avg_doc_length == pytest.approx(2.0)
        assert index.vocabulary_size == 6
    
    def test_score_exact_value(self):
        """One match in a 3-document collection of equal lengths: score == idf"""
        index = BM25Index.build(FOLDERS)
        scores = index.score("invoice")
        assert scores == pytest.approx({0: math.log(1 + 2.5 / 1.5)})
    
    def test_unmatched_candidates_absent(self):
        index = BM25Index.build(FOLDERS)
        scores = index.score("Invoice #4521 from vendor ACME for Q3 services, due net-30")
        assert set(scores) == {0}
    
    def test_dense_scores_aligned(self):
        index = BM25Index.build(FOLDERS)
        dense = index.dense_scores("weekly meeting notes")
        assert len(dense) == 3
        assert dense[0] == 0.0
        assert dense[1] > 0
        assert dense[2] == 0.0
    
    def test_multiple_matches_rank_higher(self):
        index = BM25Index.build(["Taxes", "Taxes/Receipts", "Journal"])
        scores = index.score("tax receipt")
        assert scores[1] > scores[0]
        assert 2 not in scores
    
    def test_empty_candidates(self):
        index = BM25Index.build([])
        assert len(index) == 0
        assert index.score("anything at all") == {}
        assert index.dense_scores("anything") == []
    
    def test_empty_query(self):
        index = BM25Index.build(FOLDERS)
        assert index.score("") == {}
        assert index.score("   ") == {}
        assert index.score("the and of") == {}
    
    def test_negated_query_does_not_match_plain_candidate(self):
        index = BM25Index.build(["Urgent", "Archive"])
        assert index.score("this is not urgent") == {}
        assert 0 in index.score("this is urgent")
    
    def test_repeated_query_terms_count_again(self):
        index = BM25Index.build(FOLDERS)
        once = index.score("invoice")[0]
        twice = index.score("invoice, another invoice")[0]
        assert twice == pytest.approx(2 * once)

    def test_field_weight_applied(self):
        base = BM25Index.build(FOLDERS).score("invoice")[0]
        weighted = BM25Index.build(FOLDERS, BM25Scorer(field_weight=2.0)).score("invoice")[0]
        assert weighted == pytest.approx(2 * base)

    def test_candidate_without_tokens(self):
        """Names made only of stopwords/numbers are indexed but never match"""
        index = BM25Index.build(["2024", "Taxes"])
        assert index.dense_scores("taxes 2024") == [0.0, pytest.approx(index.score("taxes")[1])]


class TestCandidateKey:
    """Test cache key hashing"""
    
    def test_same_sequence_same_key(self):
        assert candidate_key(["a", "b"]) == candidate_key(("a", "b"))
    
    def test_order_matters(self):
        assert candidate_key(["a", "b"]) != candidate_key(["b", "a"])
    
    def test_boundaries_matter(self):
        assert candidate_key(["ab", "c"]) != candidate_key(["a", "bc"])

    def test_embedded_separator_bytes(self):
        assert candidate_key(["a\x00b"]) != candidate_key(["a", "b"])
        assert candidate_key(["a", ""]) != candidate_key(["a"])


class TestLexicalIndexCache:
    """Test memoization of BM25 indexes"""
    
    def test_same_candidates_no_rebuild(self):
        cache = LexicalIndexCache()
        first = cache.get_or_build(FOLDERS)
        second = cache.get_or_build(list(FOLDERS))
        assert first is second
        assert cache.builds == 1
        assert cache.hits == 1
    
    def test_different_candidates_rebuild(self):
        cache = LexicalIndexCache()
        cache.get_or_build(FOLDERS)
        index = cache.get_or_build(FOLDERS + ["Travel"])
        assert cache.builds == 2
        assert index.candidates == tuple(FOLDERS + ["Travel"])
    
    def test_reordered_candidates_rebuild(self):
        cache = LexicalIndexCache()
        cache.get_or_build(FOLDERS)
        cache.get_or_build(list(reversed(FOLDERS)))
        assert cache.builds == 2
    
    def test_alternating_sets_stay_cached(self):
        """Two tenants alternating do not thrash the cache"""
        cache = LexicalIndexCache(max_entries=4)
        for _ in range(3):
            cache.get_or_build(["A", "B"])
            cache.get_or_build(["C", "D"])
        assert cache.builds == 2
        assert len(cache) == 2
    
    def test_lru_eviction(self):
        cache = LexicalIndexCache(max_entries=2)
        cache.get_or_build(["A"])
        cache.get_or_build(["B"])
        cache.get_or_build(["A"])  # A becomes most recent
        cache.get_or_build(["C"])  # evicts B
        assert len(cache) == 2
        cache.get_or_build(["A"])
        assert cache.builds == 3
        cache.get_or_build(["B"])
        assert cache.builds == 4
    
    def test_mismatched_entry_raises(self):
        cache = LexicalIndexCache()
        cache.get_or_build(["A", "B"])
        key = candidate_key(("A", "B"))
        cache._entries[key] = BM25Index.build(["X"])
        with pytest.raises(IndexCacheError):
            cache.get_or_build(["A", "B"])
    
    def test_names_containing_nul_get_own_entry(self):
        cache = LexicalIndexCache()
        joined = cache.get_or_build(["a\x00b"])
        split = cache.get_or_build(["a", "b"])
        assert joined.candidates == ("a\x00b",)
        assert split.candidates == ("a", "b")
        assert cache.builds == 2

    def test_concurrent_requests_build_once(self):
        cache = LexicalIndexCache()
        results = []
        barrier = threading.Barrier(8)
        
        def worker():
            barrier.wait()
            results.append(cache.get_or_build(FOLDERS))
        
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        
        assert cache.builds == 1
        assert all(r is results[0] for r in results)
    
    def test_invalid_size(self):
        with pytest.raises(ValueError):
            LexicalIndexCache(max_entries=0)
    
    def test_clear(self):
        cache = LexicalIndexCache()
        cache.get_or_build(FOLDERS)
        cache.clear()
        assert len(cache) == 0
        cache.get_or_build(FOLDERS)
        assert cache.builds == 2
    
    def test_default_cache_is_shared(self):
        assert get_default_cache() is get_default_cache()
