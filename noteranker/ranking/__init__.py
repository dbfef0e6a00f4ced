"""
Hybrid ranking: BM25 + embedding similarity, normalized and fused.

Usage:
    from noteranker.embeddings import get_embedder
    from noteranker.ranking import HybridRanker
    
    ranker = HybridRanker(get_embedder())
    results = await ranker.rank(note_text, ["Finance/Invoices", "Work/Meetings"], top_k=2)
    for name, score in results:
        ...
"""

from .fusion import RankedCandidate, normalize_scores, rank_top_k, weighted_fusion
from .ranker import HybridRanker, sanitize_candidates
from .similarity import cosine_similarities, cosine_similarity

__all__ = [
    'HybridRanker',
    'RankedCandidate',
    'sanitize_candidates',
    'normalize_scores',
    'weighted_fusion',
    'rank_top_k',
    'cosine_similarity',
    'cosine_similarities',
]
