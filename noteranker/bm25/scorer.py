"""
Okapi BM25 scorer.

BM25 (Best Match 25) is a probabilistic ranking function for lexical retrieval.
Candidates (folder or tag names) form a small in-memory collection, so the full
formula with IDF is cheap to compute.

Formula:
    score(q, d) = Σ idf(t) × w × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × dl/avgdl))

    idf(t) = ln(1 + (N - n(t) + 0.5) / (n(t) + 0.5))

Where:
    tf = frequency of term t in document d
    n(t) = number of documents containing t
    N = number of documents
    w = field weight (single "name" field)
    k1 = term frequency saturation parameter (1.5)
    b = length normalization parameter (0.75)
    dl = document length in tokens, avgdl = average document length

The "1 +" inside the logarithm keeps idf positive for terms present in more
than half of the collection, so scores are never negative.
"""

import math
from typing import Dict, Iterable


class BM25Scorer:
    """
    Okapi BM25 term weighting.

    Holds only the tuning constants; collection statistics are passed in by
    the index.
    """

    def __init__(self, k1: float = 1.5, b: float = 0.75, field_weight: float = 1.0):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
                Higher = repeated terms keep adding score longer
                Default: 1.5

            b: Length normalization parameter
                0.0 = no length penalty, 1.0 = full penalty
                Default: 0.75

            field_weight: Multiplier of the candidate-name field
                Default: 1.0
        """
        if k1 < 0:
            raise ValueError(f"k1 must be >= 0, got {k1}")
        if not 0.0 <= b <= 1.0:
            raise ValueError(f"b must be within [0, 1], got {b}")
        self.k1 = k1
        self.b = b
        self.field_weight = field_weight

    @staticmethod
    def idf(doc_count: int, doc_freq: int) -> float:
        """Inverse document frequency (non-negative variant)."""
        if doc_count <= 0 or doc_freq <= 0:
            return 0.0
        return math.log(1.0 + (doc_count - doc_freq + 0.5) / (doc_freq + 0.5))

    def term_score(self, tf: int, doc_length: int, avg_doc_length: float) -> float:
        """Saturated, length-normalized term frequency (without idf)."""
        if tf <= 0:
            return 0.0
        length_ratio = doc_length / avg_doc_length if avg_doc_length > 0 else 1.0
        numerator = tf * (self.k1 + 1)
        denominator = tf + self.k1 * (1 - self.b + self.b * length_ratio)
        return numerator / denominator

    def score(
        self,
        query_terms: Iterable[str],
        doc_term_frequencies: Dict[str, int],
        doc_length: int,
        avg_doc_length: float,
        idf: Dict[str, float],
    ) -> float:
        """
        Compute the BM25 score of one document.

        Args:
            query_terms: Tokenized query; every occurrence contributes
            doc_term_frequencies: Term frequency map {term: count} of the document
            doc_length: Number of tokens in the document
            avg_doc_length: Average document length of the collection
            idf: Precomputed idf per term of the collection

        Returns:
            BM25 score (>= 0, higher = more relevant)

        Example:
            >>> scorer = BM25Scorer()
            >>> scorer.score(["invoic"], {"financ": 1, "invoic": 1}, 2, 1.5, {"invoic": 0.98})
            0.852...
        """
        if not doc_term_frequencies:
            return 0.0

        total = 0.0
        for term in query_terms:
            tf = doc_term_frequencies.get(term, 0)
            if tf == 0:
                continue
            total += idf.get(term, 0.0) * self.field_weight * self.term_score(tf, doc_length, avg_doc_length)
        return total
