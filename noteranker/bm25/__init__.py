"""
BM25 (Best Match 25) lexical ranking of candidate names.

Components:
- tokenizer: word extraction, negation scope, stopwords, stemming
- stemmer: Snowball (Porter2) stems via NLTK
- scorer: Okapi BM25 term weighting (k1=1.5, b=0.75)
- index: inverted index over a candidate set and its LRU cache
"""

from .tokenizer import tokenize, NEGATION_MARKER
from .stemmer import stem
from .scorer import BM25Scorer
from .index import BM25Index, LexicalIndexCache, candidate_key, get_default_cache

__all__ = [
    "tokenize",
    "NEGATION_MARKER",
    "stem",
    "BM25Scorer",
    "BM25Index",
    "LexicalIndexCache",
    "candidate_key",
    "get_default_cache",
]
