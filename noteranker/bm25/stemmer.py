"""
English Snowball stemmer (Porter2, via NLTK).

Folder and tag names are short and heavily repeated between requests, so
stems are memoized.

Examples:
- "invoices" → "invoic"
- "receipts" → "receipt"
- "meetings" → "meet"
- "recipes" → "recip"
"""

from functools import lru_cache

from nltk.stem.snowball import SnowballStemmer

_stemmer = SnowballStemmer('english')


@lru_cache(maxsize=50_000)
def stem(word: str) -> str:
    """
    Reduce a lowercase word to its Snowball stem.
    
    Hyphenated compounds ("follow-up") are stemmed part by part so that
    "follow-ups" and "follow-up" share a stem.
    
    Examples:
        >>> stem("taxes")
        'tax'
        >>> stem("follow-ups")
        'follow-up'
    """
    if '-' in word:
        return '-'.join(_stemmer.stem(part) for part in word.split('-'))
    return _stemmer.stem(word)
