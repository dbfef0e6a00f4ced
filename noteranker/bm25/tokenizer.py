"""
Tokenizer for BM25 indexing and querying.

Tokenization pipeline:
1. Lowercase conversion (typographic apostrophes folded to ', accents stripped)
2. Extract words (Unicode letters and digits, inner hyphens/apostrophes kept)
   and clause boundaries (punctuation and line breaks)
3. Mark negation scope: words after a negation cue ("not", "never", "don't", ...)
   up to the next clause boundary are negated
4. Filter stopwords and pure numbers
5. Apply stemming ("invoices" → "invoic")
6. Prefix negated stems with "!" so "not urgent" never matches "urgent"

The same pipeline runs on indexed candidates and on the query, otherwise
terms would not line up.
"""

import re
import unicodedata
from typing import List

from .stemmer import stem

NEGATION_MARKER = '!'

# English stopwords (Lucene standard list, extended with pronouns and
# auxiliaries that carry no meaning in folder names)
STOPWORDS = frozenset([
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'but', 'by',
    'for', 'if', 'in', 'into', 'is', 'it',
    'no', 'not', 'of', 'on', 'or', 'such',
    'that', 'the', 'their', 'then', 'there', 'these',
    'they', 'this', 'to', 'was', 'will', 'with',
    'i', 'me', 'my', 'we', 'our', 'you', 'your', 'he', 'she', 'his', 'her',
    'its', 'them', 'from', 'have', 'has', 'had', 'do', 'does', 'did',
    'here', 'were', 'been', 'being', 'so', 'than', 'too', 'very', 'can',
    'just', 'about', 'what', 'which', 'who', 'when', 'where', 'how',
])

NEGATION_CUES = frozenset([
    'not', 'no', 'never', 'cannot', 'nor', 'without',
    'none', 'nothing', 'nobody', 'neither',
])

# Words that close a negation scope in addition to clause boundaries
SCOPE_BREAKERS = frozenset(['but', 'however', 'although'])

# Line breaks close a clause too: headings and list items rarely end in punctuation
_TOKEN_PATTERN = re.compile(r"[^\W_]+(?:[-'][^\W_]+)*|[.,;:!?\n]")
_NUMBER_PATTERN = re.compile(r'^[0-9-]+$')
_CLAUSE_BOUNDARIES = frozenset('.,;:!?\n')


def _is_negation_cue(word: str) -> bool:
    return word in NEGATION_CUES or word.endswith("n't")


def _fold(text: str) -> str:
    """Lowercase, unify apostrophes and strip accents ("Réunions" → "reunions")."""
    text = text.lower().replace('’', "'").replace('‘', "'")
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def tokenize(text: str) -> List[str]:
    """
    Tokenize text for BM25 scoring.

    Args:
        text: Raw text (candidate name or query document)

    Returns:
        List of stems; negated stems carry a leading "!"

    Examples:
        >>> tokenize("Here is my 2023 tax receipt")
        ['tax', 'receipt']

        >>> tokenize("Finance/Invoices")
        ['financ', 'invoic']

        >>> tokenize("This is not urgent, file it in projects")
        ['!urgent', 'file', 'project']

        >>> tokenize("No meetings today\\n- budget review")
        ['!meet', '!today', 'budget', 'review']

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    tokens = []
    negated = False
    for raw in _TOKEN_PATTERN.findall(_fold(text)):
        if raw in _CLAUSE_BOUNDARIES or raw in SCOPE_BREAKERS:
            negated = False
            continue

        if _is_negation_cue(raw):
            negated = True
            continue

        # Possessives: "acme's" → "acme"
        word = raw[:-2] if raw.endswith("'s") else raw

        if not word or word in STOPWORDS or _NUMBER_PATTERN.match(word):
            continue

        term = stem(word)
        tokens.append(f"{NEGATION_MARKER}{term}" if negated else term)

    return tokens
