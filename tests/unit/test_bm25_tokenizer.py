"""
Unit tests for the BM25 tokenizer (stopwords, numbers, stemming, negation).
"""

import pytest

from noteranker.bm25.stemmer import stem
from noteranker.bm25.tokenizer import NEGATION_MARKER, STOPWORDS, tokenize
from noteranker.text import build_query_text

pytestmark = pytest.mark.unit


class TestTokenize:
    """Test tokenization pipeline"""
    
    def test_empty_and_whitespace(self):
        assert tokenize("") == []
        assert tokenize("   \n\t ") == []
        assert tokenize(None) == []
    
    def test_lowercase_and_stem(self):
        assert tokenize("Invoices") == ["invoic"]
        assert tokenize("INVOICE") == ["invoic"]
    
    def test_stopwords_removed(self):
        tokens = tokenize("Here is my 2023 tax receipt for office supplies")
        assert "here" not in tokens
        assert "my" not in tokens
        assert "for" not in tokens
        assert tokens[:2] == ["tax", "receipt"]
    
    def test_pure_numbers_removed(self):
        """Numbers are dropped, alphanumeric terms are kept"""
        tokens = tokenize("Invoice 4521 for Q3")
        assert "4521" not in tokens
        assert "q3" in tokens
    
    def test_folder_path_split_into_words(self):
        assert tokenize("Work/Meetings") == ["work", "meet"]
        assert tokenize("Finance/Invoices") == ["financ", "invoic"]
    
    def test_hyphenated_words_kept_together(self):
        assert tokenize("follow-ups") == ["follow-up"]
    
    def test_plural_and_singular_share_stem(self):
        assert tokenize("receipts") == tokenize("receipt")
        assert tokenize("taxes") == tokenize("tax")
    
    def test_possessive_dropped(self):
        assert tokenize("ACME's invoice") == tokenize("acme invoice")


class TestNegation:
    """Test negation scope marking"""
    
    def test_negated_word_marked(self):
        assert tokenize("not urgent") == [f"{NEGATION_MARKER}urgent"]
    
    def test_negation_cue_not_emitted(self):
        tokens = tokenize("never reviewed")
        assert tokens == ["!review"]
    
    def test_scope_ends_at_punctuation(self):
        assert tokenize("This is not urgent, file it in projects") == ["!urgent", "file", "project"]
    
    def test_scope_ends_at_contrast_word(self):
        assert tokenize("never reviewed but approved") == ["!review", "approv"]
    
    def test_contraction_is_negation_cue(self):
        assert tokenize("I don't like meetings") == ["!like", "!meet"]
    
    def test_typographic_apostrophe(self):
        assert tokenize("I don’t like meetings") == tokenize("I don't like meetings")
    
    def test_negated_and_plain_terms_differ(self):
        assert tokenize("urgent") != tokenize("not urgent")
    
    def test_scope_covers_multiple_words(self):
        assert tokenize("without receipts or invoices") == ["!receipt", "!invoic"]

    def test_scope_ends_at_line_break(self):
        """A heading without punctuation does not negate the list below it"""
        assert tokenize("No meetings today\n- budget review") == ["!meet", "!today", "budget", "review"]

    def test_file_name_line_does_not_negate_content(self):
        query = build_query_text("Invoice from ACME", "Not paid.md")
        assert tokenize(query) == ["!paid", "invoic", "acm"]


class TestUnicode:
    """Test accented and non-Latin words"""

    def test_accented_word_kept_whole(self):
        assert tokenize("Réunions") == ["reunion"]

    def test_accents_folded(self):
        assert tokenize("Café") == tokenize("cafe")
        assert tokenize("Projets/Été") == tokenize("projets ete")

    def test_non_latin_word_is_one_token(self):
        assert len(tokenize("Заметки")) == 1

    def test_underscore_splits_words(self):
        assert tokenize("tax_receipts") == ["tax", "receipt"]


class TestStemmer:
    """Test Snowball stemming"""
    
    def test_known_stems(self):
        assert stem("taxes") == "tax"
        assert stem("receipts") == "receipt"
        assert stem("invoices") == "invoic"
        assert stem("running") == "run"
    
    def test_hyphenated_parts_stemmed(self):
        assert stem("follow-ups") == "follow-up"
    
    def test_stopword_list_is_lowercase(self):
        assert all(word == word.lower() for word in STOPWORDS)
