"""
Unit tests for keyword extraction, lexical and category matching
"""

import pytest

from app.core.vocabulary import DEFAULT_STOPWORDS, MatchingVocabulary
from app.services.matching import category_matches, extract_keywords, find_keyword_matches


class TestKeywordExtractor:
    """Test class for keyword extraction"""

    def test_drops_stopwords_and_short_tokens(self):
        assert extract_keywords("a Set of 4 Wine Glasses") == ["wine", "glasses"]

    def test_strips_punctuation(self):
        assert extract_keywords("Antique lamp! (brass), working.") == ["antique", "lamp", "brass", "working"]

    def test_is_deterministic_and_idempotent(self):
        text = "Vintage wine glass set, crystal, WINE decanter"
        first = extract_keywords(text)

        assert extract_keywords(text) == first
        assert extract_keywords(" ".join(first)) == first

    def test_duplicates_collapse(self):
        assert extract_keywords("lamp Lamp LAMP shade") == ["lamp", "shade"]

    @pytest.mark.parametrize("stopword", sorted(DEFAULT_STOPWORDS))
    def test_stopwords_never_extracted(self, stopword):
        assert stopword not in extract_keywords(f"{stopword} bicycle {stopword.upper()}")

    def test_non_ascii_letters_are_stripped(self):
        assert extract_keywords("café table") == ["caf", "table"]

    def test_custom_stopwords(self):
        vocabulary = MatchingVocabulary().with_stopwords(["vintage"])

        assert extract_keywords("vintage record player", vocabulary.stopwords) == ["record", "player"]

    def test_empty_text(self):
        assert extract_keywords("") == []
        assert extract_keywords("   \n ") == []


class TestLexicalMatcher:
    """Test class for keyword lookup in listing text"""

    def test_returns_contained_keywords_in_keyword_order(self):
        matches = find_keyword_matches(["vintage", "glass", "wine"], "wine and glass collection")

        assert matches == ["glass", "wine"]

    def test_substring_containment(self):
        assert find_keyword_matches(["lamp"], "two lampshades and a rug") == ["lamp"]

    def test_short_keywords_ignored(self):
        assert find_keyword_matches(["tv", "radio"], "tv and radio") == ["radio"]

    def test_no_overlap(self):
        assert find_keyword_matches(["antique", "lamp"], "kitchen cookware pots") == []


class TestCategoryMatcher:
    """Test class for category intersection"""

    def test_category_on_listing(self):
        assert category_matches("books", ["toys", "books"]) is True

    def test_category_missing_from_listing(self):
        assert category_matches("books", ["toys"]) is False
        assert category_matches("books", []) is False

    def test_no_category(self):
        assert category_matches(None, ["books"]) is False
        assert category_matches("", ["books"]) is False

    def test_membership_only(self):
        """Any tag shared by item and listing counts, the closed set is checked on write"""
        assert category_matches("antiques", ["antiques"]) is True
        assert category_matches("Books", ["books"]) is False

    def test_vocabulary_is_frozen(self):
        vocabulary = MatchingVocabulary()

        with pytest.raises(Exception):
            vocabulary.stopwords = frozenset()
        assert "kitchen" in vocabulary.categories
