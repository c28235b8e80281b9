"""
Immutable word lists used by the wishlist matcher.

The vocabulary is built once at import time from the defaults below plus
any EXTRA_STOPWORDS from settings, and is handed explicitly to the
keyword extractor. Categories are checked against the closed set
when wishlist items are written.
"""

from typing import FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict

from app.core.config import settings
from app.models.garage_sale import SaleCategory

DEFAULT_STOPWORDS: FrozenSet[str] = frozenset(
    {
        # articles, conjunctions, prepositions
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "is", "are", "was", "were", "be", "been",
        # words that show up in every garage sale post
        "set", "item", "items", "sale", "garage", "various", "misc", "etc",
    }
)


class MatchingVocabulary(BaseModel):
    """Stopwords and the closed category set, frozen after construction"""

    model_config = ConfigDict(frozen=True)

    stopwords: FrozenSet[str] = DEFAULT_STOPWORDS
    categories: FrozenSet[str] = frozenset(category.value for category in SaleCategory)

    def with_stopwords(self, extra: Iterable[str]) -> "MatchingVocabulary":
        """Return a copy with additional stopwords"""
        return self.model_copy(update={"stopwords": self.stopwords | frozenset(extra)})

    def is_known_category(self, category: str) -> bool:
        return category in self.categories


default_vocabulary = MatchingVocabulary().with_stopwords(settings.extra_stopwords_list)
