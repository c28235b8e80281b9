"""
Tiered decision engine for wishlist matching.

Rules are evaluated top-down and the first rule that returns a decision
wins:

1. strong keyword overlap          -> high, no verifier call
2. category hit + partial keyword  -> verified, or medium on any verifier miss
3. exactly one keyword             -> verified, or no match
4. otherwise                       -> no match
"""

import logging
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel

from app.core.vocabulary import MatchingVocabulary, default_vocabulary
from app.exceptions import VerifierUnavailableError
from app.models.garage_sale import GarageSale
from app.models.status_enums import MatchConfidence
from app.models.wishlist import WishlistItem
from app.models.wishlist_match import MatchDecision
from app.services.matching.category_matcher import category_matches
from app.services.matching.keyword_extractor import extract_keywords
from app.services.matching.lexical_matcher import find_keyword_matches
from app.services.matching.semantic_verifier import SemanticVerifier, VerificationResult, get_semantic_verifier

logger = logging.getLogger(__name__)

STRONG_MATCH_MIN_KEYWORDS = 2
LONG_KEYWORD_MIN_LENGTH = 7


class MatchSignals(BaseModel):
    """Deterministic signals computed once per pair"""
    keywords: List[str]
    keyword_matches: List[str]
    category_hit: bool


MatchRule = Callable[[WishlistItem, GarageSale, MatchSignals], Awaitable[Optional[MatchDecision]]]


class WishlistMatcher:
    """Decide whether a garage sale is relevant to a wishlist item"""

    def __init__(
        self,
        verifier: Optional[SemanticVerifier] = None,
        vocabulary: MatchingVocabulary = default_vocabulary,
    ) -> None:
        self.verifier = verifier or get_semantic_verifier()
        self.vocabulary = vocabulary
        self.rules: List[MatchRule] = [
            self._strong_keyword_rule,
            self._category_rule,
            self._single_keyword_rule,
        ]

    def collect_signals(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> MatchSignals:
        keywords = extract_keywords(wishlist_item.searchable_text, self.vocabulary.stopwords)
        return MatchSignals(
            keywords=keywords,
            keyword_matches=find_keyword_matches(keywords, garage_sale.searchable_text),
            category_hit=category_matches(wishlist_item.category, garage_sale.categories),
        )

    async def decide(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> MatchDecision:
        signals = self.collect_signals(wishlist_item, garage_sale)

        for rule in self.rules:
            decision = await rule(wishlist_item, garage_sale, signals)
            if decision is not None:
                logger.info(
                    "Wishlist item %s vs sale %s: %s (%s) via %s",
                    wishlist_item.id,
                    garage_sale.id,
                    decision.confidence.value,
                    decision.reason,
                    rule.__name__,
                )
                return decision

        return MatchDecision.no_match()

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    async def _strong_keyword_rule(
        self, wishlist_item: WishlistItem, garage_sale: GarageSale, signals: MatchSignals
    ) -> Optional[MatchDecision]:
        matches = signals.keyword_matches
        if len(matches) < STRONG_MATCH_MIN_KEYWORDS and not any(
            len(keyword) >= LONG_KEYWORD_MIN_LENGTH for keyword in matches
        ):
            return None

        return MatchDecision(
            is_match=True,
            confidence=MatchConfidence.HIGH,
            reason=f"Keyword match: {', '.join(matches)}",
        )

    async def _category_rule(
        self, wishlist_item: WishlistItem, garage_sale: GarageSale, signals: MatchSignals
    ) -> Optional[MatchDecision]:
        if not signals.category_hit or not signals.keyword_matches:
            return None

        verification = await self._verify(wishlist_item, garage_sale)
        if verification is not None and verification.is_match:
            return self._verified(verification)

        partial = f", partial keyword: {signals.keyword_matches[0]}" if signals.keyword_matches else ""
        return MatchDecision(
            is_match=True,
            confidence=MatchConfidence.MEDIUM,
            reason=f"Category match: {wishlist_item.category}{partial}",
        )

    async def _single_keyword_rule(
        self, wishlist_item: WishlistItem, garage_sale: GarageSale, signals: MatchSignals
    ) -> Optional[MatchDecision]:
        if len(signals.keyword_matches) != 1:
            return None

        verification = await self._verify(wishlist_item, garage_sale)
        if verification is not None and verification.is_match:
            return self._verified(verification)
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _verified(verification: VerificationResult) -> MatchDecision:
        return MatchDecision(
            is_match=True,
            confidence=MatchConfidence.VERIFIED,
            reason=f"AI verified: {verification.reason}",
        )

    async def _verify(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> Optional[VerificationResult]:
        """Ask the verifier once; any failure means no extra signal"""
        try:
            return await self.verifier.verify(wishlist_item, garage_sale)
        except VerifierUnavailableError as e:
            logger.warning(
                "Semantic verification unavailable for item %s, sale %s (provider: %s): %s",
                wishlist_item.id,
                garage_sale.id,
                e.provider,
                e.message,
            )
        except Exception as e:
            logger.error(
                "Unexpected verifier error for item %s, sale %s: %s",
                wishlist_item.id,
                garage_sale.id,
                e,
                exc_info=True,
            )
        return None
