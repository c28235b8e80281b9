"""
Wishlist matching core: keyword extraction, lexical and category signals,
semantic verification and the tiered decision engine.
"""

from app.services.matching.category_matcher import category_matches
from app.services.matching.keyword_extractor import extract_keywords
from app.services.matching.lexical_matcher import find_keyword_matches
from app.services.matching.semantic_verifier import (
    DisabledSemanticVerifier,
    LLMSemanticVerifier,
    SemanticVerifier,
    VerificationResult,
    get_semantic_verifier,
)
from app.services.matching.wishlist_matcher import MatchSignals, WishlistMatcher

__all__ = [
    "DisabledSemanticVerifier",
    "LLMSemanticVerifier",
    "MatchSignals",
    "SemanticVerifier",
    "VerificationResult",
    "WishlistMatcher",
    "category_matches",
    "extract_keywords",
    "find_keyword_matches",
    "get_semantic_verifier",
]
