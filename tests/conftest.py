"""
Pytest configuration and fixtures for testing
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from app.exceptions import MatchPersistenceError, VerifierUnavailableError
from app.models.garage_sale import GarageSale
from app.models.wishlist import WishlistItem
from app.models.wishlist_match import WishlistMatch
from app.services.matching.semantic_verifier import SemanticVerifier, VerificationResult


class StubVerifier(SemanticVerifier):
    """Verifier returning a canned answer or raising a canned error"""

    def __init__(self, result: Optional[VerificationResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[Tuple[str, str]] = []

    async def verify(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> VerificationResult:
        self.calls.append((wishlist_item.id, garage_sale.id))
        if self.error is not None:
            raise self.error
        return self.result


class InMemoryMatchService:
    """Stand-in for WishlistMatchService keeping matches in a dict"""

    def __init__(self, failing_item_ids: Optional[set] = None):
        self.matches: Dict[str, WishlistMatch] = {}
        self.failing_item_ids = failing_item_ids or set()
        self.insert_count = 0
        self.claims: Dict[str, datetime] = {}

    async def get_existing_match(self, wishlist_item_id: str, garage_sale_id: str) -> Optional[WishlistMatch]:
        await asyncio.sleep(0)
        for match in self.matches.values():
            if match.wishlist_item_id == wishlist_item_id and match.garage_sale_id == garage_sale_id:
                return match
        return None

    async def create_match_if_absent(self, match: WishlistMatch) -> Tuple[WishlistMatch, bool]:
        if match.wishlist_item_id in self.failing_item_ids:
            raise MatchPersistenceError(
                "write failed", wishlist_item_id=match.wishlist_item_id, garage_sale_id=match.garage_sale_id
            )
        for existing in self.matches.values():
            if existing.wishlist_item_id == match.wishlist_item_id and existing.garage_sale_id == match.garage_sale_id:
                return existing, False
        self.insert_count += 1
        stored = match.model_copy(update={"id": f"match_{self.insert_count}"})
        self.matches[stored.id] = stored
        return stored, True

    async def get_match(self, match_id: str) -> Optional[WishlistMatch]:
        return self.matches.get(match_id)

    async def mark_notified(self, match_id: str, sent_at: Optional[datetime] = None) -> bool:
        match = self.matches.get(match_id)
        if match is None or match.notification_sent:
            return False
        self.matches[match_id] = match.model_copy(
            update={"notification_sent": True, "notification_sent_at": sent_at or datetime.now(timezone.utc)}
        )
        self.claims.pop(match_id, None)
        return True

    async def claim_for_dispatch(self, match_id: str, now: Optional[datetime] = None) -> bool:
        match = self.matches.get(match_id)
        if match is None or match.notification_sent or match_id in self.claims:
            return False
        self.claims[match_id] = now or datetime.now(timezone.utc)
        return True

    async def release_dispatch_claim(self, match_id: str) -> None:
        self.claims.pop(match_id, None)

    async def list_unsent_matches(self, limit: int = 100) -> List[WishlistMatch]:
        return [m for m in self.matches.values() if not m.notification_sent][:limit]


@pytest.fixture
def make_item():
    """Factory for wishlist items"""

    def _make(item_name: str, description: Optional[str] = None, category: Optional[str] = None, **kwargs):
        kwargs.setdefault("id", "item_1")
        kwargs.setdefault("user_id", "user_1")
        return WishlistItem(item_name=item_name, description=description, category=category, **kwargs)

    return _make


@pytest.fixture
def make_sale():
    """Factory for garage sales"""

    def _make(title: str, description: Optional[str] = None, categories: Optional[List[str]] = None, **kwargs):
        kwargs.setdefault("id", "sale_1")
        return GarageSale(title=title, description=description, categories=categories or [], **kwargs)

    return _make


@pytest.fixture
def verifier_yes():
    return StubVerifier(result=VerificationResult(is_match=True, reason="Pans are listed"))


@pytest.fixture
def verifier_no():
    return StubVerifier(result=VerificationResult(is_match=False, reason="Different item"))


@pytest.fixture
def verifier_down():
    return StubVerifier(error=VerifierUnavailableError("timed out", provider="openai"))


@pytest.fixture
def match_store():
    return InMemoryMatchService()


@pytest.fixture
def stub_verifier_cls():
    return StubVerifier
