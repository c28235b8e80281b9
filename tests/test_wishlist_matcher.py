"""
Tests for the tiered wishlist decision engine (verifier stubbed)
"""

import pytest

from app.models.status_enums import MatchConfidence
from app.services.matching import WishlistMatcher


class TestStrongKeywordRule:
    """Rule 1: two keyword hits or one long keyword"""

    @pytest.mark.asyncio
    async def test_two_keywords_give_high_confidence(self, make_item, make_sale, verifier_yes):
        matcher = WishlistMatcher(verifier=verifier_yes)
        item = make_item("vintage wine glass set")
        sale = make_sale("Wine glasses", "Six glasses and a wine rack")

        decision = await matcher.decide(item, sale)

        assert decision.is_match is True
        assert decision.confidence == MatchConfidence.HIGH
        assert decision.reason == "Keyword match: wine, glass"
        assert verifier_yes.calls == []

    @pytest.mark.asyncio
    async def test_single_long_keyword_gives_high_confidence(self, make_item, make_sale, verifier_yes):
        matcher = WishlistMatcher(verifier=verifier_yes)
        item = make_item("electronics")
        sale = make_sale("Moving out", "Box of old electronics")

        decision = await matcher.decide(item, sale)

        assert decision.confidence == MatchConfidence.HIGH
        assert decision.reason == "Keyword match: electronics"
        assert verifier_yes.calls == []

    @pytest.mark.asyncio
    async def test_strong_keywords_win_over_category(self, make_item, make_sale, verifier_yes):
        matcher = WishlistMatcher(verifier=verifier_yes)
        item = make_item("cast iron pan", category="kitchen")
        sale = make_sale("Cast iron pans", categories=["kitchen"])

        decision = await matcher.decide(item, sale)

        assert decision.confidence == MatchConfidence.HIGH
        assert verifier_yes.calls == []


class TestCategoryRule:
    """Rule 2: category hit plus one short keyword"""

    @pytest.mark.asyncio
    async def test_verifier_confirms(self, make_item, make_sale, verifier_yes):
        matcher = WishlistMatcher(verifier=verifier_yes)
        item = make_item("cast iron pan", category="kitchen")
        sale = make_sale("Pots and pans", categories=["kitchen"])

        decision = await matcher.decide(item, sale)

        assert decision.is_match is True
        assert decision.confidence == MatchConfidence.VERIFIED
        assert decision.reason == "AI verified: Pans are listed"
        assert len(verifier_yes.calls) == 1

    @pytest.mark.asyncio
    async def test_verifier_declines_falls_back_to_medium(self, make_item, make_sale, verifier_no):
        matcher = WishlistMatcher(verifier=verifier_no)
        item = make_item("cast iron pan", category="kitchen")
        sale = make_sale("Pots and pans", categories=["kitchen"])

        decision = await matcher.decide(item, sale)

        assert decision.is_match is True
        assert decision.confidence == MatchConfidence.MEDIUM
        assert decision.reason.startswith("Category match:")
        assert decision.reason == "Category match: kitchen, partial keyword: pan"
        assert len(verifier_no.calls) == 1

    @pytest.mark.asyncio
    async def test_verifier_unavailable_falls_back_to_medium(self, make_item, make_sale, verifier_down):
        matcher = WishlistMatcher(verifier=verifier_down)
        item = make_item("cast iron pan", category="kitchen")
        sale = make_sale("Pots and pans", categories=["kitchen"])

        decision = await matcher.decide(item, sale)

        assert decision.confidence == MatchConfidence.MEDIUM
        assert decision.reason == "Category match: kitchen, partial keyword: pan"

    @pytest.mark.asyncio
    async def test_unexpected_verifier_error_falls_back_to_medium(self, make_item, make_sale, stub_verifier_cls):
        verifier = stub_verifier_cls(error=RuntimeError("socket closed"))
        matcher = WishlistMatcher(verifier=verifier)
        item = make_item("cast iron pan", category="kitchen")
        sale = make_sale("Pots and pans", categories=["kitchen"])

        decision = await matcher.decide(item, sale)

        assert decision.confidence == MatchConfidence.MEDIUM

    @pytest.mark.asyncio
    async def test_category_without_keywords_is_no_match(self, make_item, make_sale, verifier_yes):
        matcher = WishlistMatcher(verifier=verifier_yes)
        item = make_item("stand mixer", category="kitchen")
        sale = make_sale("Plates and cups", categories=["kitchen"])

        decision = await matcher.decide(item, sale)

        assert decision.is_match is False
        assert verifier_yes.calls == []


class TestSingleKeywordRule:
    """Rule 3: one short keyword without category support"""

    @pytest.mark.asyncio
    async def test_verifier_confirms(self, make_item, make_sale, verifier_yes):
        matcher = WishlistMatcher(verifier=verifier_yes)
        item = make_item("desk lamp")
        sale = make_sale("Lamps and rugs")

        decision = await matcher.decide(item, sale)

        assert decision.is_match is True
        assert decision.confidence == MatchConfidence.VERIFIED
        assert decision.reason.startswith("AI verified: ")

    @pytest.mark.asyncio
    async def test_verifier_declines(self, make_item, make_sale, verifier_no):
        matcher = WishlistMatcher(verifier=verifier_no)
        item = make_item("desk lamp")
        sale = make_sale("Lamps and rugs")

        decision = await matcher.decide(item, sale)

        assert decision.is_match is False
        assert decision.reason == "No match"
        assert len(verifier_no.calls) == 1

    @pytest.mark.asyncio
    async def test_verifier_unavailable(self, make_item, make_sale, verifier_down):
        matcher = WishlistMatcher(verifier=verifier_down)
        item = make_item("desk lamp")
        sale = make_sale("Lamps and rugs")

        decision = await matcher.decide(item, sale)

        assert decision.is_match is False
        assert decision.confidence == MatchConfidence.MEDIUM


class TestNoMatch:
    """Rule 4: nothing in common"""

    @pytest.mark.asyncio
    async def test_unrelated_listing(self, make_item, make_sale, verifier_yes):
        matcher = WishlistMatcher(verifier=verifier_yes)
        item = make_item("antique lamp")
        sale = make_sale("Kitchen cookware", "Pots, skillets and utensils", categories=["kitchen"])

        decision = await matcher.decide(item, sale)

        assert decision.is_match is False
        assert decision.confidence == MatchConfidence.MEDIUM
        assert decision.reason == "No match"
        assert verifier_yes.calls == []

    def test_collect_signals(self, make_item, make_sale, verifier_no):
        matcher = WishlistMatcher(verifier=verifier_no)
        item = make_item("cast iron pan", "heavy, for camping", category="kitchen")
        sale = make_sale("Pots and pans", categories=["kitchen", "sports"])

        signals = matcher.collect_signals(item, sale)

        assert signals.keywords == ["cast", "iron", "pan", "heavy", "camping"]
        assert signals.keyword_matches == ["pan"]
        assert signals.category_hit is True
