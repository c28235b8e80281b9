"""
Wishlist matching pipeline for newly published garage sales.

For every active wishlist item the pipeline checks for an existing match,
runs the decision engine only when there is none, stores positive verdicts
once and notifies the owner of newly created matches.
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import BaseModel

from app.core.config import settings
from app.exceptions import MatchPersistenceError
from app.models.garage_sale import GarageSale
from app.models.status_enums import DispatchOutcome
from app.models.wishlist import WishlistItem
from app.models.wishlist_match import MatchDecision, WishlistMatch
from app.services.matching import WishlistMatcher
from app.services.wishlist_match_service import WishlistMatchService
from app.services.wishlist_notification_service import WishlistNotificationService
from app.services.wishlist_service import WishlistService

logger = logging.getLogger(__name__)


class PairOutcome(BaseModel):
    """What happened to one (wishlist item, garage sale) pair"""
    wishlist_item_id: Optional[str] = None
    decision: Optional[MatchDecision] = None  # None when the decision engine was not run
    match: Optional[WishlistMatch] = None
    created: bool = False
    notification: Optional[DispatchOutcome] = None
    skipped_reason: Optional[str] = None


class PairFailure(BaseModel):
    wishlist_item_id: Optional[str] = None
    error: str


class MatchingReport(BaseModel):
    """Summary of matching one garage sale against wishlist items"""
    garage_sale_id: Optional[str] = None
    evaluated: int = 0
    matched: int = 0
    created: int = 0
    notified: int = 0
    failures: List[PairFailure] = []


class WishlistPipelineService:
    """Runs wishlist items against a garage sale"""

    def __init__(
        self,
        matcher: Optional[WishlistMatcher] = None,
        wishlist_service: Optional[WishlistService] = None,
        match_service: Optional[WishlistMatchService] = None,
        notification_dispatcher: Optional[WishlistNotificationService] = None,
        concurrency: Optional[int] = None,
    ) -> None:
        self.matcher = matcher or WishlistMatcher()
        self.wishlist_service = wishlist_service or WishlistService()
        self.match_service = match_service or WishlistMatchService()
        self.notification_dispatcher = notification_dispatcher or WishlistNotificationService(
            match_service=self.match_service, wishlist_service=self.wishlist_service
        )
        self.concurrency = concurrency or settings.MATCHING_CONCURRENCY

    async def process_pair(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> PairOutcome:
        """Match one wishlist item against one garage sale.

        Re-running a pair that already has a match is a no-op. Raises
        MatchPersistenceError when the match cannot be looked up or stored.
        """
        outcome = PairOutcome(wishlist_item_id=wishlist_item.id)

        if not wishlist_item.is_active:
            outcome.skipped_reason = "inactive"
            return outcome

        existing_match = await self.match_service.get_existing_match(wishlist_item.id, garage_sale.id)
        if existing_match is not None:
            outcome.match = existing_match
            outcome.skipped_reason = "already_matched"
            return outcome

        decision = await self.matcher.decide(wishlist_item, garage_sale)
        outcome.decision = decision
        if not decision.is_match:
            return outcome

        match, created = await self.match_service.create_match_if_absent(
            WishlistMatch(
                user_id=wishlist_item.user_id,
                wishlist_item_id=wishlist_item.id,
                garage_sale_id=garage_sale.id,
                match_confidence=decision.confidence,
                match_reason=decision.reason,
            )
        )
        outcome.match = match
        outcome.created = created

        if created and not match.notification_sent:
            outcome.notification = await self.notification_dispatcher.dispatch(
                match.id, wishlist_item=wishlist_item, garage_sale=garage_sale
            )

        return outcome

    async def process_garage_sale(
        self,
        garage_sale: GarageSale,
        user_id: Optional[str] = None,
        raise_on_failure: bool = False,
    ) -> MatchingReport:
        """Match a garage sale against all active wishlist items (optionally of one user)"""
        wishlist_items = await self.wishlist_service.list_active_wishlist_items(user_id)
        report = MatchingReport(garage_sale_id=garage_sale.id, evaluated=len(wishlist_items))

        logger.info("Matching garage sale %s against %s wishlist items", garage_sale.id, len(wishlist_items))

        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(wishlist_item: WishlistItem) -> PairOutcome:
            async with semaphore:
                return await self.process_pair(wishlist_item, garage_sale)

        results = await asyncio.gather(*(run(item) for item in wishlist_items), return_exceptions=True)

        for wishlist_item, result in zip(wishlist_items, results):
            if isinstance(result, Exception):
                logger.error(
                    "Matching failed for wishlist item %s, sale %s: %s", wishlist_item.id, garage_sale.id, result
                )
                report.failures.append(PairFailure(wishlist_item_id=wishlist_item.id, error=str(result)))
                continue
            if isinstance(result, BaseException):
                raise result

            if result.decision is not None and result.decision.is_match:
                report.matched += 1
            if result.created:
                report.created += 1
            if result.notification == DispatchOutcome.SENT:
                report.notified += 1

        logger.info(
            "Garage sale %s: %s matched, %s new, %s notified, %s failed",
            garage_sale.id,
            report.matched,
            report.created,
            report.notified,
            len(report.failures),
        )

        if raise_on_failure and report.failures:
            raise MatchPersistenceError(
                f"{len(report.failures)} wishlist items could not be matched",
                garage_sale_id=garage_sale.id,
            )

        return report
