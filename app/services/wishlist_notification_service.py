"""
Dispatches wishlist match notifications.

A match moves from matched to notified exactly once: the dispatcher skips
matches already marked as sent, claims the match in storage, sends the
push, and only then flips notification_sent with a conditional update.
A failed send releases the claim. A crash between sending and marking
leaves the claim to expire, after which the next sweep may repeat the
notification but never loses it.
"""

import asyncio
import logging
import weakref
from collections import Counter
from typing import Dict, Optional

from app.core.config import settings
from app.exceptions import MatchPersistenceError, NotificationDeliveryError
from app.models.garage_sale import GarageSale
from app.models.status_enums import DispatchOutcome
from app.models.wishlist import WishlistItem
from app.models.wishlist_match import WishlistMatch
from app.services.garage_sale_service import GarageSaleService
from app.services.notification_service import NotificationService, PushMessage, notification_service
from app.services.push_token_service import PushTokenService
from app.services.wishlist_match_service import WishlistMatchService
from app.services.wishlist_service import WishlistService

logger = logging.getLogger(__name__)


def build_match_message(match: WishlistMatch, wishlist_item: WishlistItem, garage_sale: GarageSale) -> PushMessage:
    return PushMessage(
        title=f"Found: {wishlist_item.item_name}! 🎉",
        body=f'"{garage_sale.title}" may have what you\'re looking for!',
        data={
            "type": "wishlist_match",
            "matchId": match.id,
            "garageSaleId": match.garage_sale_id,
            "wishlistItemId": match.wishlist_item_id,
        },
    )


class WishlistNotificationService:
    """Sends one push notification per wishlist match"""

    def __init__(
        self,
        match_service: Optional[WishlistMatchService] = None,
        wishlist_service: Optional[WishlistService] = None,
        garage_sale_service: Optional[GarageSaleService] = None,
        push_token_service: Optional[PushTokenService] = None,
        notifier: Optional[NotificationService] = None,
    ) -> None:
        self.match_service = match_service or WishlistMatchService()
        self.wishlist_service = wishlist_service or WishlistService()
        self.garage_sale_service = garage_sale_service or GarageSaleService()
        self.push_token_service = push_token_service or PushTokenService()
        self.notifier = notifier or notification_service
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, match_id: str) -> asyncio.Lock:
        lock = self._locks.get(match_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[match_id] = lock
        return lock

    async def dispatch(
        self,
        match_id: str,
        wishlist_item: Optional[WishlistItem] = None,
        garage_sale: Optional[GarageSale] = None,
    ) -> DispatchOutcome:
        """Notify the owner of a match unless that already happened.

        The match is claimed in storage before the push goes out, so
        dispatchers in other requests or processes never send it twice.
        Raises MatchPersistenceError when the claim or the sent flag
        cannot be stored.
        """
        async with self._lock_for(match_id):
            match = await self.match_service.get_match(match_id)
            if match is None:
                logger.warning("Match %s not found, nothing to notify", match_id)
                return DispatchOutcome.NOT_FOUND

            if match.notification_sent:
                return DispatchOutcome.ALREADY_SENT

            if not await self.match_service.claim_for_dispatch(match_id):
                current = await self.match_service.get_match(match_id)
                if current is not None and current.notification_sent:
                    return DispatchOutcome.ALREADY_SENT
                logger.info("Match %s is being notified by another dispatcher", match_id)
                return DispatchOutcome.IN_PROGRESS

            outcome = await self._send(match, wishlist_item, garage_sale)
            if outcome in (DispatchOutcome.NOT_FOUND, DispatchOutcome.NO_PUSH_TARGET, DispatchOutcome.DELIVERY_FAILED):
                await self.match_service.release_dispatch_claim(match_id)
            return outcome

    async def _send(
        self,
        match: WishlistMatch,
        wishlist_item: Optional[WishlistItem],
        garage_sale: Optional[GarageSale],
    ) -> DispatchOutcome:
        wishlist_item = wishlist_item or await self.wishlist_service.get_wishlist_item(match.wishlist_item_id)
        garage_sale = garage_sale or await self.garage_sale_service.get_garage_sale(match.garage_sale_id)
        if wishlist_item is None or garage_sale is None:
            logger.warning(
                "Match %s references missing wishlist item %s or sale %s",
                match.id,
                match.wishlist_item_id,
                match.garage_sale_id,
            )
            return DispatchOutcome.NOT_FOUND

        token = await self.push_token_service.resolve_push_target(match.user_id)
        if not token:
            logger.warning("No push token available for user %s, match %s left unsent", match.user_id, match.id)
            return DispatchOutcome.NO_PUSH_TARGET

        try:
            await self.notifier.send_push(token, build_match_message(match, wishlist_item, garage_sale))
        except NotificationDeliveryError as e:
            logger.warning("Push for match %s not delivered: %s", match.id, e.message)
            return DispatchOutcome.DELIVERY_FAILED

        if not await self.match_service.mark_notified(match.id):
            logger.info("Match %s was marked as sent by another dispatcher", match.id)
            return DispatchOutcome.ALREADY_SENT

        logger.info("Sent wishlist match notification %s to user %s", match.id, match.user_id)
        return DispatchOutcome.SENT

    async def retry_unsent_notifications(self, limit: Optional[int] = None) -> Dict[str, int]:
        """Re-dispatch matches whose notification is still pending"""
        matches = await self.match_service.list_unsent_matches(limit or settings.UNSENT_SWEEP_LIMIT)
        outcomes: Counter = Counter()

        for match in matches:
            try:
                outcome = await self.dispatch(match.id)
                outcomes[outcome.value] += 1
            except MatchPersistenceError as e:
                logger.error("Could not record notification for match %s: %s", match.id, e.message)
                outcomes["error"] += 1

        logger.info("Unsent notification sweep over %s matches: %s", len(matches), dict(outcomes))
        return dict(outcomes)
