"""
Service for storing wishlist matches and their notification state
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.config import settings
from app.db.mongodb import mongodb
from app.exceptions import MatchPersistenceError
from app.models.wishlist_match import WishlistMatch

logger = logging.getLogger(__name__)


def _to_match(match_doc: dict) -> WishlistMatch:
    match_doc["id"] = str(match_doc["_id"])
    return WishlistMatch(**match_doc)


class WishlistMatchService:
    """Service for managing wishlist matches"""

    async def create_match_if_absent(self, match: WishlistMatch) -> Tuple[WishlistMatch, bool]:
        """Insert the match unless one exists for the same pair.

        Returns the stored match and whether this call created it. The
        unique index on (wishlist_item_id, garage_sale_id) settles races
        between concurrent writers.
        """
        pair = {"wishlist_item_id": match.wishlist_item_id, "garage_sale_id": match.garage_sale_id}
        try:
            db = mongodb.get_database()

            existing_match = await db.wishlist_matches.find_one(pair)
            if existing_match:
                logger.info(
                    "Match already exists for wishlist item %s, sale %s",
                    match.wishlist_item_id,
                    match.garage_sale_id,
                )
                return _to_match(existing_match), False

            result = await db.wishlist_matches.insert_one(match.model_dump(exclude={"id"}))
            logger.info("Created wishlist match: %s", str(result.inserted_id))
            return match.model_copy(update={"id": str(result.inserted_id)}), True

        except DuplicateKeyError:
            logger.info(
                "Concurrent insert won for wishlist item %s, sale %s",
                match.wishlist_item_id,
                match.garage_sale_id,
            )
            existing_match = await self.get_existing_match(match.wishlist_item_id, match.garage_sale_id)
            if existing_match is None:
                raise MatchPersistenceError(
                    "Duplicate key reported but no match found",
                    wishlist_item_id=match.wishlist_item_id,
                    garage_sale_id=match.garage_sale_id,
                )
            return existing_match, False

        except PyMongoError as e:
            logger.error(
                "Error creating wishlist match for item %s, sale %s: %s",
                match.wishlist_item_id,
                match.garage_sale_id,
                e,
            )
            raise MatchPersistenceError(
                "Failed to create wishlist match",
                wishlist_item_id=match.wishlist_item_id,
                garage_sale_id=match.garage_sale_id,
                original_error=e,
            ) from e

    async def get_existing_match(self, wishlist_item_id: str, garage_sale_id: str) -> Optional[WishlistMatch]:
        """Get the match for a pair, raising MatchPersistenceError if storage fails"""
        try:
            db = mongodb.get_database()
            match_doc = await db.wishlist_matches.find_one(
                {"wishlist_item_id": wishlist_item_id, "garage_sale_id": garage_sale_id}
            )
        except PyMongoError as e:
            logger.error("Error looking up match for item %s, sale %s: %s", wishlist_item_id, garage_sale_id, e)
            raise MatchPersistenceError(
                "Failed to look up wishlist match",
                wishlist_item_id=wishlist_item_id,
                garage_sale_id=garage_sale_id,
                original_error=e,
            ) from e

        return _to_match(match_doc) if match_doc else None

    async def get_match(self, match_id: str) -> Optional[WishlistMatch]:
        """Get a match by ID"""
        try:
            db = mongodb.get_database()
            match_doc = await db.wishlist_matches.find_one({"_id": ObjectId(match_id)})
            return _to_match(match_doc) if match_doc else None
        except InvalidId:
            logger.warning("Invalid match id: %s", match_id)
            return None

    async def mark_notified(self, match_id: str, sent_at: Optional[datetime] = None) -> bool:
        """Flip notification_sent to true.

        The update only applies while notification_sent is still false, so
        it returns True for exactly one caller per match.
        """
        try:
            db = mongodb.get_database()

            result = await db.wishlist_matches.update_one(
                {"_id": ObjectId(match_id), "notification_sent": False},
                {
                    "$set": {
                        "notification_sent": True,
                        "notification_sent_at": sent_at or datetime.now(timezone.utc),
                        "dispatch_claimed_at": None,
                    }
                },
            )

            return bool(result.modified_count > 0)
        except InvalidId:
            logger.warning("Invalid match id: %s", match_id)
            return False
        except PyMongoError as e:
            logger.error("Error marking match %s as notified: %s", match_id, e)
            raise MatchPersistenceError("Failed to mark match as notified", match_id=match_id, original_error=e) from e

    async def claim_for_dispatch(self, match_id: str, now: Optional[datetime] = None) -> bool:
        """Take ownership of an unsent match before sending its push.

        Succeeds for one caller at a time; a claim older than
        DISPATCH_CLAIM_TTL_SECONDS counts as abandoned and can be taken over.
        """
        now = now or datetime.now(timezone.utc)
        expired_before = now - timedelta(seconds=settings.DISPATCH_CLAIM_TTL_SECONDS)
        try:
            db = mongodb.get_database()

            claimed = await db.wishlist_matches.find_one_and_update(
                {
                    "_id": ObjectId(match_id),
                    "notification_sent": False,
                    "$or": [
                        {"dispatch_claimed_at": None},
                        {"dispatch_claimed_at": {"$lt": expired_before}},
                    ],
                },
                {"$set": {"dispatch_claimed_at": now}},
                return_document=ReturnDocument.AFTER,
            )

            return claimed is not None
        except InvalidId:
            logger.warning("Invalid match id: %s", match_id)
            return False
        except PyMongoError as e:
            logger.error("Error claiming match %s for dispatch: %s", match_id, e)
            raise MatchPersistenceError("Failed to claim match for dispatch", match_id=match_id, original_error=e) from e

    async def release_dispatch_claim(self, match_id: str) -> None:
        """Drop the claim of an unsent match so a later sweep can retry it"""
        try:
            db = mongodb.get_database()
            await db.wishlist_matches.update_one(
                {"_id": ObjectId(match_id), "notification_sent": False},
                {"$set": {"dispatch_claimed_at": None}},
            )
        except PyMongoError as e:
            # The claim expires on its own after DISPATCH_CLAIM_TTL_SECONDS
            logger.error("Error releasing dispatch claim of match %s: %s", match_id, e)

    async def list_unsent_matches(self, limit: int = 100) -> List[WishlistMatch]:
        """Oldest matches whose notification has not been sent yet"""
        try:
            db = mongodb.get_database()
            matches = []

            async for match_doc in db.wishlist_matches.find(
                {"notification_sent": False}
            ).sort("matched_at", 1).limit(limit):
                matches.append(_to_match(match_doc))

            return matches
        except Exception as e:
            logger.error("Error listing unsent matches: %s", e)
            return []

    async def get_matches_for_wishlist_item(self, wishlist_item_id: str, limit: int = 100) -> List[WishlistMatch]:
        """Get all matches for a wishlist item, newest first"""
        try:
            db = mongodb.get_database()
            matches = []

            async for match_doc in db.wishlist_matches.find(
                {"wishlist_item_id": wishlist_item_id}
            ).sort("matched_at", -1).limit(limit):
                matches.append(_to_match(match_doc))

            return matches
        except Exception as e:
            logger.error("Error getting matches for wishlist item %s: %s", wishlist_item_id, e)
            return []

    async def get_match_count_for_wishlist_item(self, wishlist_item_id: str) -> int:
        """Count matches for a wishlist item"""
        try:
            db = mongodb.get_database()
            return await db.wishlist_matches.count_documents({"wishlist_item_id": wishlist_item_id})
        except Exception as e:
            logger.error("Error counting matches for wishlist item %s: %s", wishlist_item_id, e)
            return 0

    async def get_matches_for_user(self, user_id: str, limit: int = 100) -> List[WishlistMatch]:
        """Get all matches for a specific user"""
        try:
            db = mongodb.get_database()
            matches = []

            async for match_doc in db.wishlist_matches.find(
                {"user_id": user_id}
            ).sort("matched_at", -1).limit(limit):
                matches.append(_to_match(match_doc))

            return matches
        except Exception as e:
            logger.error("Error getting matches for user %s: %s", user_id, e)
            return []
