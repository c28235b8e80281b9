"""
Wishlist service for managing the items users want to find.

Items are never hard-deleted: removing one sets is_active to False so
past matches stay visible while new listings are no longer checked
against it.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from app.core.vocabulary import MatchingVocabulary, default_vocabulary
from app.db.mongodb import mongodb
from app.models.wishlist import WishlistItem

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"item_name", "description", "category"}


class WishlistService:
    """Service for managing wishlist items"""

    def __init__(self, vocabulary: MatchingVocabulary = default_vocabulary):
        self.vocabulary = vocabulary

    def _validate_category(self, category: Optional[str]) -> Optional[str]:
        if category is None:
            return None
        category = category.strip().lower()
        if not self.vocabulary.is_known_category(category):
            raise ValueError(f"Unknown category: {category}")
        return category

    async def add_wishlist_item(self, user_id: str, text: str, category: Optional[str] = None) -> WishlistItem:
        """Create a wishlist item from the user's free-text description"""
        if not text or not text.strip():
            raise ValueError("Please describe what you're looking for")

        item = WishlistItem(
            user_id=user_id,
            item_name=WishlistItem.derive_item_name(text),
            description=text.strip(),
            category=self._validate_category(category),
        )

        db = mongodb.get_database()
        result = await db.user_wishlists.insert_one(item.model_dump(exclude={"id"}))
        logger.info("Created wishlist item %s for user %s", result.inserted_id, user_id)
        return item.model_copy(update={"id": str(result.inserted_id)})

    async def get_wishlist_item(self, item_id: str) -> Optional[WishlistItem]:
        """Get a specific wishlist item by ID"""
        try:
            db = mongodb.get_database()
            item_doc = await db.user_wishlists.find_one({"_id": ObjectId(item_id)})

            if item_doc:
                item_doc["id"] = str(item_doc["_id"])
                return WishlistItem(**item_doc)
            return None
        except InvalidId:
            logger.warning("Invalid wishlist item id: %s", item_id)
            return None

    async def list_active_wishlist_items(self, user_id: Optional[str] = None) -> List[WishlistItem]:
        """Get all active wishlist items, optionally filtered by owner"""
        db = mongodb.get_database()
        items = []

        query: Dict[str, Any] = {"is_active": True}
        if user_id is not None:
            query["user_id"] = user_id

        async for item_doc in db.user_wishlists.find(query):
            item_doc["id"] = str(item_doc["_id"])
            items.append(WishlistItem(**item_doc))

        return items

    async def get_user_wishlist_items(self, user_id: str) -> List[WishlistItem]:
        """Active items of one user, newest first"""
        try:
            db = mongodb.get_database()
            items = []

            async for item_doc in db.user_wishlists.find(
                {"user_id": user_id, "is_active": True}
            ).sort("created_at", -1):
                item_doc["id"] = str(item_doc["_id"])
                items.append(WishlistItem(**item_doc))

            return items
        except Exception as e:
            logger.error("Error getting wishlist items for user %s: %s", user_id, e)
            return []

    async def update_wishlist_item(self, item_id: str, changes: Dict[str, Any]) -> bool:
        """Update name, description or category of a wishlist item"""
        set_data = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
        if "category" in set_data:
            set_data["category"] = self._validate_category(set_data["category"])
        if "item_name" in set_data and not (set_data["item_name"] or "").strip():
            raise ValueError("Item name cannot be empty")
        if not set_data:
            return False

        set_data["updated_at"] = datetime.now(timezone.utc)

        try:
            db = mongodb.get_database()
            result = await db.user_wishlists.update_one({"_id": ObjectId(item_id)}, {"$set": set_data})
        except InvalidId:
            logger.warning("Invalid wishlist item id: %s", item_id)
            return False
        logger.info("Updated wishlist item %s: modified_count=%s", item_id, result.modified_count)
        return bool(result.modified_count > 0)

    async def delete_wishlist_item(self, item_id: str) -> bool:
        """Soft-delete: stop matching new listings, keep existing matches"""
        return await self._set_active(item_id, False)

    async def reactivate_wishlist_item(self, item_id: str) -> bool:
        return await self._set_active(item_id, True)

    async def _set_active(self, item_id: str, is_active: bool) -> bool:
        try:
            db = mongodb.get_database()
            result = await db.user_wishlists.update_one(
                {"_id": ObjectId(item_id)},
                {"$set": {"is_active": is_active, "updated_at": datetime.now(timezone.utc)}},
            )
        except InvalidId:
            logger.warning("Invalid wishlist item id: %s", item_id)
            return False
        logger.info("Set wishlist item %s is_active=%s", item_id, is_active)
        return bool(result.modified_count > 0)
