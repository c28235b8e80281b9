import logging

from app.db.mongodb import mongodb

logger = logging.getLogger(__name__)


async def init_database():
    """Initialize database with collections and indexes"""
    try:
        db = mongodb.get_database()

        # Wishlist items
        await db.user_wishlists.create_index([("user_id", 1), ("is_active", 1)])
        await db.user_wishlists.create_index("created_at")

        # Garage sales
        await db.garage_sales.create_index("created_at")
        await db.garage_sales.create_index("categories")

        # Wishlist matches: one record per (wishlist item, garage sale), ever
        await db.wishlist_matches.create_index(
            [("wishlist_item_id", 1), ("garage_sale_id", 1)],
            unique=True,
            name="uq_wishlist_item_garage_sale",
        )
        await db.wishlist_matches.create_index([("user_id", 1), ("matched_at", -1)])
        await db.wishlist_matches.create_index([("notification_sent", 1), ("matched_at", 1)])

        # Push tokens
        await db.push_tokens.create_index("user_id", unique=True)

        logger.info("Database indexes created successfully")

    except Exception as e:
        logger.error("Error initializing database: %s", e)
        raise
