import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import settings

logger = logging.getLogger(__name__)


class MongoDB:
    client: Optional[AsyncIOMotorClient] = None

    async def connect_to_mongo(self):
        """Open the shared client for wishlists, garage sales and matches"""
        self.client = AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
        logger.info("Connected to MongoDB")

    async def close_mongo_connection(self):
        if self.client:
            self.client.close()
            self.client = None
        logger.info("Disconnected from MongoDB")

    def get_database(self) -> AsyncIOMotorDatabase:
        """Database named in MONGODB_URL"""
        if self.client is None:
            raise RuntimeError("MongoDB client is not connected")
        return self.client.get_database()

    async def ping(self) -> bool:
        await self.get_database().command("ping")
        return True


mongodb = MongoDB()
