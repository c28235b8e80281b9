"""
Service for storing and resolving users' push tokens
"""

import logging
from typing import Optional

from app.db.mongodb import mongodb
from app.models.push_token import PushToken

logger = logging.getLogger(__name__)


class PushTokenService:
    """One push token per user, replaced on re-registration"""

    async def register_push_token(self, user_id: str, token: str, platform: Optional[str] = None) -> None:
        push_token = PushToken(user_id=user_id, token=token, platform=platform)
        db = mongodb.get_database()
        await db.push_tokens.update_one(
            {"user_id": user_id},
            {"$set": push_token.model_dump(exclude={"id"})},
            upsert=True,
        )
        logger.info("Registered push token for user %s", user_id)

    async def resolve_push_target(self, user_id: str) -> Optional[str]:
        """Get the user's push token, None if the user never registered one"""
        try:
            db = mongodb.get_database()
            token_doc = await db.push_tokens.find_one({"user_id": user_id})
            return token_doc.get("token") if token_doc else None
        except Exception as e:
            logger.error("Error resolving push token for user %s: %s", user_id, e)
            return None
