"""
API endpoints for wishlist matches and their notifications
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from app.exceptions import MatchPersistenceError
from app.models.status_enums import DispatchOutcome
from app.models.wishlist_match import WishlistMatch
from app.services import get_pipeline_service
from app.services.push_token_service import PushTokenService
from app.services.wishlist_match_service import WishlistMatchService
from app.services.wishlist_notification_service import WishlistNotificationService

logger = logging.getLogger(__name__)

router = APIRouter()


class PushTokenRegistration(BaseModel):
    user_id: str
    token: str
    platform: Optional[str] = None


def get_match_service() -> WishlistMatchService:
    return WishlistMatchService()


def get_notification_dispatcher() -> WishlistNotificationService:
    """Dispatcher shared with the matching pipeline and the retry sweep"""
    return get_pipeline_service().notification_dispatcher


def get_push_token_service() -> PushTokenService:
    return PushTokenService()


@router.get("/", response_model=List[WishlistMatch])
async def get_wishlist_matches(
    user_id: str = Query(..., description="Owner of the wishlist items"),
    notification_sent: Optional[bool] = Query(None, description="Filter by notification status"),
    limit: int = Query(100, ge=1, le=1000, description="Limit number of results"),
    service: WishlistMatchService = Depends(get_match_service),
):
    """Get wishlist matches of a user, newest first"""
    matches = await service.get_matches_for_user(user_id, limit)
    if notification_sent is not None:
        matches = [m for m in matches if m.notification_sent == notification_sent]
    return matches


@router.get("/unsent", response_model=List[WishlistMatch])
async def get_unsent_matches(
    limit: int = Query(100, ge=1, le=1000),
    service: WishlistMatchService = Depends(get_match_service),
):
    """Matches still waiting for a notification"""
    return await service.list_unsent_matches(limit)


@router.post("/{match_id}/notify", response_model=Dict[str, str])
async def notify_match(
    match_id: str,
    dispatcher: WishlistNotificationService = Depends(get_notification_dispatcher),
):
    """Send the notification for one match if it has not been sent"""
    try:
        outcome = await dispatcher.dispatch(match_id)
    except MatchPersistenceError as e:
        logger.error("Error notifying match %s: %s", match_id, e.message)
        raise HTTPException(status_code=500, detail=e.message) from e

    if outcome == DispatchOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Match not found")
    return {"outcome": outcome.value}


@router.post("/retry-unsent", response_model=Dict[str, int])
async def retry_unsent_notifications(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    dispatcher: WishlistNotificationService = Depends(get_notification_dispatcher),
):
    """Sweep unsent matches and dispatch their notifications"""
    return await dispatcher.retry_unsent_notifications(limit)


@router.post("/push-tokens", response_model=Dict[str, str])
async def register_push_token(
    payload: PushTokenRegistration,
    service: PushTokenService = Depends(get_push_token_service),
):
    """Register or replace the push token of a user"""
    await service.register_push_token(payload.user_id, payload.token, payload.platform)
    return {"message": "Push token registered"}
