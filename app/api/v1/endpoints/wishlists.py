import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.models.wishlist import WishlistItem
from app.models.wishlist_match import WishlistMatch
from app.services.wishlist_match_service import WishlistMatchService
from app.services.wishlist_service import WishlistService

logger = logging.getLogger(__name__)

router = APIRouter()


class WishlistItemCreate(BaseModel):
    user_id: str
    text: str
    category: Optional[str] = None


class WishlistItemUpdate(BaseModel):
    item_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


def get_wishlist_service() -> WishlistService:
    return WishlistService()


def get_match_service() -> WishlistMatchService:
    return WishlistMatchService()


@router.post("/", response_model=WishlistItem, status_code=201)
async def create_wishlist_item(
    payload: WishlistItemCreate,
    service: WishlistService = Depends(get_wishlist_service),
):
    """Add an item to a user's wishlist"""
    try:
        return await service.add_wishlist_item(payload.user_id, payload.text, payload.category)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/user/{user_id}", response_model=List[WishlistItem])
async def get_user_wishlist(
    user_id: str,
    service: WishlistService = Depends(get_wishlist_service),
):
    """Active wishlist items of a user, newest first"""
    return await service.get_user_wishlist_items(user_id)


@router.get("/{item_id}", response_model=WishlistItem)
async def get_wishlist_item(
    item_id: str,
    service: WishlistService = Depends(get_wishlist_service),
):
    item = await service.get_wishlist_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Wishlist item not found")
    return item


@router.put("/{item_id}", response_model=Dict[str, Any])
async def update_wishlist_item(
    item_id: str,
    payload: WishlistItemUpdate,
    service: WishlistService = Depends(get_wishlist_service),
):
    try:
        updated = await service.update_wishlist_item(item_id, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.error("Error updating wishlist item %s: %s", item_id, e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    if not updated:
        raise HTTPException(status_code=404, detail="Wishlist item not found or unchanged")
    return {"message": "Wishlist item updated successfully"}


@router.delete("/{item_id}", response_model=Dict[str, Any])
async def delete_wishlist_item(
    item_id: str,
    service: WishlistService = Depends(get_wishlist_service),
):
    """Deactivate a wishlist item; its matches are kept"""
    try:
        deactivated = await service.delete_wishlist_item(item_id)
    except Exception as e:
        logger.error("Error deleting wishlist item %s: %s", item_id, e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    if not deactivated:
        raise HTTPException(status_code=404, detail="Wishlist item not found")
    return {"message": "Wishlist item deleted successfully"}


@router.post("/{item_id}/reactivate", response_model=Dict[str, Any])
async def reactivate_wishlist_item(
    item_id: str,
    service: WishlistService = Depends(get_wishlist_service),
):
    try:
        reactivated = await service.reactivate_wishlist_item(item_id)
    except Exception as e:
        logger.error("Error reactivating wishlist item %s: %s", item_id, e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    if not reactivated:
        raise HTTPException(status_code=404, detail="Wishlist item not found or already active")
    return {"message": "Wishlist item reactivated successfully"}


@router.get("/{item_id}/matches", response_model=List[WishlistMatch])
async def get_wishlist_item_matches(
    item_id: str,
    service: WishlistMatchService = Depends(get_match_service),
):
    return await service.get_matches_for_wishlist_item(item_id)


@router.get("/{item_id}/matches/count", response_model=Dict[str, int])
async def get_wishlist_item_match_count(
    item_id: str,
    service: WishlistMatchService = Depends(get_match_service),
):
    return {"count": await service.get_match_count_for_wishlist_item(item_id)}
