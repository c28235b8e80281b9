import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.exceptions import MatchPersistenceError
from app.services import get_pipeline_service
from app.services.garage_sale_service import GarageSaleService
from app.services.wishlist_pipeline_service import MatchingReport, WishlistPipelineService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_garage_sale_service() -> GarageSaleService:
    return GarageSaleService()


@router.post("/{garage_sale_id}/match", response_model=MatchingReport)
async def match_garage_sale(
    garage_sale_id: str,
    user_id: Optional[str] = Query(None, description="Only match this user's wishlist"),
    sale_service: GarageSaleService = Depends(get_garage_sale_service),
    pipeline: WishlistPipelineService = Depends(get_pipeline_service),
):
    """Match a published garage sale against active wishlist items"""
    garage_sale = await sale_service.get_garage_sale(garage_sale_id)
    if garage_sale is None:
        raise HTTPException(status_code=404, detail="Garage sale not found")

    try:
        return await pipeline.process_garage_sale(garage_sale, user_id=user_id)
    except MatchPersistenceError as e:
        logger.error("Matching garage sale %s failed: %s", garage_sale_id, e.message)
        raise HTTPException(status_code=500, detail=e.message) from e
