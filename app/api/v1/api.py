from fastapi import APIRouter

from app.api.v1.endpoints import garage_sales, wishlist_matches, wishlists

api_router = APIRouter()
api_router.include_router(
    wishlists.router, prefix="/wishlists", tags=["wishlists"]
)
api_router.include_router(
    wishlist_matches.router, prefix="/wishlist-matches", tags=["wishlist-matches"]
)
api_router.include_router(
    garage_sales.router, prefix="/garage-sales", tags=["garage-sales"]
)
