"""
Services module initialization
"""

from app.services.wishlist_pipeline_service import WishlistPipelineService

# Global service instances
_pipeline_service: WishlistPipelineService | None = None

def get_pipeline_service() -> WishlistPipelineService:
    """Get the global wishlist pipeline instance (singleton)"""
    global _pipeline_service
    if _pipeline_service is None:
        _pipeline_service = WishlistPipelineService()
    return _pipeline_service

def set_pipeline_service(service: WishlistPipelineService) -> None:
    """Set the global wishlist pipeline instance"""
    global _pipeline_service
    _pipeline_service = service
