from datetime import datetime, UTC
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SaleCategory(str, Enum):
    """Closed set of garage sale categories"""
    FURNITURE = "furniture"
    CLOTHING = "clothing"
    ELECTRONICS = "electronics"
    TOYS = "toys"
    BOOKS = "books"
    TOOLS = "tools"
    KITCHEN = "kitchen"
    SPORTS = "sports"
    OTHER = "other"


class SaleLocation(BaseModel):
    """Where the sale takes place"""
    address: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(None, ge=-180.0, le=180.0)


class GarageSale(BaseModel):
    """Published garage sale listing, read-only input to the wishlist matcher"""
    id: Optional[str] = None
    user_id: Optional[str] = None  # Seller
    title: str
    description: Optional[str] = None
    categories: List[str] = []
    location: Optional[SaleLocation] = None

    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def searchable_text(self) -> str:
        """Lowercased title and description used for keyword lookup"""
        return f"{self.title} {self.description or ''}".lower()
