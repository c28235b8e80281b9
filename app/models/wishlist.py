from datetime import datetime, UTC
from typing import Optional

from pydantic import BaseModel, Field

ITEM_NAME_MAX_LENGTH = 50


class WishlistItem(BaseModel):
    """Free-text description of something a user wants to find at garage sales"""
    id: Optional[str] = None
    user_id: str  # Owner
    item_name: str
    description: Optional[str] = None
    category: Optional[str] = None  # One of SaleCategory values

    # Soft deactivation keeps existing matches for history
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def searchable_text(self) -> str:
        """Lowercased name and description used for keyword extraction"""
        return f"{self.item_name} {self.description or ''}".lower()

    @staticmethod
    def derive_item_name(text: str) -> str:
        """First line of the text, capped at ITEM_NAME_MAX_LENGTH characters"""
        return text.strip().split("\n")[0][:ITEM_NAME_MAX_LENGTH]
