"""
Models for matches between wishlist items and garage sale listings
"""

from datetime import datetime, UTC
from typing import Optional

from pydantic import BaseModel, Field

from app.models.status_enums import MatchConfidence, MatchStatus


class MatchDecision(BaseModel):
    """Verdict of the wishlist matcher for one (wishlist item, listing) pair"""

    is_match: bool
    confidence: MatchConfidence
    reason: str

    @classmethod
    def no_match(cls) -> "MatchDecision":
        return cls(is_match=False, confidence=MatchConfidence.MEDIUM, reason="No match")


class WishlistMatch(BaseModel):
    """Stored evidence that a listing matched a wishlist item.

    At most one record exists per (wishlist_item_id, garage_sale_id).
    confidence and reason are never recomputed after creation.
    """

    id: Optional[str] = None
    user_id: str  # Owner of the wishlist item
    wishlist_item_id: str
    garage_sale_id: str

    # Match metadata
    matched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    match_confidence: MatchConfidence
    match_reason: str

    # Notification state, flips false -> true once
    notification_sent: bool = False
    notification_sent_at: Optional[datetime] = None
    dispatch_claimed_at: Optional[datetime] = None  # Set while a dispatcher is sending

    @property
    def status(self) -> MatchStatus:
        return MatchStatus.NOTIFIED if self.notification_sent else MatchStatus.MATCHED
