from datetime import datetime, UTC
from typing import Optional

from pydantic import BaseModel, Field


class PushToken(BaseModel):
    """Registered push destination for a user's device"""
    id: Optional[str] = None
    user_id: str
    token: str  # ExponentPushToken[...]
    platform: Optional[str] = None  # ios, android
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
