"""
Centralized status enums for the wishlist matching pipeline
"""

from enum import Enum


class MatchConfidence(str, Enum):
    """How strongly a listing is believed to match a wishlist item"""
    HIGH = "high"                  # Strong keyword overlap, no LLM call
    MEDIUM = "medium"              # Category hit with thin keyword support
    VERIFIED = "verified"          # Confirmed by semantic verification


class MatchStatus(str, Enum):
    """Lifecycle of a persisted wishlist match"""
    MATCHED = "matched"            # Match stored, notification pending
    NOTIFIED = "notified"          # Push notification delivered (terminal)


class DispatchOutcome(str, Enum):
    """Result of a single notification dispatch attempt"""
    SENT = "sent"                          # Delivered and marked as sent
    ALREADY_SENT = "already_sent"          # Nothing to do
    IN_PROGRESS = "in_progress"            # Another dispatcher holds the claim
    NO_PUSH_TARGET = "no_push_target"      # Owner has no push token, retry later
    DELIVERY_FAILED = "delivery_failed"    # Push service rejected or errored, retry later
    NOT_FOUND = "not_found"                # Match or related records missing
