"""
Custom exceptions for the application
"""


class VerifierUnavailableError(Exception):
    """Raised when semantic verification cannot produce an answer (network, timeout, quota, bad response)"""

    def __init__(self, message: str, provider: str = "unknown", original_error: Exception = None):
        self.message = message
        self.provider = provider
        self.original_error = original_error
        super().__init__(message)


class LLMQuotaExceededError(VerifierUnavailableError):
    """Raised when LLM API quota is exceeded"""


class LLMRateLimitError(VerifierUnavailableError):
    """Raised when LLM API rate limit is hit"""

    def __init__(self, message: str, provider: str = "unknown", retry_after: int = None):
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class MatchPersistenceError(Exception):
    """Raised when a match cannot be written; the caller must retry the pair"""

    def __init__(
        self,
        message: str,
        wishlist_item_id: str = None,
        garage_sale_id: str = None,
        match_id: str = None,
        original_error: Exception = None,
    ):
        self.message = message
        self.wishlist_item_id = wishlist_item_id
        self.garage_sale_id = garage_sale_id
        self.match_id = match_id
        self.original_error = original_error
        super().__init__(message)


class NotificationDeliveryError(Exception):
    """Raised by push transports when the push service rejects a message"""

    def __init__(self, message: str, token: str = None, details: dict = None):
        self.message = message
        self.token = token
        self.details = details or {}
        super().__init__(message)
