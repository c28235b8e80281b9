from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # === PUBLIC DATA (not secrets) ===
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Garage Sale Wishlist Matcher"

    # === DATABASE SETTINGS (from .env) ===
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017/garage_sales", description="MongoDB connection string"
    )

    # === APPLICATION SETTINGS ===
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # === SEMANTIC VERIFICATION (from .env) ===
    ENABLE_SEMANTIC_VERIFICATION: bool = Field(
        default=True, description="Ask an LLM to confirm weak keyword or category matches"
    )
    LLM_PROVIDER: str = Field(default="openai", description="LLM provider: openai, anthropic, local, mock")
    LLM_API_KEY: Optional[str] = Field(default=None, description="API key for LLM service")
    LLM_MODEL: str = Field(default="gpt-4o-mini", description="LLM model used for match verification")
    LLM_BASE_URL: Optional[str] = Field(default=None, description="Base URL for LLM API (for local models)")
    LLM_MAX_TOKENS: int = Field(default=200, description="Maximum tokens for LLM response")
    LLM_TEMPERATURE: float = Field(default=0.0, description="Temperature for LLM generation (0.0-1.0)")
    VERIFIER_TIMEOUT_SECONDS: float = Field(
        default=10.0, gt=0, description="Upper bound for a single verification call"
    )

    # === PUSH NOTIFICATIONS ===
    EXPO_PUSH_URL: str = Field(
        default="https://exp.host/--/api/v2/push/send", description="Expo push API endpoint"
    )
    PUSH_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    # === MATCHING PIPELINE ===
    MATCHING_CONCURRENCY: int = Field(
        default=8, ge=1, description="Wishlist items evaluated in parallel for one listing"
    )
    UNSENT_SWEEP_LIMIT: int = Field(
        default=200, ge=1, description="Matches re-dispatched per retry sweep"
    )
    UNSENT_SWEEP_INTERVAL_SECONDS: int = Field(
        default=0, ge=0, description="Seconds between background retry sweeps (0 disables the sweep)"
    )
    DISPATCH_CLAIM_TTL_SECONDS: int = Field(
        default=300, ge=1, description="How long a dispatcher owns a match before another may retry it"
    )
    EXTRA_STOPWORDS: str = Field(
        default="", description="Additional stopwords for keyword extraction (comma-separated)"
    )

    @property
    def extra_stopwords_list(self) -> List[str]:
        """Get additional stopwords as a normalized list"""
        if not self.EXTRA_STOPWORDS:
            return []

        return [word.strip().lower() for word in self.EXTRA_STOPWORDS.split(",") if word.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
