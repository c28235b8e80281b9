"""
Semantic verification of weak wishlist matches.

The decision engine only sees the SemanticVerifier interface: one async
call that either returns a VerificationResult or raises
VerifierUnavailableError. LLMSemanticVerifier is the production adapter
and supports OpenAI, Anthropic, local OpenAI-compatible servers and a
deterministic mock provider.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from anthropic import AsyncAnthropic, APIError as AnthropicAPIError, RateLimitError as AnthropicRateLimitError
from openai import AsyncOpenAI, APIError as OpenAIAPIError, RateLimitError as OpenAIRateLimitError
from pydantic import BaseModel, ValidationError

from app.core.config import settings
from app.exceptions import LLMQuotaExceededError, LLMRateLimitError, VerifierUnavailableError
from app.models.garage_sale import GarageSale
from app.models.wishlist import WishlistItem
from app.services.matching.keyword_extractor import extract_keywords
from app.services.matching.lexical_matcher import find_keyword_matches

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class VerificationResult(BaseModel):
    """Answer from a semantic verifier"""
    is_match: bool
    reason: str = ""


class SemanticVerifier(ABC):
    """Abstract base class for semantic verifiers"""

    @abstractmethod
    async def verify(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> VerificationResult:
        """Judge whether the listing offers the wished-for item.

        Raises VerifierUnavailableError when no judgement can be made.
        """


class DisabledSemanticVerifier(SemanticVerifier):
    """Verifier used when semantic verification is switched off"""

    async def verify(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> VerificationResult:
        raise VerifierUnavailableError("Semantic verification is disabled", provider="disabled")


class LLMSemanticVerifier(SemanticVerifier):
    """LLM-backed verifier with a hard timeout per call"""

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.provider = str(provider or settings.LLM_PROVIDER).lower()
        self.model = model or settings.LLM_MODEL
        self.api_key = api_key or settings.LLM_API_KEY
        self.base_url = base_url or settings.LLM_BASE_URL
        self.max_tokens = settings.LLM_MAX_TOKENS
        self.temperature = settings.LLM_TEMPERATURE
        self.timeout = timeout or settings.VERIFIER_TIMEOUT_SECONDS

        self._client: Optional[Any] = None

    def _get_client(self) -> Any:
        """Lazy initialization of the provider SDK client"""
        if self._client is None:
            if self.provider == "openai":
                self._client = AsyncOpenAI(api_key=self.api_key)
            elif self.provider == "anthropic":
                self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def verify(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> VerificationResult:
        prompt = self._create_verification_prompt(wishlist_item, garage_sale)

        try:
            response = await asyncio.wait_for(self._call_llm(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise VerifierUnavailableError(
                f"Verification timed out after {self.timeout}s", provider=self.provider, original_error=e
            ) from e
        except (OpenAIRateLimitError, AnthropicRateLimitError) as e:
            if getattr(e, "code", None) == "insufficient_quota":
                raise LLMQuotaExceededError(str(e), provider=self.provider, original_error=e) from e
            raise LLMRateLimitError(str(e), provider=self.provider) from e
        except (OpenAIAPIError, AnthropicAPIError, httpx.HTTPError) as e:
            raise VerifierUnavailableError(str(e), provider=self.provider, original_error=e) from e

        result = self._parse_verification_response(response)
        if result is None:
            raise VerifierUnavailableError("Unparseable verification response", provider=self.provider)
        return result

    def _create_verification_prompt(self, wishlist_item: WishlistItem, garage_sale: GarageSale) -> str:
        """Create prompt for match verification"""
        return f"""You help shoppers find things at local garage sales.
Decide whether the garage sale below is likely to have the item the shopper wants.

SHOPPER WANTS:
Name: {wishlist_item.item_name}
Details: {wishlist_item.description or "none"}
Category: {wishlist_item.category or "none"}

GARAGE SALE:
Title: {garage_sale.title}
Description: {garage_sale.description or "none"}
Categories: {", ".join(garage_sale.categories) or "none"}

RULES:
- Answer true only if the sale plausibly offers the wanted item or a close equivalent
- Sharing a broad category alone is not enough
- Keep the reason under 15 words and address it to the shopper

Respond with JSON only:
{{"is_match": boolean, "reason": string}}"""

    def _parse_verification_response(self, response: Optional[str]) -> Optional[VerificationResult]:
        """Extract the JSON verdict, tolerating code fences and surrounding prose"""
        if not response:
            return None

        found = _JSON_OBJECT.search(response)
        if not found:
            logger.warning("No JSON object in verifier response: %s", response[:200])
            return None

        try:
            data = json.loads(found.group(0))
            return VerificationResult(**data)
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning("Invalid verifier response %s: %s", response[:200], e)
            return None

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    async def _call_llm(self, prompt: str) -> Optional[str]:
        """Call LLM API based on provider"""
        if self.provider == "openai":
            return await self._call_openai(prompt)
        if self.provider == "anthropic":
            return await self._call_anthropic(prompt)
        if self.provider == "local":
            return await self._call_local(prompt)
        if self.provider == "mock":
            return await self._call_mock(prompt)
        raise VerifierUnavailableError(f"Unknown LLM provider: {self.provider}", provider=self.provider)

    async def _call_openai(self, prompt: str) -> Optional[str]:
        response = await self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "You judge whether second-hand listings match shopping wishes."},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return response.choices[0].message.content

    async def _call_anthropic(self, prompt: str) -> Optional[str]:
        response = await self._get_client().messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text

    async def _call_local(self, prompt: str) -> Optional[str]:
        """Call local OpenAI-compatible server (Ollama, vLLM, etc.)"""
        if not self.base_url:
            raise VerifierUnavailableError("LLM_BASE_URL not configured for local provider", provider="local")

        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.base_url}/v1/chat/completions",
                json={
                    "model": self.model,
                    "messages": [{"role": "user", "content": prompt}],
                    "max_tokens": self.max_tokens,
                    "temperature": self.temperature,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data: Dict[str, Any] = response.json()
            return data["choices"][0]["message"]["content"]

    async def _call_mock(self, prompt: str) -> Optional[str]:
        """Mock verifier: matches when any wanted keyword appears in the sale block"""
        wanted_text = f"{_prompt_field(prompt, 'Name')} {_prompt_field(prompt, 'Details')}"
        sale_text = f"{_prompt_field(prompt, 'Title')} {_prompt_field(prompt, 'Description')}".lower()
        hits = find_keyword_matches(extract_keywords(wanted_text), sale_text)
        if hits:
            return json.dumps({"is_match": True, "reason": f"The sale mentions {hits[0]}"})
        return json.dumps({"is_match": False, "reason": "Nothing similar listed"})


def _prompt_field(prompt: str, label: str) -> str:
    found = re.search(rf"^{label}: (.*)$", prompt, re.MULTILINE)
    if not found or found.group(1) == "none":
        return ""
    return found.group(1)


def get_semantic_verifier() -> SemanticVerifier:
    """Build the verifier configured in settings"""
    if not settings.ENABLE_SEMANTIC_VERIFICATION:
        return DisabledSemanticVerifier()
    return LLMSemanticVerifier()
