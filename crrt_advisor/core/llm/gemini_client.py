"""
Gemini API Client

Wrapper for Google Gemini (via LangChain) with response caching and error
handling. Used only to explain circuit mechanics in free text; it never
feeds back into the clinical calculations.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import hashlib
from datetime import datetime

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from crrt_advisor import config
from crrt_advisor.utils import AdvisoryServiceError, get_logger

logger = get_logger(__name__)


@dataclass
class GeminiConfig:
    """Configuration for Gemini client."""
    api_key: Optional[str] = field(default_factory=lambda: config.GEMINI_API_KEY or None)
    model: str = field(default_factory=lambda: config.GEMINI_MODEL)
    temperature: float = field(default_factory=lambda: config.GEMINI_TEMPERATURE)

    max_output_tokens: int = 2048
    request_timeout_seconds: int = field(default_factory=lambda: config.GEMINI_TIMEOUT_SECONDS)

    # Retries are left to the caller
    max_retries: int = 0

    cache_ttl_seconds: int = 900
    cache_max_entries: int = 500

    @property
    def model_name(self) -> str:
        return self.model.strip()


@dataclass
class GeminiResponse:
    """Structured response from Gemini."""
    text: str
    model: str
    finish_reason: str = "STOP"
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "model": self.model,
            "finish_reason": self.finish_reason,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "latency_ms": round(self.latency_ms, 2),
        }


class GeminiClient:
    """
    Client for Google Gemini API.

    Without an API key the client is unavailable and every call raises
    AdvisoryServiceError; it never substitutes an invented answer.
    """

    def __init__(self, gemini_config: Optional[GeminiConfig] = None):
        self.config = gemini_config or GeminiConfig()
        self._llm: Optional[ChatGoogleGenerativeAI] = None
        self._request_count = 0
        self._last_request_time: Optional[datetime] = None
        self._cache: Dict[str, tuple] = {}  # {cache_key: (timestamp, response_text)}

        self._initialize()

    def _initialize(self):
        """Build the LangChain chat model when a key is configured."""
        if not self.config.api_key:
            logger.warning("No Gemini API key provided - explanations disabled")
            return

        self._llm = ChatGoogleGenerativeAI(
            model=self.config.model_name,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
            timeout=self.config.request_timeout_seconds,
            max_retries=self.config.max_retries,
            google_api_key=self.config.api_key,
        )
        logger.info(f"LangChain Gemini client initialized with model: {self.config.model_name}")

    @property
    def is_available(self) -> bool:
        return self._llm is not None

    def _messages(self, prompt: str, system_instruction: Optional[str]):
        messages = []
        if system_instruction:
            messages.append(SystemMessage(content=system_instruction))
        messages.append(HumanMessage(content=prompt))
        return messages

    def _to_response(self, raw, started: datetime) -> GeminiResponse:
        latency = (datetime.now() - started).total_seconds() * 1000
        text = raw.content if hasattr(raw, "content") else str(raw)
        if isinstance(text, list):
            # Multi-part content blocks
            text = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in text
            )

        prompt_tokens = 0
        completion_tokens = 0
        usage = getattr(raw, "usage_metadata", None)
        if usage:
            prompt_tokens = usage.get("input_tokens", 0)
            completion_tokens = usage.get("output_tokens", 0)

        self._request_count += 1
        self._last_request_time = datetime.now()

        return GeminiResponse(
            text=text,
            model=self.config.model_name,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency,
        )

    def _cached_response(self, cache_key: str) -> Optional[GeminiResponse]:
        cached = self._get_from_cache(cache_key)
        if cached is None:
            return None
        logger.info(f"Cache hit for prompt hash {cache_key[:8]}")
        return GeminiResponse(
            text=cached,
            model=f"{self.config.model_name} (cached)",
            finish_reason="CACHED",
            latency_ms=1.0,
        )

    def _require_available(self):
        if not self.is_available:
            raise AdvisoryServiceError(
                "Explanation service is not configured",
                details={"reason": "missing_api_key"},
            )

    def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        use_cache: bool = True
    ) -> GeminiResponse:
        """
        Generate a response synchronously.

        Raises:
            AdvisoryServiceError: client unavailable or the request failed.
        """
        self._require_available()

        cache_key = self._get_cache_key(prompt, system_instruction)
        if use_cache:
            cached = self._cached_response(cache_key)
            if cached is not None:
                return cached

        started = datetime.now()
        try:
            raw = self._llm.invoke(self._messages(prompt, system_instruction))
        except Exception as e:
            logger.error(f"Gemini generation failed: {e}")
            raise AdvisoryServiceError(
                "Failed to fetch response from the explanation service",
                details={"cause": type(e).__name__},
            ) from e

        response = self._to_response(raw, started)
        if use_cache:
            self._add_to_cache(cache_key, response.text)
        return response

    async def generate_async(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        use_cache: bool = True
    ) -> GeminiResponse:
        """
        Async generate using LangChain's ainvoke.

        Raises:
            AdvisoryServiceError: client unavailable or the request failed.
        """
        self._require_available()

        cache_key = self._get_cache_key(prompt, system_instruction)
        if use_cache:
            cached = self._cached_response(cache_key)
            if cached is not None:
                return cached

        started = datetime.now()
        try:
            raw = await self._llm.ainvoke(self._messages(prompt, system_instruction))
        except Exception as e:
            logger.error(f"Async Gemini generation failed: {e}")
            raise AdvisoryServiceError(
                "Failed to fetch response from the explanation service",
                details={"cause": type(e).__name__},
            ) from e

        response = self._to_response(raw, started)
        if use_cache:
            self._add_to_cache(cache_key, response.text)
        return response

    def _get_cache_key(self, prompt: str, system_instruction: Optional[str]) -> str:
        """Whitespace-normalised key; numbers in the prompt are hashed verbatim."""
        normalized = " ".join(prompt.split())
        content = f"{system_instruction or ''}|||{normalized}"
        return hashlib.md5(content.encode()).hexdigest()

    def _get_from_cache(self, cache_key: str) -> Optional[str]:
        """Retrieve from cache if still within TTL."""
        if cache_key in self._cache:
            cached_time, cached_text = self._cache[cache_key]
            age = (datetime.now() - cached_time).total_seconds()
            if age < self.config.cache_ttl_seconds:
                return cached_text
            del self._cache[cache_key]
        return None

    def _add_to_cache(self, cache_key: str, text: str):
        self._cache[cache_key] = (datetime.now(), text)
        if len(self._cache) > self.config.cache_max_entries:
            oldest_key = min(self._cache.keys(), key=lambda k: self._cache[k][0])
            del self._cache[oldest_key]

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {
            "is_available": self.is_available,
            "model": self.config.model_name,
            "request_count": self._request_count,
            "cached_entries": len(self._cache),
            "last_request": self._last_request_time.isoformat() if self._last_request_time else None
        }
