"""
Generative AI Client
Thin wrapper around the Gemini SDK exposing a single ``generate`` call
"""
import logging
from typing import Optional

from google import genai
from google.genai import types

from expense_tracker.core.config import settings

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Raised when the text-generation service is unusable or returns nothing."""


class GenerativeAIClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.0-flash",
        timeout_seconds: float = 15.0,
    ) -> None:
        self.model = model
        self._client = None

        if not api_key:
            logger.warning("GEMINI_API_KEY is not set, AI features will use fallbacks")
            return

        try:
            self._client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
            )
            logger.info(f"Gemini client initialized with model {model}")
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {str(e)}")
            self._client = None

    def is_available(self) -> bool:
        return self._client is not None

    def generate(self, prompt: str) -> str:
        if not self.is_available():
            raise AIServiceError("AI backend is not configured")

        response = self._client.models.generate_content(model=self.model, contents=prompt)
        text = response.text
        if not text or not text.strip():
            raise AIServiceError("Empty response from AI backend")
        return text


_ai_client: Optional[GenerativeAIClient] = None


def get_ai_client() -> GenerativeAIClient:
    """Shared client built once from settings."""
    global _ai_client
    if _ai_client is None:
        _ai_client = GenerativeAIClient(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            timeout_seconds=settings.AI_TIMEOUT_SECONDS,
        )
    return _ai_client
