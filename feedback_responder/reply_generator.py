"""Customer reply generation through the Gemini generateContent API."""
import json
import logging
from typing import Any, Optional

import httpx

from config import Config
from schemas import Sentiment

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Base class for failed reply generation."""


class GenerativeTimeout(GenerationError):
    """The generation call did not answer before the request deadline."""


class GenerativeNetworkFailure(GenerationError):
    """The generation endpoint could not be reached."""


class GenerativeBadStatus(GenerationError):
    """The generation endpoint answered with a non-success status."""

    def __init__(self, status_code: int, body: Any):
        super().__init__(f"Gemini API returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class GenerativeMalformedBody(GenerationError):
    """The generation endpoint answered with an unexpected body."""


class GeminiReplyGenerator:
    """Asks Gemini for a customer reply, insights and keywords."""

    def __init__(self, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the generator.

        Args:
            config: Application configuration (API key, model, base URL)
            transport: Optional httpx transport, used by tests
        """
        self.api_key = config.GEMINI_API_KEY
        self.model = config.GEMINI_MODEL
        self.base_url = config.GEMINI_BASE_URL.rstrip("/")
        self.timeout = config.REQUEST_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _build_prompt(self, sentiment: str, feedback: str) -> str:
        """Build the prompt for reply generation.

        The labeled layout is what reply_parser understands; anything the
        model writes outside the labels is ignored.
        """
        return f"""Analyze this {sentiment} feedback: "{feedback}"

You are a customer support agent. Write a short, friendly reply to the customer
and summarize what the feedback tells us about the product.

Respond using exactly this layout:
RESPONSE: <reply to the customer, at most 4 sentences>
KEY_INSIGHTS: <insight>; <insight>; <insight>
KEYWORDS: <keyword>, <keyword>, <keyword>

Do not use markdown or any other headings."""

    async def generate(self, sentiment: str, feedback: str) -> str:
        """Request generated text for a piece of feedback.

        Args:
            sentiment: Sentiment label detected for the feedback
            feedback: Raw customer feedback

        Returns:
            The generated text, stripped

        Raises:
            GenerativeNetworkFailure: If the HTTP request fails
            GenerativeBadStatus: If the API answers with an error status
            GenerativeMalformedBody: If the answer carries no generated text
        """
        if isinstance(sentiment, Sentiment):
            sentiment = sentiment.value

        payload = {
            "contents": [
                {"parts": [{"text": self._build_prompt(sentiment, feedback)}]}
            ]
        }

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise GenerativeNetworkFailure(f"Failed to call Gemini API: {e}") from e

        if not response.is_success:
            raise GenerativeBadStatus(response.status_code, self._error_body(response))

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise GenerativeMalformedBody(f"Gemini API returned invalid JSON: {e}") from e

        text = self._extract_text(data)
        logger.info(f"Gemini API response: {text}")
        return text

    @staticmethod
    def _error_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except json.JSONDecodeError:
            return response.text

    @staticmethod
    def _extract_text(data: Any) -> str:
        """Pull candidates[0].content.parts[0].text out of the API answer."""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerativeMalformedBody("Unexpected Gemini API response format") from e

        if not isinstance(text, str):
            raise GenerativeMalformedBody("Unexpected Gemini API response format")
        return text.strip()
