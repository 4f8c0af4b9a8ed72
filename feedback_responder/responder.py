"""Request handler: classify feedback and compose the customer reply."""
import logging
from typing import Optional, Protocol

from composer import compose_reply, fallback_response
from config import Config
from reply_generator import GenerativeBadStatus, GenerativeTimeout
from reply_parser import parse_reply
from schemas import (
    FALLBACK_SENTIMENT,
    FeedbackRequest,
    ResponsePayload,
    Sentiment,
    SentimentResult,
)
from timeout_race import Deadline, RaceTimeout, race

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"


class Classifier(Protocol):
    async def classify(
        self, feedback: str, price: Optional[float], rating: Optional[float]
    ) -> SentimentResult: ...


class ReplyGenerator(Protocol):
    async def generate(self, sentiment: str, feedback: str) -> str: ...


def server_error_payload() -> ResponsePayload:
    """Degraded payload returned when a request cannot be processed at all."""
    return ResponsePayload(
        sentiment=FALLBACK_SENTIMENT.sentiment,
        confidence=FALLBACK_SENTIMENT.confidence,
        rating=FALLBACK_SENTIMENT.rating,
        customer_response=fallback_response(Sentiment.NEUTRAL),
        offline=True,
        error=SERVER_ERROR,
        fallback=True
    )


class FeedbackResponder:
    """Turns one piece of customer feedback into a ResponsePayload.

    Stages run strictly in order: sentiment first, then (when allowed)
    generation. Both stages share one deadline per request and every
    failure degrades to static template text.
    """

    def __init__(
        self,
        config: Config,
        classifier: Classifier,
        generator: Optional[ReplyGenerator] = None
    ):
        self.config = config
        self.classifier = classifier
        self.generator = generator

    @property
    def generation_enabled(self) -> bool:
        return self.generator is not None and not self.config.offline_only

    async def classify(self, request: FeedbackRequest, deadline: Deadline) -> SentimentResult:
        """Sentiment for the request, or the fixed fallback on failure."""
        try:
            result = await race(
                self.classifier.classify(request.feedback, request.price, request.rating),
                deadline,
                label="sentiment analysis"
            )
            # Collaborators may hand back plain dicts
            return SentimentResult.model_validate(result)
        except Exception as e:
            logger.warning(f"Sentiment analysis error or timeout: {e}. Using neutral fallback")
            return FALLBACK_SENTIMENT

    async def respond(self, request: FeedbackRequest) -> ResponsePayload:
        """Build the response payload for a validated request."""
        deadline = Deadline(self.config.REQUEST_TIMEOUT_SECONDS)
        sentiment = await self.classify(request, deadline)

        offline_payload = ResponsePayload(
            sentiment=sentiment.sentiment,
            confidence=sentiment.confidence,
            rating=sentiment.rating,
            customer_response=fallback_response(sentiment.sentiment),
            offline=True
        )

        # Skip generation when no API key is configured or in development
        if not self.generation_enabled:
            return offline_payload

        try:
            text = await self._generate(sentiment.sentiment, request.feedback, deadline)
        except GenerativeBadStatus as e:
            logger.error(f"Gemini API error: {e.body}")
            return offline_payload
        except Exception as e:
            logger.warning(f"Reply generation failed: {e}. Using fallback response")
            return offline_payload

        reply = compose_reply(parse_reply(text), sentiment.sentiment)
        return offline_payload.model_copy(update={
            "customer_response": reply.customer_response,
            "key_insights": reply.key_insights,
            "keywords": reply.keywords,
            "offline": False
        })

    async def _generate(self, sentiment: Sentiment, feedback: str, deadline: Deadline) -> str:
        try:
            return await race(
                self.generator.generate(sentiment.value, feedback),
                deadline,
                label="reply generation"
            )
        except RaceTimeout as e:
            raise GenerativeTimeout(str(e)) from e
