"""Sentiment classifier using a pre-trained RoBERTa sentiment model."""
import asyncio
import logging
import threading
from typing import Optional, Tuple

import torch
from transformers import AutoModelForSequenceClassification, AutoTokenizer

from config import Config
from schemas import Sentiment, SentimentResult

logger = logging.getLogger(__name__)


class ClassifierFailure(Exception):
    """The sentiment classifier could not produce a result."""


class RobertaSentimentClassifier:
    """Sentiment classifier built on siebert/sentiment-roberta-large-english.

    The model is binary (0=NEGATIVE, 1=POSITIVE); predictions below the
    neutral threshold are reported as Neutral. Call ``load`` at startup;
    otherwise the model is loaded by the first ``classify`` call.
    """

    def __init__(self, config: Config):
        """Initialize the classifier without loading the model."""
        self.model_name = config.SENTIMENT_MODEL
        self.neutral_threshold = config.NEUTRAL_THRESHOLD
        self.tokenizer = None
        self.model = None
        self.available: Optional[bool] = None
        self._load_lock = threading.Lock()

    def load(self) -> None:
        """Load the model once; later calls return immediately."""
        with self._load_lock:
            if self.available is not None:
                return
            try:
                logger.info(f"Loading sentiment model {self.model_name}...")
                self.tokenizer = AutoTokenizer.from_pretrained(self.model_name)
                self.model = AutoModelForSequenceClassification.from_pretrained(self.model_name)
                self.model.eval()
                self.available = True
                logger.info("Sentiment model loaded successfully")
            except Exception as e:
                logger.error(f"Failed to load sentiment model: {e}")
                self.available = False

    async def classify(
        self,
        feedback: str,
        price: Optional[float] = None,
        rating: Optional[float] = None
    ) -> SentimentResult:
        """Classify customer feedback.

        Args:
            feedback: The customer feedback text
            price: Price paid, if known
            rating: Star rating given by the customer, if any

        Returns:
            SentimentResult with label, confidence (0-100) and rating (1-5)

        Raises:
            ClassifierFailure: If the model is unavailable or inference fails
        """
        return await asyncio.to_thread(self._classify_sync, feedback, price, rating)

    def _classify_sync(
        self,
        feedback: str,
        price: Optional[float],
        rating: Optional[float]
    ) -> SentimentResult:
        self.load()
        if not self.available:
            raise ClassifierFailure("Sentiment model unavailable")

        try:
            positive, top = self._predict(feedback)
        except Exception as e:
            raise ClassifierFailure(f"Sentiment inference failed: {e}") from e

        sentiment = self.label_for(positive, top, rating, self.neutral_threshold)
        result = SentimentResult(
            sentiment=sentiment,
            confidence=round(top * 100),
            rating=self.rating_for(positive, rating),
        )
        logger.debug(
            f"Classified feedback as {result.sentiment.value} "
            f"(confidence: {result.confidence}, price: {price})"
        )
        return result

    def _predict(self, text: str) -> Tuple[float, float]:
        """Run the model and return (positive probability, top probability)."""
        inputs = self.tokenizer(
            text,
            return_tensors="pt",
            truncation=True,
            max_length=512,
            padding=True
        )

        with torch.no_grad():
            outputs = self.model(**inputs)
            predictions = torch.nn.functional.softmax(outputs.logits, dim=-1)

        positive = predictions[0][1].item()
        return positive, max(positive, 1 - positive)

    @staticmethod
    def label_for(
        positive: float,
        top: float,
        rating: Optional[float],
        neutral_threshold: float
    ) -> Sentiment:
        """Map model probabilities, and the customer's rating, to a label."""
        if top >= neutral_threshold:
            return Sentiment.POSITIVE if positive >= 0.5 else Sentiment.NEGATIVE

        # Uncertain text: let an explicit star rating decide
        if rating is not None:
            if rating >= 4:
                return Sentiment.POSITIVE
            if rating <= 2:
                return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL

    @staticmethod
    def rating_for(positive: float, rating: Optional[float]) -> int:
        """Customer rating when given, otherwise derived from the positive score."""
        if rating is not None:
            return min(5, max(1, round(rating)))
        return min(5, max(1, round(1 + 4 * positive)))
