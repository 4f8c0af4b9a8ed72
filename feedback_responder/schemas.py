"""Pydantic schemas for request/response validation."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Sentiment(str, Enum):
    """Sentiment labels understood by the responder."""

    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class FeedbackRequest(BaseModel):
    """Request schema for feedback submission."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "feedback": "Arrived a day early and the packaging was lovely.",
                "price": 49.99,
                "rating": 5
            }
        }
    )

    feedback: str = Field(..., description="Customer feedback text")
    price: Optional[float] = Field(None, description="Price paid for the product")
    rating: Optional[float] = Field(None, description="Star rating given by the customer")


class SentimentResult(BaseModel):
    """Output of the sentiment classifier."""

    sentiment: Sentiment
    confidence: float = Field(..., ge=0, le=100)
    rating: int = Field(..., ge=1, le=5)


# Used whenever the classifier fails or does not answer in time
FALLBACK_SENTIMENT = SentimentResult(sentiment=Sentiment.NEUTRAL, confidence=50, rating=3)


class GeneratedReply(BaseModel):
    """Customer reply assembled from generated text."""

    customer_response: str = Field(..., min_length=1)
    key_insights: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)


class ResponsePayload(BaseModel):
    """Response schema returned for every feedback request."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "sentiment": "Positive",
                "confidence": 92,
                "rating": 5,
                "customerResponse": "Thank you so much for the kind words!",
                "keyInsights": ["Delivery was faster than expected"],
                "keywords": ["delivery", "packaging"],
                "offline": False
            }
        }
    )

    sentiment: Sentiment
    confidence: float
    rating: int
    customer_response: str = Field(..., min_length=1, alias="customerResponse")
    key_insights: List[str] = Field(default_factory=list, alias="keyInsights")
    keywords: List[str] = Field(default_factory=list)
    offline: bool = Field(..., description="True when no generated reply was used")
    error: Optional[str] = None
    fallback: Optional[bool] = None

    def to_json(self) -> dict:
        """Serialize with the public field names, dropping unset error fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StoredResponse(BaseModel):
    """A previously produced response, as listed by the history endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    feedback: str
    sentiment: str
    confidence: float
    rating: int
    customer_response: str = Field(..., alias="customerResponse")
    offline: bool
    created_at: str = Field(..., alias="createdAt")
