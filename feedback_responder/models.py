"""Database models for response history."""
from datetime import datetime, UTC
from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ResponseRecord(Base):
    """A feedback request and the reply that was sent back."""

    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, index=True)
    feedback = Column(Text, nullable=False)
    price = Column(Float, nullable=True)
    customer_rating = Column(Float, nullable=True)
    sentiment = Column(String(20), nullable=False)  # Positive, Negative, Neutral
    confidence = Column(Float, nullable=False)
    rating = Column(Integer, nullable=False)
    customer_response = Column(Text, nullable=False)
    key_insights = Column(JSON, nullable=False, default=list)
    keywords = Column(JSON, nullable=False, default=list)
    offline = Column(Boolean, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    def to_dict(self):
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "feedback": self.feedback,
            "sentiment": self.sentiment,
            "confidence": self.confidence,
            "rating": self.rating,
            "customer_response": self.customer_response,
            "offline": self.offline,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
