"""Configuration management for the feedback responder."""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration.

    Values come from the environment; keyword overrides win so tests can
    build a handler without touching os.environ.
    """

    def __init__(self, **overrides):
        # Gemini Configuration
        self.GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
        self.GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self.GEMINI_BASE_URL = os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )

        # Deployment Configuration
        self.APP_ENV = os.getenv("APP_ENV", "production")
        # Platform request limit is 10s, keep a margin
        self.REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "9.0"))

        # Sentiment Model Configuration
        self.SENTIMENT_MODEL = os.getenv(
            "SENTIMENT_MODEL", "siebert/sentiment-roberta-large-english"
        )
        self.NEUTRAL_THRESHOLD = float(os.getenv("NEUTRAL_THRESHOLD", "0.65"))

        # Database Configuration
        self.STORE_RESPONSES = os.getenv("STORE_RESPONSES", "true").lower() == "true"
        self.DATABASE_URL = os.getenv(
            "DATABASE_URL", "sqlite+aiosqlite:///./feedback_responses.db"
        )

        for name, value in overrides.items():
            if not hasattr(self, name):
                raise AttributeError(f"Unknown config option: {name}")
            setattr(self, name, value)

    @property
    def development(self) -> bool:
        return self.APP_ENV.lower() == "development"

    @property
    def offline_only(self) -> bool:
        """True when replies must come from static templates only."""
        return not self.GEMINI_API_KEY or self.development


config = Config()
