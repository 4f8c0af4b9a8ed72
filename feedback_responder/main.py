"""Main FastAPI application for feedback replies."""
import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config import Config, config as default_config
from database import ResponseStore
from reply_generator import GeminiReplyGenerator
from responder import Classifier, FeedbackResponder, ReplyGenerator, server_error_payload
from schemas import FeedbackRequest
from sentiment_classifier import RobertaSentimentClassifier

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def server_error_response() -> JSONResponse:
    # Always 200 so the caller still gets a usable reply
    return JSONResponse(status_code=status.HTTP_200_OK, content=server_error_payload().to_json())


def build_store(config: Config) -> Optional[ResponseStore]:
    return ResponseStore(config.DATABASE_URL) if config.STORE_RESPONSES else None


def create_app(
    config: Config = default_config,
    classifier: Optional[Classifier] = None,
    generator: Optional[ReplyGenerator] = None,
    store: Optional[ResponseStore] = None
) -> FastAPI:
    """Build the application.

    Args:
        config: Application configuration
        classifier: Sentiment classifier (RoBERTa model by default)
        generator: Reply generator (Gemini by default)
        store: Response history store, None disables history

    Returns:
        Configured FastAPI application
    """
    responder = FeedbackResponder(
        config,
        classifier or RobertaSentimentClassifier(config),
        generator or GeminiReplyGenerator(config)
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        load = getattr(responder.classifier, "load", None)
        if callable(load):
            logger.info("Loading sentiment classifier...")
            await asyncio.to_thread(load)
        if store is not None:
            logger.info("Initializing database...")
            await store.init()
        mode = "offline" if config.offline_only else "online"
        logger.info(f"Application started successfully (reply generation {mode})")
        yield
        logger.info("Application shutting down")
        if store is not None:
            await store.close()

    app = FastAPI(
        title="Customer Feedback Responder API",
        description="Sentiment analysis and customer replies for product feedback",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.responder = responder
    app.state.store = store

    @app.post("/api/analyze-feedback")
    async def analyze_feedback(request: Request):
        """Classify feedback and reply to the customer.

        This endpoint:
        1. Classifies sentiment (neutral fallback on failure or timeout)
        2. Returns a template reply when generation is disabled
        3. Otherwise asks Gemini for a reply, insights and keywords
        4. Falls back to the template reply if generation fails
        5. Stores the response for later review

        Malformed bodies never produce an error status; the caller gets a
        neutral reply with ``error`` set instead.
        """
        try:
            feedback_request = FeedbackRequest.model_validate(await request.json())
            payload = await responder.respond(feedback_request)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.error(f"Server error: malformed request body: {e}")
            return server_error_response()
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            return server_error_response()

        logger.info(
            f"Responded to feedback: {payload.sentiment} "
            f"({'offline' if payload.offline else 'generated'})"
        )

        if store is not None:
            try:
                await store.save(feedback_request, payload)
            except Exception as e:
                logger.error(f"Failed to store response: {e}")

        return JSONResponse(content=payload.to_json())

    @app.get("/api/responses")
    async def list_responses(limit: int = Query(20, ge=1, le=100)):
        """Most recent stored responses, newest first."""
        if store is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Response history is disabled"
            )
        responses = await store.recent(limit)
        return [response.model_dump(by_alias=True) for response in responses]

    @app.get("/health")
    async def health_check():
        """Health check endpoint.

        Returns system status including reply generation mode.
        """
        return {
            "status": "healthy",
            "reply_generation": "online" if responder.generation_enabled else "offline",
            "history": "enabled" if store is not None else "disabled"
        }

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "Customer Feedback Responder API",
            "version": "1.0.0",
            "endpoints": {
                "analyze": "POST /api/analyze-feedback",
                "history": "GET /api/responses",
                "health": "GET /health"
            }
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Global exception handler for unexpected errors outside feedback analysis."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )

    return app


app = create_app(store=build_store(default_config))
