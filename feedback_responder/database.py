"""Database connection and response history operations."""
import asyncio
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from models import Base, ResponseRecord
from schemas import FeedbackRequest, ResponsePayload, StoredResponse


def in_memory(database_url: str) -> bool:
    """True for SQLite URLs without a database file."""
    return database_url.rstrip("/").endswith(":") or ":memory:" in database_url


class ResponseStore:
    """Stores produced responses so they can be reviewed later."""

    def __init__(self, database_url: str):
        options = {"connect_args": {"check_same_thread": False}, "echo": False}
        if in_memory(database_url):
            # One shared connection, or every session would see its own empty database
            options["poolclass"] = StaticPool
        self.engine = create_async_engine(database_url, **options)
        self.sessions = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        # SQLite allows one writer; sessions also share a connection in memory
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        """Create tables if they do not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    async def save(self, request: FeedbackRequest, payload: ResponsePayload) -> ResponseRecord:
        """Save a request and the payload returned for it.

        Args:
            request: The validated feedback request
            payload: The response sent back to the caller

        Returns:
            Saved ResponseRecord
        """
        record = ResponseRecord(
            feedback=request.feedback,
            price=request.price,
            customer_rating=request.rating,
            sentiment=payload.sentiment,
            confidence=payload.confidence,
            rating=payload.rating,
            customer_response=payload.customer_response,
            key_insights=list(payload.key_insights),
            keywords=list(payload.keywords),
            offline=payload.offline
        )

        async with self._lock, self.sessions() as db:
            db.add(record)
            await db.commit()
            await db.refresh(record)

        return record

    async def recent(self, limit: int = 20) -> List[StoredResponse]:
        """Most recent responses, newest first."""
        query = select(ResponseRecord).order_by(ResponseRecord.id.desc()).limit(limit)
        async with self._lock, self.sessions() as db:
            records = (await db.execute(query)).scalars().all()
        return [StoredResponse(**record.to_dict()) for record in records]
