"""
SQL storage backend for subscribers.

Uses SQLAlchemy async with plain-text statements against SQLite through
aiosqlite. `id INTEGER PRIMARY KEY` aliases the rowid, so ids are assigned
by the engine and never reused. The upsert relies on INSERT ... ON CONFLICT
(SQLite 3.24+).
"""

from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from core.errors import AlreadySubscribedError, InvalidArgumentError, StorageError
from core.logging import get_logger
from core.storage.base import BaseSubscriberRepository, PageParams, SubscriberEntry


logger = get_logger(__name__)


CREATE_EMAILS_TABLE = """
    CREATE TABLE IF NOT EXISTS emails (
        id            INTEGER PRIMARY KEY,
        email         TEXT UNIQUE,
        confirmed_at  INTEGER,
        opt_out       BOOLEAN NOT NULL DEFAULT FALSE
    )
"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_email(email: str, required: bool = True) -> None:
    if required and not email:
        raise InvalidArgumentError("email must not be empty")
    try:
        email.encode("utf-8")
    except UnicodeEncodeError as exc:
        logger.warning("Rejected email that is not valid UTF-8", email=repr(email))
        raise InvalidArgumentError("email is not valid UTF-8 text") from exc


class SubscriberRepository(BaseSubscriberRepository):
    """
    Subscriber store backed by the `emails` table.

    The engine is supplied by the caller and shared read-only; this class
    never disposes it.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the repository.

        Args:
            engine: Async SQLAlchemy engine owned by the composing application
            clock: Source of "now" for confirmation timestamps
        """
        self._engine = engine
        self._clock = clock

    async def setup(self) -> None:
        """Create the emails table if it does not exist."""
        try:
            async with self._engine.begin() as conn:
                await conn.execute(text(CREATE_EMAILS_TABLE))
        except SQLAlchemyError as exc:
            logger.critical("Failed to create emails table", error=str(exc))
            raise StorageError("failed to create emails table") from exc

        logger.info("Subscriber store initialized")

    async def create(self, email: str) -> None:
        """Insert a new, unconfirmed subscriber."""
        _check_email(email)

        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    text("""
                        INSERT INTO emails (email, confirmed_at, opt_out)
                        VALUES (:email, 0, :opt_out)
                    """),
                    {"email": email, "opt_out": False},
                )
        except IntegrityError as exc:
            logger.warning("Email already subscribed", email=email)
            raise AlreadySubscribedError(email) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to create subscriber", email=email, error=str(exc))
            raise StorageError(f"failed to create subscriber {email}") from exc

        logger.debug("Subscriber created", email=email)

    async def get(self, email: str) -> Optional[SubscriberEntry]:
        """Get a subscriber by email."""
        _check_email(email, required=False)
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    text("""
                        SELECT id, email, confirmed_at, opt_out
                        FROM emails
                        WHERE email = :email
                    """),
                    {"email": email},
                )
                row = result.first()
        except SQLAlchemyError as exc:
            logger.error("Failed to read subscriber", email=email, error=str(exc))
            raise StorageError(f"failed to read subscriber {email}") from exc

        if row is None:
            return None

        return self._decode(row)

    async def upsert(self, entry: SubscriberEntry) -> None:
        """Confirm a subscriber, creating it if needed, in one statement."""
        _check_email(entry.email)
        confirmed_at = int(self._clock().timestamp())

        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    text("""
                        INSERT INTO emails (email, confirmed_at, opt_out)
                        VALUES (:email, :confirmed_at, :opt_out)
                        ON CONFLICT (email) DO UPDATE SET
                            confirmed_at = :confirmed_at,
                            opt_out = :opt_out
                    """),
                    {
                        "email": entry.email,
                        "confirmed_at": confirmed_at,
                        "opt_out": entry.opt_out,
                    },
                )
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to upsert subscriber",
                email=entry.email,
                opt_out=entry.opt_out,
                error=str(exc),
            )
            raise StorageError(f"failed to update subscriber {entry.email}") from exc

        logger.debug(
            "Subscriber confirmed",
            email=entry.email,
            opt_out=entry.opt_out,
            confirmed_at=confirmed_at,
        )

    async def delete(self, email: str) -> None:
        """Set opt_out for the email. Rows are never removed."""
        _check_email(email, required=False)
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(
                    text("""
                        UPDATE emails
                        SET opt_out = :opt_out
                        WHERE email = :email
                    """),
                    {"email": email, "opt_out": True},
                )
                updated = result.rowcount
        except SQLAlchemyError as exc:
            logger.error("Failed to unsubscribe", email=email, error=str(exc))
            raise StorageError(f"failed to unsubscribe {email}") from exc

        if updated > 0:
            logger.info("Subscriber opted out", email=email)

    async def iter_page(self, params: PageParams) -> AsyncIterator[SubscriberEntry]:
        """
        Stream a page of subscribers from a server-side cursor.

        The connection is held until the iterator is exhausted or closed.
        Callers that may stop early should wrap it in contextlib.aclosing():

            async with aclosing(repo.iter_page(params)) as entries:
                async for entry in entries:
                    ...
        """
        try:
            async with self._engine.connect() as conn:
                async with conn.stream(
                    text("""
                        SELECT id, email, confirmed_at, opt_out
                        FROM emails
                        ORDER BY id ASC
                        LIMIT :limit OFFSET :skip
                    """),
                    {"limit": params.limit, "skip": params.skip},
                ) as result:
                    async for row in result:
                        yield self._decode(row)
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to list subscribers",
                offset=params.offset,
                limit=params.limit,
                error=str(exc),
            )
            raise StorageError("failed to list subscribers") from exc

    def _decode(self, row: Any) -> SubscriberEntry:
        try:
            return SubscriberEntry.from_row(row)
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            logger.error("Failed to decode subscriber row", row=tuple(row), error=str(exc))
            raise StorageError("failed to decode subscriber row") from exc
