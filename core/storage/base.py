"""
Abstract base classes for subscriber storage.

This module defines the record types and the contract every subscriber
store implementation follows.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional

from core.errors import InvalidArgumentError


# Sentinel for "never confirmed"
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

# Largest value SQLite binds as INTEGER
MAX_SQL_INTEGER = 2**63 - 1


@dataclass
class SubscriberEntry:
    """
    One mailing-list participant.

    confirmed_at is EPOCH until the address is confirmed. id is None for
    entries that have not been read back from storage.
    """
    email: str
    confirmed_at: datetime = EPOCH
    opt_out: bool = False
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Any) -> "SubscriberEntry":
        """
        Decode a row of (id, email, confirmed_at, opt_out).

        confirmed_at is stored as integer epoch seconds; a NULL is read as
        EPOCH. opt_out comes back as 0/1 on SQLite and as a bool elsewhere.
        """
        confirmed_at = row.confirmed_at or 0
        return cls(
            id=int(row.id),
            email=str(row.email),
            confirmed_at=datetime.fromtimestamp(int(confirmed_at), tz=timezone.utc),
            opt_out=bool(row.opt_out),
        )


@dataclass(frozen=True)
class PageParams:
    """
    Pagination parameters.

    offset is a 1-based page number, limit is the page size.
    """
    offset: int = 1
    limit: int = 25

    def __post_init__(self) -> None:
        if not isinstance(self.offset, int) or self.offset < 1:
            raise InvalidArgumentError(f"offset must be a positive integer, got {self.offset!r}")
        if not isinstance(self.limit, int) or self.limit < 1:
            raise InvalidArgumentError(f"limit must be a positive integer, got {self.limit!r}")
        if self.limit > MAX_SQL_INTEGER or self.skip > MAX_SQL_INTEGER:
            raise InvalidArgumentError(
                f"page out of range: offset={self.offset}, limit={self.limit}"
            )

    @property
    def skip(self) -> int:
        """Number of rows before the first row of this page."""
        return (self.offset - 1) * self.limit


class BaseSubscriberRepository(ABC):
    """
    Abstract base class for subscriber storage.

    Implementations are stateless between calls and rely on the backing
    engine for atomicity of the unique-key insert and upsert.
    """

    @abstractmethod
    async def setup(self) -> None:
        """
        Initialize the storage (create the emails table).

        This should be idempotent.
        """
        pass

    @abstractmethod
    async def create(self, email: str) -> None:
        """
        Subscribe a new email with confirmed_at=EPOCH and opt_out=False.

        Raises AlreadySubscribedError if the email exists.
        """
        pass

    @abstractmethod
    async def get(self, email: str) -> Optional[SubscriberEntry]:
        """Get a subscriber by email, or None."""
        pass

    @abstractmethod
    async def upsert(self, entry: SubscriberEntry) -> None:
        """
        Insert or update entry.email, stamping confirmed_at with the
        current time and setting opt_out to entry.opt_out.
        """
        pass

    @abstractmethod
    async def delete(self, email: str) -> None:
        """
        Unsubscribe: set opt_out for the email.

        Unknown emails are ignored.
        """
        pass

    @abstractmethod
    def iter_page(self, params: PageParams) -> AsyncIterator[SubscriberEntry]:
        """Stream one page of subscribers ordered by ascending id."""
        pass

    async def list_page(self, params: PageParams) -> list[SubscriberEntry]:
        """Collect one page of subscribers ordered by ascending id."""
        entries: list[SubscriberEntry] = []
        async for entry in self.iter_page(params):
            entries.append(entry)
        return entries
