"""
Subscriber storage layer.

Provides the subscriber record types and the SQL-backed store for the
`emails` table.
"""

from core.storage.base import (
    EPOCH,
    BaseSubscriberRepository,
    PageParams,
    SubscriberEntry,
)
from core.storage.sql import SubscriberRepository

__all__ = [
    # Records
    "EPOCH",
    "PageParams",
    "SubscriberEntry",
    # Interfaces and implementations
    "BaseSubscriberRepository",
    "SubscriberRepository",
]
