"""
Subscriber request and response schemas.

These Pydantic models define the JSON contract an HTTP layer exchanges
with clients; they convert to and from the store's record types.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core.config import get_settings
from core.storage.base import PageParams, SubscriberEntry


class SubscriberIn(BaseModel):
    """Request body for subscribing or unsubscribing an email."""

    email: str = Field(
        ...,
        min_length=1,
        description="Email address",
        examples=["jane@example.com"],
    )


class ConfirmRequest(BaseModel):
    """Request body for confirming a subscriber or changing its opt-out flag."""

    email: str = Field(
        ...,
        min_length=1,
        description="Email address",
        examples=["jane@example.com"],
    )
    opt_out: bool = Field(
        default=False,
        description="Exclude the address from future mailings",
    )

    def to_entry(self) -> SubscriberEntry:
        return SubscriberEntry(email=self.email, opt_out=self.opt_out)


class PageQuery(BaseModel):
    """
    Pagination query parameters. offset is a 1-based page number.

    limit defaults to settings.default_page_size and may not exceed
    settings.max_page_size.
    """

    offset: int = Field(default=1, ge=1, description="Page number, starting at 1")
    limit: int = Field(
        default_factory=lambda: get_settings().default_page_size,
        ge=1,
        description="Page size",
    )

    @field_validator("limit")
    @classmethod
    def limit_within_max(cls, value: int) -> int:
        max_page_size = get_settings().max_page_size
        if value > max_page_size:
            raise ValueError(f"limit may not exceed {max_page_size}")
        return value

    def to_params(self) -> PageParams:
        return PageParams(offset=self.offset, limit=self.limit)


class SubscriberOut(BaseModel):
    """A subscriber on the wire. id is null until the entry has been stored."""

    id: Optional[int] = Field(
        default=None,
        description="Storage-assigned identifier; null for entries not yet stored",
    )
    email: str = Field(..., description="Email address")
    confirmed_at: datetime = Field(
        ...,
        description="Confirmation time; 1970-01-01T00:00:00Z means never confirmed",
    )
    opt_out: bool = Field(..., description="Whether the address is excluded from mailings")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "email": "jane@example.com",
                    "confirmed_at": "2024-01-15T10:00:00Z",
                    "opt_out": False,
                }
            ]
        }
    }

    @classmethod
    def from_entry(cls, entry: SubscriberEntry) -> "SubscriberOut":
        return cls(
            id=entry.id,
            email=entry.email,
            confirmed_at=entry.confirmed_at,
            opt_out=entry.opt_out,
        )
