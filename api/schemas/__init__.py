"""
Pydantic schemas for API request/response validation.
"""

from api.schemas.subscriber import (
    ConfirmRequest,
    PageQuery,
    SubscriberIn,
    SubscriberOut,
)

__all__ = [
    "ConfirmRequest",
    "PageQuery",
    "SubscriberIn",
    "SubscriberOut",
]
