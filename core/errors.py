"""
Typed errors raised by the subscriber store.

Absence is not an error: lookups return None when no row matches.
Everything else the engine reports surfaces as one of the classes below,
chained to the original driver exception.
"""


class SubscriberStoreError(Exception):
    """Base class for all subscriber store failures."""

    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AlreadySubscribedError(SubscriberStoreError):
    """The email is already present (unique constraint on emails.email)."""

    http_status = 409

    def __init__(self, email: str):
        super().__init__(f"{email} is already subscribed")
        self.email = email


class InvalidArgumentError(SubscriberStoreError, ValueError):
    """Caller-supplied input is out of range (empty email, bad page params)."""

    http_status = 400


class StorageError(SubscriberStoreError):
    """Connectivity, statement or row-decode failure in the backing engine."""

    http_status = 500
