"""Exceptions raised by washrelay components."""


class WashRelayError(Exception):
    """Base exception for washrelay errors."""

    pass


class StoreError(WashRelayError):
    """Raised when the record store cannot be read or written."""

    pass
