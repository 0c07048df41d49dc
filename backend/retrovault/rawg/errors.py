"""Exceptions raised by the RAWG client."""


class RawgError(RuntimeError):
    """Base error for RAWG failures."""


class RawgNotConfiguredError(RawgError):
    """Raised when a request is attempted without an API key."""


class RawgNotFoundError(RawgError):
    """Raised when RAWG answers with HTTP 404."""
