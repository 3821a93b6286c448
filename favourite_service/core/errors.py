"""
Error types raised by the favourite service.
"""


class FavouriteServiceError(Exception):
    """Base class for all favourite service errors."""


class FavouriteNotFoundError(FavouriteServiceError):
    """Raised when no favourite exists for the requested key.

    This is the only failure allowed to abort an aggregation.
    """
    def __init__(self, key):
        super().__init__(f"Favourite with id: {key} not found!")
        self.key = key


class InvalidKeyError(FavouriteServiceError, ValueError):
    """Raised when a composite key cannot be built from its textual form."""
