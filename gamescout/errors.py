"""Exception types raised by the wishlist layers."""


class WishlistError(Exception):
    """Base class for every error raised by :mod:`gamescout`."""


class WriteFailure(WishlistError):
    """A write to the durable medium did not take effect.

    The in-process cache has already been invalidated when this is raised,
    so the next read re-derives the collection from the medium.
    """

    def __init__(self, key: str, message: str = '') -> None:
        self.key = key
        super().__init__(message or f"Write to '{key}' did not complete")


class MediumUnavailable(WishlistError):
    """The durable medium cannot be reached in this environment."""


class DeserializationFailure(WishlistError, ValueError):
    """Stored content could not be parsed into a wishlist collection."""


class ConfigError(WishlistError):
    """The configuration file could not be read or holds invalid values."""
