"""Services package: expose all concrete services from one import."""
from .wishlist_service import DEFAULT_STORAGE_KEY, WishlistService

__all__ = [
    'DEFAULT_STORAGE_KEY',
    'WishlistService',
]
