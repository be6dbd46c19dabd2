"""
GameScout wishlist package.

Introduces a layered architecture:

  gamescout/repositories/: pure I/O, the key-value media the wishlist is persisted to.
  gamescout/cache.py:       process-local TTL cache over a single medium key.
  gamescout/services/:      business logic: add/remove/toggle rules, write-through.

``build_service`` (in ``gamescout/cli.py``) is the integration point: it creates
the store and service instances from the loaded configuration.  Callers
construct one :class:`~gamescout.services.WishlistService` at start-up and
pass it by reference rather than relying on module-level state.
"""

__version__ = '0.3.0'
