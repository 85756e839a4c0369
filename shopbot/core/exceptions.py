"""
Exceptions raised by the shop core.
"""


class ShopBotError(Exception):
    """Base class for shop bot errors."""


class CatalogError(ShopBotError):
    """Catalog file is missing or malformed."""


class SessionStoreError(ShopBotError):
    """Session storage is unavailable."""
