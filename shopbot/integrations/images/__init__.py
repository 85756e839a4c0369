"""
Image fetcher factory.
"""

from functools import lru_cache

from shopbot.config import settings
from shopbot.integrations.images.base import ImageFetcher
from shopbot.integrations.images.http import HttpImageFetcher


@lru_cache(maxsize=1)
def get_image_fetcher() -> ImageFetcher:
    """Get cached default image fetcher."""
    return HttpImageFetcher(timeout=settings.image_fetch_timeout)


__all__ = [
    "ImageFetcher",
    "HttpImageFetcher",
    "get_image_fetcher",
]
