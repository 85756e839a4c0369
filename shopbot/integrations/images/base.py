"""
Base interface for image fetching.
"""

from abc import ABC, abstractmethod


class ImageFetcher(ABC):
    """Abstract base class for image sources."""

    @abstractmethod
    async def fetch(self, reference: str | None) -> bytes | None:
        """
        Fetch image bytes.

        Args:
            reference: URL or local path

        Returns:
            Image bytes, or None when unavailable. Never raises.
        """
        pass

    async def close(self) -> None:
        """Release resources."""
        pass
