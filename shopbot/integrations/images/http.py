"""
Image fetcher backed by httpx, with local file support.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from shopbot.integrations.images.base import ImageFetcher

logger = logging.getLogger(__name__)


class HttpImageFetcher(ImageFetcher):
    """Downloads http(s) images and reads local files."""

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def fetch(self, reference: str | None) -> bytes | None:
        if not reference:
            return None

        if reference.startswith(("http://", "https://")):
            return await self._download(reference)

        return await self._read_file(Path(reference))

    async def _download(self, url: str) -> bytes | None:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Error fetching image {url}: {e}")
            return None
        return response.content or None

    async def _read_file(self, path: Path) -> bytes | None:
        if not path.is_file():
            logger.debug(f"Image reference is neither a URL nor a file: {path}")
            return None
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.warning(f"Error reading image {path}: {e}")
            return None

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
