"""Container daemon async client (Docker Engine API subset)."""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional
from urllib.parse import quote

import aiohttp

from ..exceptions import DaemonConnectionError, ImageNotFoundError
from .session import create_session
from .types import DaemonConfig

logger = logging.getLogger(__name__)

EXPORT_CHUNK_SIZE = 64 * 1024


class DaemonClient:
    """Async client for the image endpoints of a local container daemon."""

    def __init__(
        self,
        config: Optional[DaemonConfig] = None,
        chunk_size: int = EXPORT_CHUNK_SIZE,
    ) -> None:
        """Initialize the daemon client.

        Args:
            config: Daemon endpoint configuration
            chunk_size: Size of the chunks yielded by export_image
        """
        self.config = config or DaemonConfig()
        self.chunk_size = chunk_size
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "DaemonClient":
        """Enter async context manager."""
        if not self.session:
            self.session = await create_session(self.config)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _image_path(self, image: str, action: str) -> str:
        return f"/images/{quote(image, safe='/:')}/{action}"

    def _request_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.config.timeout)

    async def ping(self) -> None:
        """Check that the daemon answers.

        Raises:
            DaemonConnectionError: If the daemon is unreachable or unhealthy
        """
        try:
            async with self.session.get(
                self._url("/_ping"), timeout=self._request_timeout()
            ) as resp:
                if resp.status != 200:
                    raise DaemonConnectionError(
                        f"Daemon at {self.config.host} answered ping with HTTP {resp.status}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DaemonConnectionError(
                f"Cannot reach daemon at {self.config.host}: {e}"
            ) from e

    async def inspect_image(self, image: str) -> Dict[str, Any]:
        """Inspect an image known to the daemon.

        Args:
            image: Image reference (name:version)

        Returns:
            Image inspect document

        Raises:
            ImageNotFoundError: If the daemon does not have the image
            DaemonConnectionError: If the request fails
        """
        try:
            async with self.session.get(
                self._url(self._image_path(image, "json")),
                timeout=self._request_timeout(),
            ) as resp:
                if resp.status == 404:
                    raise ImageNotFoundError(f"Image not found: {image}")
                resp.raise_for_status()
                return await resp.json()
        except aiohttp.ClientResponseError as e:
            raise DaemonConnectionError(
                f"Failed to inspect image {image}: HTTP {e.status}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DaemonConnectionError(f"Failed to inspect image {image}: {e}") from e

    async def export_image(self, image: str) -> AsyncIterator[bytes]:
        """Stream an image export as an ordered sequence of byte chunks.

        Args:
            image: Image reference (name:version)

        Yields:
            Chunks of the exported tar archive, in order

        Raises:
            ImageNotFoundError: If the daemon does not have the image
            DaemonConnectionError: If the request or the stream fails
        """
        logger.debug("Requesting export of %s", image)
        try:
            async with self.session.get(self._url(self._image_path(image, "get"))) as resp:
                if resp.status == 404:
                    raise ImageNotFoundError(f"Image not found: {image}")
                resp.raise_for_status()

                async for chunk in resp.content.iter_chunked(self.chunk_size):
                    yield chunk
        except aiohttp.ClientResponseError as e:
            raise DaemonConnectionError(
                f"Failed to export image {image}: HTTP {e.status}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DaemonConnectionError(f"Failed to export image {image}: {e}") from e
