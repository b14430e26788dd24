"""Image archive acquisition from a daemon export or a local file."""

import logging
from contextlib import aclosing
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles

from .core.daemon_client import DaemonClient
from .core.types import DaemonConfig, ImageReference
from .exceptions import ArchiveWriteError, TarReadError, UsageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageArchive:
    """A tar archive of one image, ready to be unpacked."""

    path: Path
    downloaded: bool


def check_source(image: Optional[ImageReference], archive: Optional[Path]) -> None:
    """Ensure exactly one archive source was requested.

    Raises:
        UsageError: If both or neither of image and archive are given
    """
    if image is not None and archive is not None:
        raise UsageError("Specify either an image or an archive file, not both")
    if image is None and archive is None:
        raise UsageError("Specify an image or an archive file")


async def download_image(
    client: DaemonClient, reference: ImageReference, destination: Path
) -> int:
    """Write a daemon export of an image to a file.

    Chunks are written in the order they arrive and flushed one by one, so
    an interrupted export leaves a valid prefix on disk.

    Args:
        client: Open daemon client
        reference: Image to export
        destination: File to create

    Returns:
        Number of bytes written

    Raises:
        DaemonConnectionError: If the daemon is unreachable or the stream fails
        ImageNotFoundError: If the daemon does not have the image
        ArchiveWriteError: If the file cannot be written
    """
    image = str(reference)
    await client.ping()
    await client.inspect_image(image)

    logger.info("Exporting image %s", image)
    written = 0
    try:
        async with aiofiles.open(destination, "wb") as f, aclosing(
            client.export_image(image)
        ) as chunks:
            async for chunk in chunks:
                await f.write(chunk)
                await f.flush()
                written += len(chunk)
    except OSError as e:
        raise ArchiveWriteError(f"Failed to write {destination}: {e}") from e

    logger.debug("Wrote %d bytes to %s", written, destination)
    return written


async def acquire_archive(
    scratch: Path,
    image: Optional[ImageReference] = None,
    archive: Optional[Path] = None,
    daemon: Optional[DaemonConfig] = None,
) -> ImageArchive:
    """Produce a local tar archive for the requested image.

    Args:
        scratch: Scratch area receiving a downloaded export
        image: Image to export from the daemon
        archive: Existing archive file, used as-is
        daemon: Daemon configuration used when exporting

    Returns:
        The archive and whether it was downloaded into the scratch area

    Raises:
        UsageError: If both or neither of image and archive are given
        TarReadError: If the archive file does not exist
    """
    check_source(image, archive)

    if archive is not None:
        if not archive.is_file():
            raise TarReadError(f"Tar file not found: {archive}")
        logger.debug("Using existing archive %s", archive)
        return ImageArchive(path=archive, downloaded=False)

    destination = scratch / image.archive_name
    logger.debug("Tar file: %s", destination)
    async with DaemonClient(daemon) as client:
        await download_image(client, image, destination)
    return ImageArchive(path=destination, downloaded=True)
