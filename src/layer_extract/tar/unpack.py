"""Tar archive unpacking."""

import asyncio
import logging
import os
import tarfile
from pathlib import Path
from typing import Callable, List

from ..exceptions import TarReadError

logger = logging.getLogger(__name__)

# Permission bits plus setuid/setgid/sticky, as encoded in the archive
MODE_MASK = 0o7777


def _is_within(root: str, path: str) -> bool:
    return path == root or path.startswith(root + os.sep)


def is_safe_member(member: tarfile.TarInfo, destination: Path) -> bool:
    """Check that a member stays inside the destination directory.

    Leading slashes are ignored, the same way extraction strips them. Hard
    link targets must stay inside the destination as well.

    Args:
        member: Tar member to check
        destination: Extraction directory

    Returns:
        True if the member path does not escape the destination
    """
    root = os.path.normpath(os.path.abspath(destination))
    target = os.path.normpath(os.path.join(root, member.name.lstrip("/")))
    if not _is_within(root, target):
        return False
    if member.islnk():
        link_target = os.path.normpath(os.path.join(root, member.linkname.lstrip("/")))
        return _is_within(root, link_target)
    return True


def _read_members(tar: tarfile.TarFile, destination: Path) -> List[tarfile.TarInfo]:
    members = tar.getmembers()
    for member in members:
        if not is_safe_member(member, destination):
            raise TarReadError(f"Refusing to extract {member.name!r}: path escapes destination")
    return members


def make_layer_filter(
    destination: Path,
) -> Callable[[tarfile.TarInfo, str], tarfile.TarInfo]:
    """Build the extraction filter used for image archives and layers.

    Unlike the built-in filters, the final path component is never
    resolved: an existing symlink at the member path belongs to an earlier
    layer and is replaced, not followed. Only the parent directory has to
    resolve inside the destination. Mode bits are kept as encoded.

    Args:
        destination: Extraction directory

    Returns:
        Filter callable for TarFile.extractall
    """
    root = os.path.realpath(destination)

    def layer_filter(member: tarfile.TarInfo, dest_path: str) -> tarfile.TarInfo:
        name = member.name.lstrip("/")
        target = os.path.join(root, name)
        parent = os.path.realpath(os.path.dirname(target))
        if not _is_within(root, parent):
            raise tarfile.OutsideDestinationError(
                member, os.path.join(parent, os.path.basename(name))
            )

        # Runs right before this member is written
        if os.path.islink(target):
            os.unlink(target)

        linkname = member.linkname.lstrip("/") if member.islnk() else member.linkname
        return member.replace(
            name=name, linkname=linkname, mode=member.mode & MODE_MASK, deep=False
        )

    return layer_filter


def unpack_archive_sync(archive_path: Path, destination: Path) -> int:
    """Extract every member of a tar archive into a directory (sync helper).

    Members are written in archive order. Existing files are overwritten.
    Compressed archives are detected automatically.

    Args:
        archive_path: Path to the tar archive
        destination: Existing directory to extract into

    Returns:
        Number of members extracted

    Raises:
        TarReadError: If the archive cannot be read, contains an unsafe
            path or a member cannot be written
    """
    try:
        with tarfile.open(archive_path, "r:*") as tar:
            members = _read_members(tar, destination)
            tar.extractall(
                destination,
                members=members,
                numeric_owner=True,
                filter=make_layer_filter(destination),
            )
            return len(members)
    except (tarfile.TarError, EOFError, OSError) as e:
        raise TarReadError(f"Failed to unpack {archive_path.name}: {e}") from e


async def unpack_archive(archive_path: Path, destination: Path) -> int:
    """Extract a tar archive into a directory without blocking the event loop.

    Args:
        archive_path: Path to the tar archive
        destination: Existing directory to extract into

    Returns:
        Number of members extracted

    Raises:
        TarReadError: If the archive cannot be unpacked
    """
    logger.debug("Unpacking archive %s into %s", archive_path, destination)
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, unpack_archive_sync, archive_path, destination)
