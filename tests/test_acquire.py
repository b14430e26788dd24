"""Tests for image archive acquisition."""

import os
from pathlib import Path

import pytest

from layer_extract.acquire import acquire_archive, check_source, download_image
from layer_extract.core.daemon_client import DaemonClient
from layer_extract.core.types import ImageReference
from layer_extract.exceptions import (
    ArchiveWriteError,
    ImageNotFoundError,
    TarReadError,
    UsageError,
)

NGINX = ImageReference.create("nginx", "alpine")


def test_check_source_requires_exactly_one():
    check_source(NGINX, None)
    check_source(None, Path("image.tar"))

    with pytest.raises(UsageError, match="not both"):
        check_source(NGINX, Path("image.tar"))
    with pytest.raises(UsageError, match="Specify an image or an archive"):
        check_source(None, None)


@pytest.mark.asyncio
async def test_download_image(fake_daemon, tmp_path):
    """Test that the export is written to disk byte for byte."""
    data = b"exported image archive " * 500
    fake_daemon.images["nginx:alpine"] = data
    destination = tmp_path / "nginx.tar"

    async with DaemonClient(fake_daemon.config, chunk_size=512) as client:
        written = await download_image(client, NGINX, destination)

    assert written == len(data)
    assert destination.read_bytes() == data
    assert fake_daemon.requests == [
        "/_ping",
        "/images/nginx:alpine/json",
        "/images/nginx:alpine/get",
    ]


@pytest.mark.asyncio
async def test_download_missing_image_checks_before_export(fake_daemon, tmp_path):
    destination = tmp_path / "nginx.tar"

    async with DaemonClient(fake_daemon.config) as client:
        with pytest.raises(ImageNotFoundError):
            await download_image(client, NGINX, destination)

    assert "/images/nginx:alpine/get" not in fake_daemon.requests
    assert not destination.exists()


@pytest.mark.asyncio
async def test_download_write_failure(fake_daemon, tmp_path):
    fake_daemon.images["nginx:alpine"] = b"data"

    async with DaemonClient(fake_daemon.config) as client:
        with pytest.raises(ArchiveWriteError):
            await download_image(client, NGINX, tmp_path / "missing" / "nginx.tar")


@pytest.mark.asyncio
async def test_acquire_from_daemon(fake_daemon, tmp_path):
    fake_daemon.images["nginx:alpine"] = b"archive bytes"

    archive = await acquire_archive(tmp_path, image=NGINX, daemon=fake_daemon.config)

    assert archive.downloaded is True
    assert archive.path == tmp_path / "nginx_alpine.tar"
    assert archive.path.read_bytes() == b"archive bytes"


@pytest.mark.asyncio
async def test_acquire_existing_archive(tmp_path):
    """Test that an existing archive is used as-is without copying."""
    existing = tmp_path / "saved.tar"
    existing.write_bytes(b"saved")
    scratch = tmp_path / "scratch"
    scratch.mkdir()

    archive = await acquire_archive(scratch, archive=existing)

    assert archive.path == existing
    assert archive.downloaded is False
    assert list(scratch.iterdir()) == []


@pytest.mark.asyncio
async def test_acquire_missing_archive(tmp_path):
    with pytest.raises(TarReadError, match="not found"):
        await acquire_archive(tmp_path, archive=tmp_path / "missing.tar")


@pytest.mark.asyncio
@pytest.mark.parametrize("use_image, use_archive", [(True, True), (False, False)])
async def test_acquire_rejects_invalid_source(tmp_path, use_image, use_archive):
    with pytest.raises(UsageError):
        await acquire_archive(
            tmp_path,
            image=NGINX if use_image else None,
            archive=tmp_path / "saved.tar" if use_archive else None,
        )


class _StreamingClient:
    """Daemon client stand-in whose export stream records being closed."""

    def __init__(self):
        self.closed = False

    async def ping(self):
        return None

    async def inspect_image(self, image):
        return {"RepoTags": [image]}

    async def export_image(self, image):
        try:
            for _ in range(100):
                yield b"x" * 1024
        finally:
            self.closed = True


@pytest.mark.asyncio
@pytest.mark.skipif(not os.path.exists("/dev/full"), reason="needs /dev/full")
async def test_download_write_failure_closes_export_stream():
    client = _StreamingClient()

    with pytest.raises(ArchiveWriteError):
        await download_image(client, NGINX, Path("/dev/full"))

    assert client.closed is True
