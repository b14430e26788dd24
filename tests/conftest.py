"""Test configuration and fixtures."""

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from layer_extract.core.types import DaemonConfig


class FakeDaemon:
    """In-process stand-in for the image endpoints of a container daemon."""

    def __init__(self, chunk_size: int = 7):
        self.images: dict[str, bytes] = {}
        self.requests: list[str] = []
        self.chunk_size = chunk_size
        self.config: DaemonConfig | None = None

        self.app = web.Application(middlewares=[self._record])
        self.app.router.add_get("/_ping", self._ping)
        self.app.router.add_get("/images/{name:.+}/json", self._inspect)
        self.app.router.add_get("/images/{name:.+}/get", self._export)

    @web.middleware
    async def _record(self, request, handler):
        self.requests.append(request.path)
        return await handler(request)

    async def _ping(self, request):
        return web.Response(text="OK")

    async def _inspect(self, request):
        name = request.match_info["name"]
        if name not in self.images:
            return web.json_response({"message": f"No such image: {name}"}, status=404)
        return web.json_response({"Id": "sha256:abc", "RepoTags": [name]})

    async def _export(self, request):
        name = request.match_info["name"]
        if name not in self.images:
            return web.json_response({"message": f"No such image: {name}"}, status=404)

        data = self.images[name]
        response = web.StreamResponse(headers={"Content-Type": "application/x-tar"})
        await response.prepare(request)
        for i in range(0, len(data), self.chunk_size):
            await response.write(data[i : i + self.chunk_size])
        await response.write_eof()
        return response


@pytest_asyncio.fixture
async def fake_daemon():
    """Serve a FakeDaemon over TCP for the duration of a test."""
    daemon = FakeDaemon()
    server = TestServer(daemon.app)
    await server.start_server()
    daemon.config = DaemonConfig(host=f"tcp://{server.host}:{server.port}", timeout=5)
    try:
        yield daemon
    finally:
        await server.close()

