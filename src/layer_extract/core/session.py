"""aiohttp session factory for the container daemon."""

import aiohttp

from .types import DaemonConfig


def _create_connector(config: DaemonConfig) -> aiohttp.BaseConnector:
    """Create a connector matching the daemon host scheme."""
    if config.is_unix:
        return aiohttp.UnixConnector(path=config.socket_path)
    return aiohttp.TCPConnector()


async def create_session(config: DaemonConfig | None = None) -> aiohttp.ClientSession:
    """Create a client session bound to the daemon endpoint.

    Only the connect phase is bounded by the configured timeout: an image
    export may legitimately stream for much longer.

    Args:
        config: Daemon configuration (defaults to the local unix socket)

    Returns:
        Configured aiohttp client session
    """
    config = config or DaemonConfig()
    return aiohttp.ClientSession(
        connector=_create_connector(config),
        timeout=aiohttp.ClientTimeout(total=None, sock_connect=config.timeout),
    )
