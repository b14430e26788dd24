"""Daemon access and configuration records."""

from .daemon_client import DaemonClient
from .types import DaemonConfig, ImageReference

__all__ = ["DaemonClient", "DaemonConfig", "ImageReference"]
