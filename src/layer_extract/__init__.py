"""Image Layer Extract - flatten a container image's layers into a directory."""

__version__ = "0.1.0"

from .core.daemon_client import DaemonClient
from .core.types import DaemonConfig, ImageReference
from .entrypoint import render_entrypoint, write_entrypoint
from .exceptions import (
    ArchiveWriteError,
    ConfigError,
    DaemonConnectionError,
    EntrypointError,
    ExtractError,
    ImageNotFoundError,
    ManifestError,
    TarReadError,
    UsageError,
)
from .extract import ExtractResult, extract_image
from .tar.models import ImageConfig, Manifest

__all__ = [
    "extract_image",
    "ExtractResult",
    "DaemonClient",
    "DaemonConfig",
    "ImageReference",
    "ImageConfig",
    "Manifest",
    "render_entrypoint",
    "write_entrypoint",
    "ExtractError",
    "UsageError",
    "DaemonConnectionError",
    "ImageNotFoundError",
    "ArchiveWriteError",
    "TarReadError",
    "ManifestError",
    "ConfigError",
    "EntrypointError",
]
