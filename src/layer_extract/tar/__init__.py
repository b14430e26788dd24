"""Image archive parsing and unpacking."""

from .models import ImageConfig, Manifest
from .reader import read_config, read_manifest
from .unpack import unpack_archive

__all__ = ["ImageConfig", "Manifest", "read_config", "read_manifest", "unpack_archive"]
