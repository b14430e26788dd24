"""Layer composition onto the output directory."""

import logging
from pathlib import Path

from .exceptions import TarReadError
from .tar.models import Manifest
from .tar.reader import resolve_member
from .tar.unpack import unpack_archive

logger = logging.getLogger(__name__)


async def composite_layers(manifest: Manifest, scratch: Path, output_dir: Path) -> int:
    """Apply the manifest's layers onto the output directory, base first.

    Each layer is fully unpacked before the next one starts, so files from a
    later layer overwrite files from earlier ones. A failure leaves the
    layers applied so far in place.

    Args:
        manifest: Manifest entry listing the layer archives
        scratch: Scratch area holding the unpacked image archive
        output_dir: Destination directory

    Returns:
        Number of layers applied

    Raises:
        ManifestError: If a layer name points outside the scratch area
        TarReadError: If a layer archive cannot be unpacked
    """
    total = len(manifest.layers)
    for index, layer in enumerate(manifest.layers, start=1):
        layer_path = resolve_member(scratch, layer)
        if not layer_path.is_file():
            raise TarReadError(f"Layer {index}/{total} not found in image archive: {layer}")

        logger.debug("Unpacking layer %d/%d: %s", index, total, layer)
        try:
            await unpack_archive(layer_path, output_dir)
        except TarReadError as e:
            raise TarReadError(f"Layer {index}/{total} ({layer}): {e}") from e

    logger.info("Applied %d layers to %s", total, output_dir)
    return total
