"""Example usage of the async extraction pipeline."""

import asyncio
import logging
import sys
import tempfile
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, "src")

from layer_extract import (
    DaemonConfig,
    ExtractError,
    ImageNotFoundError,
    extract_image,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main():
    """Flatten an image from the local daemon into a temporary directory."""
    output_dir = Path(tempfile.mkdtemp(prefix="rootfs-"))

    try:
        logger.info("Extracting alpine:latest into %s", output_dir)
        result = await extract_image(
            output_dir,
            image="alpine",
            version="latest",
            write_entrypoint_file=True,
            daemon=DaemonConfig.from_env(),
        )
        logger.info("Applied %d layers", result.layer_count)
        logger.info("Entrypoint:\n%s", result.entrypoint.read_text())

    except ImageNotFoundError as e:
        logger.error("Pull the image first: %s", e)
    except ExtractError as e:
        logger.error("Extraction error: %s", e)


if __name__ == "__main__":
    asyncio.run(main())
