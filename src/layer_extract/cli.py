"""Command-line interface for the image layer extractor."""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from .core.types import DEFAULT_TIMEOUT, DaemonConfig
from .entrypoint import DEFAULT_ENTRYPOINT_NAME
from .exceptions import ExtractError, UsageError
from .extract import extract_image

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="layer-extract",
        description="Extracts a container image's layers to a specified location.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "-i", "--image", help="Image name, without version (e.g. nginx)"
    )
    source.add_argument(
        "-a", "--archive", help="Existing image archive (e.g. from docker save)"
    )
    parser.add_argument(
        "-t",
        "--tag",
        dest="version",
        help="Image version (default: latest)",
    )
    parser.add_argument(
        "output_dir", help="Existing directory receiving the image filesystem"
    )
    parser.add_argument(
        "-e",
        "--entrypoint",
        action="store_true",
        help="Also write an entrypoint script from the image configuration",
    )
    parser.add_argument(
        "-f",
        "--entry-file",
        default=DEFAULT_ENTRYPOINT_NAME,
        help=f"Entrypoint file name, relative to output_dir (default: {DEFAULT_ENTRYPOINT_NAME})",
    )
    parser.add_argument(
        "-H",
        "--host",
        help="Daemon endpoint (default: $DOCKER_HOST or unix:///var/run/docker.sock)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        help=f"Daemon connect timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Shorthand for --log-level DEBUG"
    )
    verbosity.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=os.getenv("LAYER_EXTRACT_LOG_LEVEL", "WARNING").upper(),
        help="Logging level (default: $LAYER_EXTRACT_LOG_LEVEL or WARNING)",
    )
    return parser


def _daemon_config(args: argparse.Namespace) -> Optional[DaemonConfig]:
    if args.image is None:
        return None
    config = DaemonConfig.from_env()
    return DaemonConfig(
        host=args.host or config.host,
        timeout=args.timeout if args.timeout is not None else config.timeout,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        daemon = _daemon_config(args)
        result = asyncio.run(
            extract_image(
                args.output_dir,
                image=args.image,
                version=args.version,
                archive=args.archive,
                write_entrypoint_file=args.entrypoint,
                entrypoint_name=args.entry_file,
                daemon=daemon,
            )
        )
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"error: {e}", file=sys.stderr)
        return 2
    except ExtractError as e:
        logger.debug("Extraction failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    logger.info("Extracted %d layers to %s", result.layer_count, result.output_dir)
    if result.entrypoint is not None:
        logger.info("Wrote entrypoint %s", result.entrypoint)
    return 0


if __name__ == "__main__":
    sys.exit(main())
