"""Readers for the manifest and configuration blob of an unpacked image."""

import json
import logging
from pathlib import Path
from typing import Any, Type

from ..exceptions import ConfigError, ExtractError, ManifestError
from .models import ImageConfig, Manifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


def resolve_member(
    scratch: Path, name: str, error: Type[ExtractError] = ManifestError
) -> Path:
    """Resolve a name from the manifest to a path inside the scratch area.

    Args:
        scratch: Scratch area holding the unpacked image archive
        name: Relative name taken from the manifest
        error: Exception class raised for names escaping the scratch area

    Returns:
        Absolute path of the member

    Raises:
        ExtractError: (of the given class) if the name points outside
            the scratch area
    """
    root = scratch.resolve()
    path = (root / name).resolve()
    if path == root or root not in path.parents:
        raise error(f"Archive member {name!r} is outside of the image archive")
    return path


def _load_json(path: Path, error: Type[ExtractError], what: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise error(f"{what} not found: {path.name}") from e
    except json.JSONDecodeError as e:
        raise error(f"Invalid JSON in {what}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise error(f"Cannot read {what}: {e}") from e


def read_manifest(scratch: Path) -> Manifest:
    """Read the single manifest entry of an unpacked image archive.

    Args:
        scratch: Scratch area holding the unpacked image archive

    Returns:
        The manifest entry

    Raises:
        ManifestError: If manifest.json is missing or malformed, or does not
            contain exactly one entry
    """
    manifest_data = _load_json(scratch / MANIFEST_FILENAME, ManifestError, MANIFEST_FILENAME)

    if not isinstance(manifest_data, list):
        raise ManifestError(f"{MANIFEST_FILENAME} must be a JSON array")

    # An export of a single name:version yields a single entry
    if len(manifest_data) != 1:
        raise ManifestError(
            f"the manifest contains {len(manifest_data)} entries, expected 1"
        )

    manifest = Manifest.from_dict(manifest_data[0])
    logger.debug("Read manifest and found %d layers", len(manifest.layers))
    return manifest


def read_config(scratch: Path, manifest: Manifest) -> ImageConfig:
    """Read the runtime configuration named by the manifest.

    Args:
        scratch: Scratch area holding the unpacked image archive
        manifest: Manifest entry naming the configuration blob

    Returns:
        Parsed runtime configuration

    Raises:
        ConfigError: If the blob is missing, malformed or incomplete
    """
    config_path = resolve_member(scratch, manifest.config, ConfigError)
    logger.debug("Reading image configuration from %s", config_path)
    return ImageConfig.from_dict(_load_json(config_path, ConfigError, "image configuration"))
