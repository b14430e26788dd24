"""Test helpers for building synthetic image archives."""

import io
import json
import tarfile
from pathlib import Path
from typing import Any

DEFAULT_CONFIG = {
    "architecture": "amd64",
    "os": "linux",
    "config": {
        "Env": ["FOO=bar"],
        "Cmd": ["/bin/echo", "hi"],
        "WorkingDir": "/app",
    },
}


def _add_bytes(tar: tarfile.TarFile, name: str, data: bytes, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    tar.addfile(info, fileobj=io.BytesIO(data))


def symlink(target: str) -> tarfile.TarInfo:
    """Symlink entry for make_tar; the name comes from the dict key."""
    info = tarfile.TarInfo()
    info.type = tarfile.SYMTYPE
    info.linkname = target
    return info


def directory(mode: int = 0o755) -> tarfile.TarInfo:
    """Directory entry for make_tar; the name comes from the dict key."""
    info = tarfile.TarInfo()
    info.type = tarfile.DIRTYPE
    info.mode = mode
    return info


def make_tar(path: Path, files: dict[str, Any], compression: str = "") -> Path:
    """Create a tar file from {name: content} or {name: (content, mode)}.

    Values built with symlink() or directory() are added as those entries.
    """
    mode = f"w:{compression}" if compression else "w"
    with tarfile.open(path, mode) as tar:
        for name, value in files.items():
            if isinstance(value, tarfile.TarInfo):
                value.name = name
                tar.addfile(value)
                continue
            content, file_mode = value if isinstance(value, tuple) else (value, 0o644)
            data = content.encode("utf-8") if isinstance(content, str) else content
            _add_bytes(tar, name, data, file_mode)
    return path


def make_image_archive(
    tmp_path: Path,
    layers: dict[str, dict[str, Any]],
    config: Any = None,
    manifest: Any = None,
    name: str = "image.tar",
) -> Path:
    """Create an image archive with manifest.json, cfg.json and layer tars.

    Layers are listed in the manifest in the order of the given dict.
    """
    staging = tmp_path / f"staging-{name}"
    staging.mkdir()

    for layer_name, files in layers.items():
        layer_path = staging / layer_name
        layer_path.parent.mkdir(parents=True, exist_ok=True)
        make_tar(layer_path, files)

    if manifest is None:
        manifest = [
            {
                "Config": "cfg.json",
                "RepoTags": ["test/image:latest"],
                "Layers": list(layers),
            }
        ]

    archive_path = tmp_path / name
    with tarfile.open(archive_path, "w") as tar:
        _add_bytes(tar, "manifest.json", json.dumps(manifest).encode("utf-8"))
        config_data = DEFAULT_CONFIG if config is None else config
        _add_bytes(tar, "cfg.json", json.dumps(config_data).encode("utf-8"))
        for layer_name in layers:
            tar.add(staging / layer_name, arcname=layer_name)

    return archive_path


def write_scratch(scratch: Path, manifest: Any = None, config: Any = None) -> Path:
    """Write manifest.json and cfg.json directly into a scratch directory."""
    scratch.mkdir(parents=True, exist_ok=True)
    if manifest is not None:
        text = manifest if isinstance(manifest, str) else json.dumps(manifest)
        (scratch / "manifest.json").write_text(text)
    if config is not None:
        text = config if isinstance(config, str) else json.dumps(config)
        (scratch / "cfg.json").write_text(text)
    return scratch
