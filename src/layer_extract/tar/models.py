"""Data models for image archive contents."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Type

from ..exceptions import ConfigError, ExtractError, ManifestError

_MISSING = object()


def _lookup(
    data: Dict[str, Any],
    spellings: Tuple[str, ...],
    error: Type[ExtractError],
    document: str,
) -> Any:
    """Return the value stored under the first matching key spelling."""
    for key in spellings:
        value = data.get(key, _MISSING)
        if value is not _MISSING:
            return value
    raise error(f"{document} is missing required field {spellings[0]!r}")


def _string_list(
    value: Any, name: str, error: Type[ExtractError], document: str
) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise error(f"{document} field {name!r} must be a list of strings")
    return list(value)


def _string(value: Any, name: str, error: Type[ExtractError], document: str) -> str:
    if not isinstance(value, str):
        raise error(f"{document} field {name!r} must be a string")
    return value


@dataclass(frozen=True)
class Manifest:
    """One entry of an image archive's manifest.json."""

    config: str
    layers: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        """Build a manifest from a parsed manifest entry.

        Both the export spelling ("Config", "Layers") and the lowercase
        spelling ("config", "layers") are accepted.

        Raises:
            ManifestError: If the entry is not an object or a field is
                missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ManifestError("Manifest entry must be a JSON object")

        doc = "Manifest entry"
        config = _string(
            _lookup(data, ("Config", "config"), ManifestError, doc),
            "Config",
            ManifestError,
            doc,
        )
        layers = _string_list(
            _lookup(data, ("Layers", "layers"), ManifestError, doc),
            "Layers",
            ManifestError,
            doc,
        )
        return cls(config=config, layers=layers)


@dataclass(frozen=True)
class ImageConfig:
    """Runtime settings needed to reproduce an image's startup command."""

    env: List[str]
    cmd: List[str]
    working_dir: str

    @classmethod
    def from_dict(cls, data: Any) -> "ImageConfig":
        """Build the runtime settings from a parsed configuration blob.

        The settings live in the nested "config" object. Each field accepts
        its capitalized spelling ("Env", "Cmd", "WorkingDir") or the
        lowercase one ("env", "cmd", "working_dir").

        Raises:
            ConfigError: If the nested object or a field is missing or has
                the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigError("Image configuration must be a JSON object")

        runtime = _lookup(
            data, ("config", "Config"), ConfigError, "Image configuration"
        )
        if not isinstance(runtime, dict):
            raise ConfigError("Image configuration field 'config' must be an object")

        doc = "Runtime configuration"
        env = _string_list(
            _lookup(runtime, ("Env", "env"), ConfigError, doc), "Env", ConfigError, doc
        )
        cmd = _string_list(
            _lookup(runtime, ("Cmd", "cmd"), ConfigError, doc), "Cmd", ConfigError, doc
        )
        working_dir = _string(
            _lookup(runtime, ("WorkingDir", "working_dir"), ConfigError, doc),
            "WorkingDir",
            ConfigError,
            doc,
        )

        return cls(env=env, cmd=cmd, working_dir=working_dir)
