"""Custom exceptions for the image layer extractor."""


class ExtractError(Exception):
    """Base exception for all extraction errors."""

    pass


class UsageError(ExtractError):
    """Raised when the requested inputs are invalid or contradictory."""

    pass


class DaemonConnectionError(ExtractError):
    """Raised when unable to talk to the container daemon."""

    pass


class ImageNotFoundError(DaemonConnectionError):
    """Raised when the daemon does not know the requested image."""

    pass


class ArchiveWriteError(ExtractError):
    """Raised when the exported image cannot be written to disk."""

    pass


class TarReadError(ExtractError):
    """Raised when unable to read or unpack a tar archive."""

    pass


class ManifestError(ExtractError):
    """Raised when manifest.json is missing or invalid."""

    pass


class ConfigError(ExtractError):
    """Raised when the image configuration blob is missing or invalid."""

    pass


class EntrypointError(ExtractError):
    """Raised when the entrypoint script cannot be written."""

    pass
