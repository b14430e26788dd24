"""Configuration records shared by the extraction pipeline."""

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..exceptions import UsageError

DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"
DEFAULT_TIMEOUT = 30
DEFAULT_VERSION = "latest"

# Host used in request URLs when talking over a unix socket
_UNIX_BASE_URL = "http://localhost"


@dataclass(frozen=True)
class DaemonConfig:
    """Container daemon endpoint configuration.

    Attributes:
        host: Daemon endpoint (unix:///path/to/socket, tcp://host:port or
            http://host:port)
        timeout: Connect / request timeout in seconds. Export streams have
            no total timeout.
    """

    host: str = DEFAULT_DOCKER_HOST
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        scheme = urlsplit(self.host).scheme
        if scheme not in ("unix", "tcp", "http"):
            raise UsageError(f"Unsupported daemon host: {self.host}")
        if scheme == "unix" and not self.socket_path:
            raise UsageError(f"Missing socket path in daemon host: {self.host}")
        if self.timeout <= 0:
            raise UsageError(f"Timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls) -> "DaemonConfig":
        """Build a configuration from DOCKER_HOST and LAYER_EXTRACT_TIMEOUT."""
        host = os.getenv("DOCKER_HOST") or DEFAULT_DOCKER_HOST
        raw_timeout = os.getenv("LAYER_EXTRACT_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = int(raw_timeout)
        except ValueError as e:
            raise UsageError(f"Invalid LAYER_EXTRACT_TIMEOUT: {raw_timeout}") from e
        return cls(host=host, timeout=timeout)

    @property
    def is_unix(self) -> bool:
        """Whether the daemon is reached through a unix socket."""
        return self.host.startswith("unix://")

    @property
    def socket_path(self) -> str:
        """Filesystem path of the unix socket (empty for TCP hosts)."""
        if not self.is_unix:
            return ""
        return self.host[len("unix://") :]

    @property
    def base_url(self) -> str:
        """Base URL requests are issued against."""
        if self.is_unix:
            return _UNIX_BASE_URL
        parts = urlsplit(self.host)
        return f"http://{parts.netloc}"


@dataclass(frozen=True)
class ImageReference:
    """A local image reference split into name and version."""

    name: str
    version: str = DEFAULT_VERSION

    @classmethod
    def create(cls, name: str, version: str | None = None) -> "ImageReference":
        """이미지 이름과 버전으로 참조를 생성합니다.

        이름에는 버전 구분자(':')가 포함될 수 없으며, 버전은 별도 인자로
        전달해야 합니다. 레지스트리 포트("localhost:5000/app")는 마지막 경로
        구성요소가 아니므로 허용됩니다.

        Args:
            name: 이미지 이름 (예: "nginx", "localhost:5000/myapp")
            version: 이미지 버전 (기본값: "latest")

        Returns:
            ImageReference: 검증된 이미지 참조

        Raises:
            UsageError: 이름에 버전 구분자나 digest가 포함되었거나 비어 있는 경우

        Examples:
            ref = ImageReference.create("nginx", "alpine")
            print(ref)  # nginx:alpine

            ImageReference.create("nginx:alpine")  # UsageError
        """
        if not name:
            raise UsageError("Image name must not be empty")
        if "@" in name:
            raise UsageError(f"Image name must not contain a digest: {name}")

        last_component = name.rsplit("/", 1)[-1]
        if ":" in last_component:
            raise UsageError(
                f"Image name must not contain a version, pass it separately: {name}"
            )

        version = version if version is not None else DEFAULT_VERSION
        if not version or ":" in version or "/" in version:
            raise UsageError(f"Invalid image version: {version!r}")

        return cls(name=name, version=version)

    @property
    def archive_name(self) -> str:
        """File name used for the exported archive in the scratch area."""
        return f"{self.name}_{self.version}".replace("/", "_").replace(":", "_") + ".tar"

    def __str__(self) -> str:
        return f"{self.name}:{self.version}"
