"""Entrypoint script generation."""

import logging
import os
from pathlib import Path

from .exceptions import EntrypointError
from .tar.models import ImageConfig

logger = logging.getLogger(__name__)

DEFAULT_ENTRYPOINT_NAME = "entrypoint.sh"
SHEBANG = "#!/bin/sh"
ENTRYPOINT_MODE = 0o755


def render_entrypoint(config: ImageConfig) -> str:
    """Render the shell script reproducing an image's startup.

    Environment entries and command tokens are written verbatim, one per
    line. Command tokens are not joined into a single invocation.

    Args:
        config: Runtime configuration of the image

    Returns:
        Script text
    """
    lines = [SHEBANG]
    lines.extend(config.env)
    lines.append(f"cd {config.working_dir}")
    lines.extend(config.cmd)
    return "\n".join(lines) + "\n"


def write_entrypoint(
    config: ImageConfig, output_dir: Path, filename: str = DEFAULT_ENTRYPOINT_NAME
) -> Path:
    """엔트리포인트 스크립트를 출력 디렉토리에 작성합니다.

    기존 파일이 있으면 덮어쓰며, 작성 후 권한을 0755로 설정합니다.

    Args:
        config: 이미지 런타임 설정 (Env, Cmd, WorkingDir)
        output_dir: 출력 디렉토리
        filename: 출력 디렉토리 기준 파일 이름 (기본값: "entrypoint.sh")

    Returns:
        Path: 작성된 스크립트 경로

    Raises:
        EntrypointError: 파일 작성 또는 권한 설정 실패 시

    Examples:
        config = ImageConfig(env=["FOO=bar"], cmd=["/bin/echo", "hi"], working_dir="/app")
        path = write_entrypoint(config, Path("./rootfs"))
        print(path.read_text())
    """
    path = output_dir / filename
    logger.debug("Writing entrypoint file to %s", path)

    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(render_entrypoint(config))
        os.chmod(path, ENTRYPOINT_MODE)
    except OSError as e:
        raise EntrypointError(f"Failed to write entrypoint {path}: {e}") from e

    return path
