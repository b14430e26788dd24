"""Async functional extraction pipeline."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .acquire import acquire_archive, check_source
from .compose import composite_layers
from .core.types import DaemonConfig, ImageReference
from .entrypoint import DEFAULT_ENTRYPOINT_NAME, write_entrypoint
from .exceptions import UsageError
from .tar.models import Manifest
from .tar.reader import read_config, read_manifest
from .tar.unpack import unpack_archive

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "layer-extract-"


@dataclass(frozen=True)
class ExtractResult:
    """Outcome of a successful extraction."""

    output_dir: Path
    manifest: Manifest
    layer_count: int
    entrypoint: Optional[Path] = None


def check_output_dir(output_dir: Path) -> None:
    """Ensure the destination exists and is a directory.

    Raises:
        UsageError: If the path is not an existing directory
    """
    if not output_dir.is_dir():
        raise UsageError(f"location specified is not a directory: {output_dir}")


async def extract_image(
    output_dir: str | os.PathLike,
    image: str | None = None,
    version: str | None = None,
    archive: str | os.PathLike | None = None,
    write_entrypoint_file: bool = False,
    entrypoint_name: str = DEFAULT_ENTRYPOINT_NAME,
    daemon: DaemonConfig | None = None,
    scratch_root: str | os.PathLike | None = None,
) -> ExtractResult:
    """이미지의 파일시스템 레이어를 출력 디렉토리에 풀어냅니다.

    데몬에서 이미지를 내보내거나 기존 tar 파일을 사용하며, manifest.json의
    레이어 순서대로 출력 디렉토리에 적용합니다. 임시 작업 디렉토리는 성공
    여부와 관계없이 항상 삭제됩니다.

    Args:
        output_dir: 출력 디렉토리 (이미 존재해야 함)
            - 상대경로: "./rootfs"
            - 절대경로: "/srv/images/nginx-rootfs"
        image: 데몬에서 내보낼 이미지 이름 (예: "nginx", "localhost:5000/myapp")
        version: 이미지 버전 (기본값: "latest")
        archive: 이미 존재하는 이미지 tar 파일 경로 (image와 함께 사용할 수 없음)
        write_entrypoint_file: True이면 엔트리포인트 스크립트도 작성
        entrypoint_name: 출력 디렉토리 기준 스크립트 이름 (기본값: "entrypoint.sh")
        daemon: 데몬 설정 (기본값: DOCKER_HOST 환경 변수 또는 로컬 소켓)
        scratch_root: 임시 작업 디렉토리를 만들 위치 (기본값: 시스템 임시 디렉토리)

    Returns:
        ExtractResult: 매니페스트, 적용된 레이어 수, 엔트리포인트 경로

    Raises:
        UsageError: 출력 경로가 디렉토리가 아니거나 image/archive 조합이 잘못된 경우
        DaemonConnectionError: 데몬 연결 실패 시
        ImageNotFoundError: 데몬에 이미지가 없는 경우
        ManifestError: manifest.json이 없거나 항목 수가 1이 아닌 경우
        ConfigError: 이미지 설정을 읽을 수 없는 경우
        TarReadError: tar 파일을 읽거나 풀 수 없는 경우

    Examples:
        # 로컬 데몬의 이미지 추출
        result = await extract_image("./rootfs", image="nginx", version="alpine")
        print(f"{result.layer_count}개 레이어 적용")

        # docker save로 만든 tar 파일 사용 + 엔트리포인트 작성
        await extract_image("./rootfs", archive="nginx.tar", write_entrypoint_file=True)
    """
    output_path = Path(output_dir)
    check_output_dir(output_path)

    archive_path = Path(archive) if archive is not None else None
    if image is None and archive_path is not None and version is not None:
        raise UsageError("A version can only be given together with an image")
    reference = ImageReference.create(image, version) if image is not None else None
    check_source(reference, archive_path)

    if reference is not None and daemon is None:
        daemon = DaemonConfig.from_env()

    with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX, dir=scratch_root) as tmp:
        scratch = Path(tmp)
        logger.debug("Temp dir: %s", scratch)

        image_archive = await acquire_archive(
            scratch, image=reference, archive=archive_path, daemon=daemon
        )
        await unpack_archive(image_archive.path, scratch)
        if image_archive.downloaded:
            image_archive.path.unlink()

        manifest = read_manifest(scratch)
        layer_count = await composite_layers(manifest, scratch, output_path)

        entrypoint_path = None
        if write_entrypoint_file:
            config = read_config(scratch, manifest)
            entrypoint_path = write_entrypoint(config, output_path, entrypoint_name)

    return ExtractResult(
        output_dir=output_path,
        manifest=manifest,
        layer_count=layer_count,
        entrypoint=entrypoint_path,
    )
