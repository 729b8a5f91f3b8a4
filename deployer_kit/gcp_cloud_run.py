"""
gcp_cloud_run
-------------

Cloud Build 이미지 빌드와 Cloud Run 서비스 배포/조회를 담당하는 모듈.
"""

from __future__ import annotations

from .config import DeployConfig
from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)


def build_image(cfg: DeployConfig) -> str:
    """
    source_dir 를 Cloud Build 로 빌드해 gcr.io 이미지로 푸시하고 이미지 이름을 반환한다.
    """
    image = cfg.image_name
    logger.info("Cloud Build 이미지 빌드: %s (source=%s)", image, cfg.source_dir)
    run_command(
        [
            "gcloud",
            "builds",
            "submit",
            "--tag",
            image,
            f"--project={cfg.gcp_project_id}",
            cfg.source_dir,
        ],
        stream_output=True,
    )
    return image


def deploy_service(cfg: DeployConfig, image: str) -> None:
    cmd = [
        "gcloud",
        "run",
        "deploy",
        cfg.service_name,
        "--image",
        image,
        "--platform",
        "managed",
        "--region",
        cfg.region,
        f"--project={cfg.gcp_project_id}",
    ]
    if cfg.allow_unauthenticated:
        cmd.append("--allow-unauthenticated")
    else:
        cmd.append("--no-allow-unauthenticated")
    cmd += [
        "--port",
        str(cfg.port),
        "--memory",
        cfg.memory,
        "--cpu",
        cfg.cpu,
        "--max-instances",
        str(cfg.max_instances),
        "--min-instances",
        str(cfg.min_instances),
    ]
    run_command(cmd, stream_output=True)


def get_service_url(cfg: DeployConfig) -> str:
    proc = run_command(
        [
            "gcloud",
            "run",
            "services",
            "describe",
            cfg.service_name,
            "--platform",
            "managed",
            "--region",
            cfg.region,
            f"--project={cfg.gcp_project_id}",
            "--format",
            "value(status.url)",
        ]
    )
    return proc.stdout.strip()
