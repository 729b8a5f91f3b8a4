"""
deployment
----------

정적 자산 컨테이너를 Cloud Build 로 빌드하고 Cloud Run 에 배포하는 흐름.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from . import console, gcp_cloud_run, gcp_project
from .config import DEPLOY_APIS, DeployConfig
from .logging_utils import get_logger


logger = get_logger(__name__)


# 정적 자산 이미지가 서빙하는 파일
AVAILABLE_FILES = [
    ("klaro.js", "main file with CSS"),
    ("klaro-no-css.js", "without CSS"),
    ("klaro.css", "stylesheet"),
    ("klaro.min.css", "minified stylesheet"),
    ("config.js", "example config"),
]


@dataclass(frozen=True)
class DeployResult:
    project_id: str
    service_name: str
    region: str
    image: str
    url: str


def deploy(cfg: DeployConfig) -> DeployResult:
    """
    프로젝트 지정 -> API enable -> 이미지 빌드 -> Cloud Run 배포 -> URL 조회.
    중간에 실패하면 CommandError 가 그대로 전파된다.
    """
    console.info("Configuration:")
    console.info(f"  Project ID: {cfg.gcp_project_id}")
    console.info(f"  Service Name: {cfg.service_name}")
    console.info(f"  Region: {cfg.region}")
    console.info(f"  Image: {cfg.image_name}")
    console.info("")

    console.step("Setting GCP project...")
    gcp_project.set_project(cfg.gcp_project_id)

    console.step("Enabling required APIs...")
    gcp_project.enable_apis(cfg.gcp_project_id, DEPLOY_APIS)

    console.step("Building container image...")
    image = gcp_cloud_run.build_image(cfg)

    console.step("Deploying to Cloud Run...")
    gcp_cloud_run.deploy_service(cfg, image)

    url = gcp_cloud_run.get_service_url(cfg)
    logger.info("Cloud Run 서비스 URL: %s", url)

    return DeployResult(
        project_id=cfg.gcp_project_id,
        service_name=cfg.service_name,
        region=cfg.region,
        image=image,
        url=url,
    )


def render_deploy_summary(result: DeployResult) -> str:
    lines: List[str] = []
    lines.append("# Deploy summary")
    lines.append(f"- project: {result.project_id}")
    lines.append(f"- service: {result.service_name} ({result.region})")
    lines.append(f"- image: {result.image}")
    lines.append(f"- url: {result.url or '(unknown)'}")
    if result.url:
        lines.append(f"- health: {result.url}/health")
        lines.append("")
        lines.append("HTML 사용 예:")
        lines.append(f'<script defer type="text/javascript" src="{result.url}/config.js"></script>')
        lines.append(f'<script defer type="text/javascript" src="{result.url}/klaro.js"></script>')
        lines.append("")
        lines.append("Available files:")
        for name, note in AVAILABLE_FILES:
            lines.append(f"  - {result.url}/{name} ({note})")
    return "\n".join(lines)
