"""
gcp_project
-----------

gcloud 의 활성 프로젝트 설정과 필수 API enable 을 담당하는 모듈.
"""

from __future__ import annotations

from typing import Iterable

from .config import ProvisionConfig
from .logging_utils import get_logger
from .subprocess_utils import CliNotFoundError, CommandError, run_command


logger = get_logger(__name__)


def set_project(project_id: str) -> None:
    """
    이후 gcloud 호출의 기본 프로젝트를 지정한다. (gcloud config set project)
    """
    run_command(["gcloud", "config", "set", "project", project_id])


def enable_api(project_id: str, api: str) -> None:
    """
    API 하나를 enable 한다. 이미 활성화된 API 는 gcloud 가 조용히 성공 처리한다.
    """
    run_command(
        [
            "gcloud",
            "services",
            "enable",
            api,
            f"--project={project_id}",
        ]
    )


def enable_apis(project_id: str, apis: Iterable[str]) -> None:
    for api in apis:
        logger.info("API 활성화: %s", api)
        enable_api(project_id, api)


def check_project_and_apis(cfg: ProvisionConfig) -> list[str]:
    """
    프로젝트와 필수 API 가 이미 활성화되어 있는지 확인한다.
    실제 enable 은 수행하지 않는다.
    """
    results: list[str] = []

    describe_cmd = [
        "gcloud",
        "projects",
        "describe",
        cfg.project_id,
        "--quiet",
    ]
    logger.info("프로젝트 존재 여부 확인: %s", cfg.project_id)
    try:
        run_command(describe_cmd)
        results.append(f"Project: 존재함 ({cfg.project_id})")
    except CliNotFoundError:
        results.append("Project: gcloud 명령을 찾을 수 없어 확인 불가")
        return results
    except CommandError as e:
        if "NOT_FOUND" in e.output or "not found" in e.output.lower():
            results.append(f"Project: 없음 ({cfg.project_id})")
        else:
            results.append(
                f"Project: 조회 실패 (gcloud projects describe, exit={e.returncode})"
            )
        return results

    for api in cfg.apis:
        cmd = [
            "gcloud",
            "services",
            "list",
            "--enabled",
            f"--project={cfg.project_id}",
            f"--filter=name:{api}",
            "--format=value(config.name)",
            "--quiet",
        ]
        try:
            proc = run_command(cmd)
        except CommandError as e:
            results.append(f"API: 조회 실패 ({api}, exit={e.returncode})")
            continue

        if proc.stdout.strip():
            results.append(f"API: 활성화됨 ({api})")
        else:
            results.append(f"API: 비활성화 (enable 필요) ({api})")

    return results
