"""
gcp_iam
-------

배포용 서비스 계정 조회/생성, 프로젝트 IAM 역할 바인딩,
서비스 계정 키 발급을 gcloud 로 처리하는 모듈.
"""

from __future__ import annotations

import os

from .config import ProvisionConfig
from .logging_utils import get_logger
from .subprocess_utils import CliNotFoundError, CommandError, run_command


logger = get_logger(__name__)


def service_account_exists(project_id: str, email: str) -> bool:
    """
    서비스 계정이 있으면 True.

    describe 가 실패하면 '없음' 으로 본다. 생성 분기로 가는 정상 경로이므로 예외를 내지 않는다.
    gcloud 자체가 없으면 CliNotFoundError 는 그대로 전파된다.
    """
    cmd = [
        "gcloud",
        "iam",
        "service-accounts",
        "describe",
        email,
        f"--project={project_id}",
    ]
    try:
        run_command(cmd)
    except CommandError as e:
        logger.debug("서비스 계정 조회 실패, 없는 것으로 간주: %s", e)
        return False
    return True


def create_service_account(project_id: str, name: str, display_name: str, description: str) -> None:
    run_command(
        [
            "gcloud",
            "iam",
            "service-accounts",
            "create",
            name,
            f"--display-name={display_name}",
            f"--description={description}",
            f"--project={project_id}",
        ]
    )


def add_project_role(project_id: str, email: str, role: str) -> None:
    """
    프로젝트 IAM 정책에 역할 바인딩을 추가한다.
    같은 바인딩이 이미 있으면 정책은 그대로 유지된다.
    """
    run_command(
        [
            "gcloud",
            "projects",
            "add-iam-policy-binding",
            project_id,
            f"--member=serviceAccount:{email}",
            f"--role={role}",
            "--condition=None",
            "--quiet",
        ]
    )


def create_key(email: str, key_file: str) -> None:
    """
    새 JSON 키를 만들어 key_file 에 저장한다. 기존 키는 폐기되지 않는다.
    """
    run_command(
        [
            "gcloud",
            "iam",
            "service-accounts",
            "keys",
            "create",
            key_file,
            f"--iam-account={email}",
        ]
    )


def bound_roles(project_id: str, email: str) -> set[str]:
    """
    프로젝트 정책에서 서비스 계정에 바인딩된 역할 목록을 조회한다.
    """
    proc = run_command(
        [
            "gcloud",
            "projects",
            "get-iam-policy",
            project_id,
            "--flatten=bindings[].members",
            f"--filter=bindings.members:serviceAccount:{email}",
            "--format=value(bindings.role)",
        ]
    )
    return {line.strip() for line in proc.stdout.splitlines() if line.strip()}


def check_service_account(cfg: ProvisionConfig) -> list[str]:
    """
    서비스 계정/역할/키 파일 상태를 확인만 하고, 생성하거나 부여하지 않는다.
    """
    results: list[str] = []
    email = cfg.service_account_email

    try:
        exists = service_account_exists(cfg.project_id, email)
    except CliNotFoundError:
        return ["Service account: gcloud 명령을 찾을 수 없어 확인 불가"]

    if not exists:
        results.append(f"Service account: 없음 (생성 필요) ({email})")
        for role in cfg.roles:
            results.append(f"Role: 미부여 ({role})")
    else:
        results.append(f"Service account: 존재함 ({email})")
        try:
            granted = bound_roles(cfg.project_id, email)
        except CommandError as e:
            results.append(f"Role: 조회 실패 (gcloud projects get-iam-policy, exit={e.returncode})")
            granted = None
        if granted is not None:
            for role in cfg.roles:
                if role in granted:
                    results.append(f"Role: 부여됨 ({role})")
                else:
                    results.append(f"Role: 미부여 ({role})")

    if os.path.exists(cfg.key_file):
        results.append(f"Key file: 존재함 ({cfg.key_file})")
    else:
        results.append(f"Key file: 없음 ({cfg.key_file})")

    return results
