"""
provisioner
-----------

GitHub Actions 배포용 서비스 계정을 멱등하게 준비하는 흐름.

순서: 프로젝트 지정 -> API enable -> 서비스 계정 생성(없을 때만)
-> 역할 부여 -> (선택) 키 발급 -> 요약.
어느 단계든 gcloud 가 실패하면 즉시 중단하고, 이미 적용된 것은 되돌리지 않는다.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from . import console, gcp_iam, gcp_project
from .config import ProvisionConfig
from .gcp_client import ProviderClient
from .logging_utils import get_logger


logger = get_logger(__name__)


ConfirmFn = Callable[[str], bool]


@dataclass
class ProvisionResult:
    project_id: str
    service_account_email: str
    created: bool = False
    granted_roles: List[str] = field(default_factory=list)
    key_file: Optional[str] = None


def provision(cfg: ProvisionConfig, client: ProviderClient, confirm: ConfirmFn) -> ProvisionResult:
    """
    서비스 계정과 역할 바인딩을 보장하고, 필요하면 새 키를 발급한다.

    gcloud 존재 여부와 입력값 검증은 호출하는 쪽(cli)에서 이미 끝났다고 가정한다.
    confirm 은 기존 키 파일을 덮어쓸지 묻는 함수로, False 면 키 발급을 건너뛴다.
    """
    email = cfg.service_account_email
    result = ProvisionResult(project_id=cfg.project_id, service_account_email=email)

    console.info("Configuration:")
    console.info(f"  Project ID: {cfg.project_id}")
    console.info(f"  Service Account: {email}")
    console.info(f"  Key File: {cfg.key_file}")
    console.info("")

    console.step("Setting GCP project...")
    client.set_project_scope(cfg.project_id)

    console.step("Enabling required APIs...")
    for api in cfg.apis:
        logger.info("API 활성화: %s", api)
        client.enable_api(cfg.project_id, api)

    console.step("Creating service account...")
    if client.identity_exists(cfg.project_id, email):
        console.warning("Service account already exists, skipping creation")
    else:
        client.create_identity(
            cfg.project_id,
            cfg.service_account_name,
            cfg.display_name,
            cfg.description,
        )
        result.created = True
        console.success(f"Service account created: {email}")

    console.step("Granting IAM roles...")
    for role in cfg.roles:
        console.info(f"  Granting {role}...")
        client.grant_role(cfg.project_id, email, role)
        result.granted_roles.append(role)

    console.step("Creating service account key...")
    issue = True
    if os.path.exists(cfg.key_file):
        console.warning(f"Key file already exists: {cfg.key_file}")
        issue = confirm("Do you want to create a new key?")
        if not issue:
            console.info("Skipping key creation")

    if issue:
        client.issue_credential(email, cfg.key_file)
        result.key_file = cfg.key_file
        console.success(f"Key created and saved to: {cfg.key_file}")

    return result


def render_summary(result: ProvisionResult) -> str:
    lines: List[str] = []
    lines.append("# Setup summary")
    lines.append(f"- project: {result.project_id}")
    lines.append(f"- service account: {result.service_account_email}")
    lines.append(f"- created: {result.created}")
    lines.append(f"- key file: {result.key_file or '(not created)'}")
    lines.append("")

    lines.append("## GitHub Actions secrets")
    lines.append("- Name: GCP_PROJECT_ID")
    lines.append(f"  Value: {result.project_id}")
    if result.key_file:
        lines.append("- Name: GCP_SA_KEY")
        lines.append(f"  Value: (paste the entire contents of {result.key_file})")
        lines.append("")
        lines.append(f"키 내용 확인: cat {result.key_file}")
        lines.append("IMPORTANT: 키 파일은 안전하게 보관하고 절대 git 에 커밋하지 마세요!")

    lines.append("")
    lines.append("main/master 브랜치에 push 하면 배포가 실행됩니다.")
    return "\n".join(lines)


def plan_setup(cfg: ProvisionConfig) -> str:
    """
    setup 이 수행할 작업을 요약한다. 실제 GCP 호출은 하지 않는다.
    """
    lines: List[str] = []
    lines.append("# Setup plan")
    lines.append(f"- project: {cfg.project_id}")
    lines.append(f"- service account: {cfg.service_account_email}")
    lines.append(f"- display name: {cfg.display_name}")
    lines.append(f"- key file: {cfg.key_file}")
    lines.append("")

    lines.append("## APIs")
    for api in cfg.apis:
        lines.append(f"- {api}")
    lines.append("")

    lines.append("## Roles")
    for role in cfg.roles:
        lines.append(f"- {role}")

    return "\n".join(lines)


def check_setup(cfg: ProvisionConfig, show_all: bool = False) -> tuple[str, bool]:
    """
    리소스를 바꾸지 않고 setup 이 아직 해야 할 일이 있는지 점검한다.

    Returns:
        summary: 사람이 읽기 좋은 텍스트 요약
        has_issues: 크리티컬 이슈나 경고(setup 이 새로 만들/부여할 것)가 있는지 여부
    """
    lines: List[str] = []
    critical: List[str] = []
    warnings: List[str] = []

    lines.append("# Setup pre-check")
    lines.append(f"- project: {cfg.project_id}")
    lines.append(f"- service account: {cfg.service_account_email}")
    lines.append("")

    lines.append("## Project & APIs")
    for r in gcp_project.check_project_and_apis(cfg):
        if show_all:
            lines.append(f"- {r}")
        if "Project: 없음" in r or "확인 불가" in r or "조회 실패" in r:
            critical.append(r)
        elif "API: 비활성화" in r:
            warnings.append(r)
    lines.append("")

    lines.append("## Service account & roles")
    for r in gcp_iam.check_service_account(cfg):
        if show_all:
            lines.append(f"- {r}")
        if "확인 불가" in r or "조회 실패" in r:
            critical.append(r)
        elif "없음 (생성 필요)" in r or "미부여" in r:
            warnings.append(r)
    lines.append("")

    lines.append("## Summary")
    if critical:
        lines.append("- 상태: 크리티컬 이슈가 있습니다. setup 전에 해결해야 합니다.")
    elif warnings:
        lines.append("- 상태: 경고만 있습니다. setup 을 실행하면 해결됩니다.")
    else:
        lines.append("- 상태: 주요 이슈 없음")

    if show_all or critical:
        lines.append("")
        lines.append("### Critical issues")
        if critical:
            for i in critical:
                lines.append(f"- {i}")
        else:
            lines.append("- (none)")

    if show_all or warnings:
        lines.append("")
        lines.append("### Warnings")
        if warnings:
            for i in warnings:
                lines.append(f"- {i}")
        else:
            lines.append("- (none)")

    if not show_all:
        lines.append("")
        lines.append("자세한 상태를 보려면 `gcp-deployer check -a` 를 실행하세요.")

    return "\n".join(lines), bool(critical or warnings)
