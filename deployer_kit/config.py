from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dotenv import load_dotenv


ENV_FILES_DEFAULT_ORDER = [".env", ".env.infra"]

# GitHub Actions 배포용 서비스 계정
SERVICE_ACCOUNT_NAME = "github-actions-deployer"
SERVICE_ACCOUNT_DISPLAY_NAME = "GitHub Actions Deployer"
SERVICE_ACCOUNT_DESCRIPTION = "Service account for GitHub Actions to deploy to Cloud Run"
SERVICE_ACCOUNT_DOMAIN = "iam.gserviceaccount.com"

REQUIRED_APIS: Tuple[str, ...] = (
    "iam.googleapis.com",
    "cloudbuild.googleapis.com",
    "run.googleapis.com",
    "artifactregistry.googleapis.com",
    "serviceusage.googleapis.com",
)

DEPLOYER_ROLES: Tuple[str, ...] = (
    "roles/run.admin",
    "roles/iam.serviceAccountUser",
    "roles/storage.admin",
    "roles/cloudbuild.builds.editor",
    "roles/serviceusage.serviceUsageConsumer",
    "roles/artifactregistry.admin",
)

DEPLOY_APIS: Tuple[str, ...] = (
    "cloudbuild.googleapis.com",
    "run.googleapis.com",
    "containerregistry.googleapis.com",
)


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y"}


def _get_int(name: str, default: int, invalid: List[str]) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        invalid.append(f"{name}={raw!r}")
        return default


def service_account_email(name: str, project_id: str) -> str:
    return f"{name}@{project_id}.{SERVICE_ACCOUNT_DOMAIN}"


@dataclass(frozen=True)
class ProvisionConfig:
    project_id: str
    base_dir: str = "."

    service_account_name: str = SERVICE_ACCOUNT_NAME
    display_name: str = SERVICE_ACCOUNT_DISPLAY_NAME
    description: str = SERVICE_ACCOUNT_DESCRIPTION

    apis: Tuple[str, ...] = REQUIRED_APIS
    roles: Tuple[str, ...] = DEPLOYER_ROLES

    @property
    def service_account_email(self) -> str:
        return service_account_email(self.service_account_name, self.project_id)

    @property
    def key_file(self) -> str:
        return os.path.join(self.base_dir, f"{self.service_account_name}-key.json")

    @classmethod
    def create(cls, project_id: Optional[str], base_dir: str = ".") -> "ProvisionConfig":
        """
        운영자가 입력한 프로젝트 ID 로 설정을 만든다.
        비어 있으면 어떤 외부 호출도 하기 전에 ValueError 를 낸다.
        """
        project_id = (project_id or "").strip()
        if not project_id:
            raise ValueError("프로젝트 ID 가 비어 있습니다. (GCP_PROJECT_ID)")
        return cls(project_id=project_id, base_dir=base_dir)


@dataclass
class DeployConfig:
    gcp_project_id: str
    service_name: str = "klaro-consent"
    region: str = "us-central1"
    source_dir: str = "."

    # Cloud Run 런타임
    port: int = 8080
    memory: str = "256Mi"
    cpu: str = "1"
    max_instances: int = 10
    min_instances: int = 0
    allow_unauthenticated: bool = True

    @property
    def image_name(self) -> str:
        return f"gcr.io/{self.gcp_project_id}/{self.service_name}"

    @classmethod
    def from_env(cls, project_id: Optional[str] = None) -> "DeployConfig":
        """
        환경변수에서 배포 설정을 읽는다. project_id 가 주어지면 GCP_PROJECT_ID 대신 사용한다.
        """
        missing: List[str] = []
        invalid: List[str] = []

        project_id = (project_id or os.getenv("GCP_PROJECT_ID", "")).strip()
        if not project_id:
            missing.append("GCP_PROJECT_ID")

        cfg = cls(
            gcp_project_id=project_id,
            service_name=os.getenv("SERVICE_NAME") or "klaro-consent",
            region=os.getenv("REGION") or os.getenv("GCP_REGION") or "us-central1",
            source_dir=os.getenv("SOURCE_DIR") or ".",
            port=_get_int("CLOUD_RUN_PORT", 8080, invalid),
            memory=os.getenv("CLOUD_RUN_MEMORY") or "256Mi",
            cpu=os.getenv("CLOUD_RUN_CPU") or "1",
            max_instances=_get_int("CLOUD_RUN_MAX_INSTANCES", 10, invalid),
            min_instances=_get_int("CLOUD_RUN_MIN_INSTANCES", 0, invalid),
            allow_unauthenticated=_get_bool("ALLOW_UNAUTHENTICATED", True),
        )

        if missing:
            raise ValueError(
                "필수 환경변수가 누락되었습니다: " + ", ".join(sorted(set(missing)))
            )
        if invalid:
            raise ValueError(
                "정수 값이 필요한 환경변수가 잘못되었습니다: " + ", ".join(invalid)
            )

        return cfg
