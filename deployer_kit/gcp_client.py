"""
gcp_client
----------

프로비저닝 순서 로직이 의존하는 좁은 인터페이스(ProviderClient)와
gcloud CLI 기반 구현(GcloudClient).

테스트에서는 ProviderClient 를 만족하는 가짜 객체를 넣어
실제 gcloud 호출 없이 순서/멱등성을 검증한다.
"""

from __future__ import annotations

from typing import Protocol

from . import gcp_iam, gcp_project


class ProviderClient(Protocol):
    def set_project_scope(self, project_id: str) -> None: ...

    def enable_api(self, project_id: str, api: str) -> None: ...

    def identity_exists(self, project_id: str, email: str) -> bool: ...

    def create_identity(self, project_id: str, name: str, display_name: str, description: str) -> None: ...

    def grant_role(self, project_id: str, email: str, role: str) -> None: ...

    def issue_credential(self, email: str, key_file: str) -> None: ...


class GcloudClient:
    """gcloud CLI 를 호출하는 ProviderClient 구현. 실패는 CommandError 로 전파된다."""

    def set_project_scope(self, project_id: str) -> None:
        gcp_project.set_project(project_id)

    def enable_api(self, project_id: str, api: str) -> None:
        gcp_project.enable_api(project_id, api)

    def identity_exists(self, project_id: str, email: str) -> bool:
        return gcp_iam.service_account_exists(project_id, email)

    def create_identity(self, project_id: str, name: str, display_name: str, description: str) -> None:
        gcp_iam.create_service_account(project_id, name, display_name, description)

    def grant_role(self, project_id: str, email: str, role: str) -> None:
        gcp_iam.add_project_role(project_id, email, role)

    def issue_credential(self, email: str, key_file: str) -> None:
        gcp_iam.create_key(email, key_file)
