"""
pytest 설정:

로컬 작업 환경에 다른 버전의 deployer_kit 이 설치되어 있으면
site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.
repo root 를 sys.path 최상단에 고정하고, 공용 가짜 gcloud 클라이언트를 제공한다.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import pytest


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


class FakeProvider:
    """
    메모리 안에서 프로젝트 상태를 흉내내는 ProviderClient.

    calls 에 호출 순서를 기록하고, fail_on_role 로 지정한 역할 부여나
    fail_on 으로 지정한 메서드에서 CommandError(returncode=fail_returncode) 를 낸다.
    """

    def __init__(
        self,
        fail_on_role: Optional[str] = None,
        fail_on: Optional[str] = None,
        fail_returncode: int = 2,
    ) -> None:
        self.calls: list[tuple] = []
        self.scope: Optional[str] = None
        self.enabled_apis: set[str] = set()
        self.identities: set[str] = set()
        self.policy: set[tuple[str, str]] = set()
        self.fail_on_role = fail_on_role
        self.fail_on = fail_on
        self.fail_returncode = fail_returncode

    def _maybe_fail(self, method: str) -> None:
        from deployer_kit.subprocess_utils import CommandError

        if method == self.fail_on:
            raise CommandError(["gcloud", method], self.fail_returncode, "simulated failure")

    def set_project_scope(self, project_id: str) -> None:
        self.calls.append(("set_project_scope", project_id))
        self._maybe_fail("set_project_scope")
        self.scope = project_id

    def enable_api(self, project_id: str, api: str) -> None:
        self.calls.append(("enable_api", api))
        self._maybe_fail("enable_api")
        self.enabled_apis.add(api)

    def identity_exists(self, project_id: str, email: str) -> bool:
        self.calls.append(("identity_exists", email))
        return email in self.identities

    def create_identity(self, project_id: str, name: str, display_name: str, description: str) -> None:
        self.calls.append(("create_identity", name))
        self._maybe_fail("create_identity")
        email = f"{name}@{project_id}.iam.gserviceaccount.com"
        assert email not in self.identities, "이미 있는 서비스 계정을 다시 만들면 안 된다"
        self.identities.add(email)

    def grant_role(self, project_id: str, email: str, role: str) -> None:
        from deployer_kit.subprocess_utils import CommandError

        self.calls.append(("grant_role", role))
        if role == self.fail_on_role:
            raise CommandError(["gcloud", "projects", "add-iam-policy-binding"], self.fail_returncode, "PERMISSION_DENIED")
        self.policy.add((role, f"serviceAccount:{email}"))

    def issue_credential(self, email: str, key_file: str) -> None:
        self.calls.append(("issue_credential", key_file))
        with open(key_file, "w", encoding="utf-8") as f:
            f.write('{"client_email": "%s", "private_key_id": "k%d"}' % (email, len(self.calls)))


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def provider_factory():
    return FakeProvider
