from typing import List

import pytest

from deployer_kit import deployment, gcp_cloud_run, gcp_project
from deployer_kit.config import DEPLOY_APIS, DeployConfig
from deployer_kit.subprocess_utils import CommandError, RunResult


def _cfg(**overrides) -> DeployConfig:
    return DeployConfig(gcp_project_id="test-project", **overrides)


@pytest.fixture
def recorded(monkeypatch: pytest.MonkeyPatch) -> List[list[str]]:
    calls: List[list[str]] = []

    def fake_run(cmd, **kwargs) -> RunResult:  # noqa: ANN001, ARG001
        calls.append(list(cmd))
        stdout = "https://svc.a.run.app\n" if "describe" in cmd else ""
        return RunResult(returncode=0, stdout=stdout, stderr="")

    monkeypatch.setattr(gcp_project, "run_command", fake_run)
    monkeypatch.setattr(gcp_cloud_run, "run_command", fake_run)
    return calls


def test_deploy_runs_steps_in_order(recorded) -> None:
    result = deployment.deploy(_cfg())

    assert recorded[0] == ["gcloud", "config", "set", "project", "test-project"]
    assert [c[3] for c in recorded[1:4]] == list(DEPLOY_APIS)
    assert recorded[4][:3] == ["gcloud", "builds", "submit"]
    assert "gcr.io/test-project/klaro-consent" in recorded[4]
    assert recorded[5][:4] == ["gcloud", "run", "deploy", "klaro-consent"]
    assert recorded[6][:4] == ["gcloud", "run", "services", "describe"]
    assert result.url == "https://svc.a.run.app"


def test_deploy_service_flags(recorded) -> None:
    gcp_cloud_run.deploy_service(_cfg(allow_unauthenticated=False, max_instances=2), "gcr.io/p/s")

    cmd = recorded[0]
    assert "--no-allow-unauthenticated" in cmd
    assert cmd[cmd.index("--max-instances") + 1] == "2"
    assert cmd[cmd.index("--port") + 1] == "8080"
    assert cmd[cmd.index("--memory") + 1] == "256Mi"


def test_build_failure_stops_before_deploy(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[list[str]] = []

    def fake_run(cmd, **kwargs) -> RunResult:  # noqa: ANN001, ARG001
        calls.append(list(cmd))
        if "builds" in cmd:
            raise CommandError(cmd, 1, "build failed")
        return RunResult(returncode=0, stdout="", stderr="")

    monkeypatch.setattr(gcp_project, "run_command", fake_run)
    monkeypatch.setattr(gcp_cloud_run, "run_command", fake_run)

    with pytest.raises(CommandError):
        deployment.deploy(_cfg())

    assert not any(c[:3] == ["gcloud", "run", "deploy"] for c in calls)


def test_render_deploy_summary_includes_health_endpoint() -> None:
    result = deployment.DeployResult(
        project_id="test-project",
        service_name="klaro-consent",
        region="us-central1",
        image="gcr.io/test-project/klaro-consent",
        url="https://svc.a.run.app",
    )

    summary = deployment.render_deploy_summary(result)

    assert "- health: https://svc.a.run.app/health" in summary
    assert 'src="https://svc.a.run.app/klaro.js"' in summary


def test_render_deploy_summary_lists_available_files() -> None:
    result = deployment.DeployResult(
        project_id="test-project",
        service_name="klaro-consent",
        region="us-central1",
        image="gcr.io/test-project/klaro-consent",
        url="https://svc.a.run.app",
    )

    summary = deployment.render_deploy_summary(result)

    assert "Available files:" in summary
    for name in ("klaro.js", "klaro-no-css.js", "klaro.css", "klaro.min.css", "config.js"):
        assert f"https://svc.a.run.app/{name}" in summary
