import os
import sys
from typing import Optional

import click

from . import console
from .config import DeployConfig, ProvisionConfig, load_env_files
from .deployment import deploy as run_deploy, render_deploy_summary
from .gcp_client import GcloudClient
from .logging_utils import get_logger, setup_logging
from .provisioner import check_setup, plan_setup, provision, render_summary
from .subprocess_utils import CliNotFoundError, CommandError, ensure_cli_available


logger = get_logger(__name__)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리. env 파일을 읽고 키 파일을 저장하는 위치 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="-v: 실행하는 gcloud 명령 로그, -vv: 명령 출력까지 DEBUG 로그",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """GitHub Actions 배포용 GCP 서비스 계정 준비 및 Cloud Run 배포 CLI"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


project_id_option = click.option(
    "--project-id",
    "project_id",
    type=str,
    default=None,
    help="대상 GCP 프로젝트 ID. 없으면 GCP_PROJECT_ID 를 쓰고, 그것도 없으면 입력을 받습니다.",
)


def _preflight() -> None:
    try:
        ensure_cli_available("gcloud")
    except CliNotFoundError as e:
        console.error(str(e))
        sys.exit(1)


def _exit_status(returncode: int) -> int:
    """
    외부 명령 종료 코드를 프로세스 종료 코드로 바꾼다.
    시그널로 죽은 경우(음수)는 셸 관례대로 128 + 시그널 번호.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode or 1


def _resolve_project_id(project_id: Optional[str]) -> str:
    """
    --project-id, GCP_PROJECT_ID(환경변수 / env 파일), 대화형 입력 순으로 프로젝트 ID 를 정한다.
    env 파일은 호출 전에 이미 로드되어 있어야 한다.
    """
    project_id = (project_id or "").strip()
    if not project_id:
        project_id = os.getenv("GCP_PROJECT_ID", "").strip()
    if not project_id:
        click.secho("Please enter your Google Cloud Project ID:", fg="yellow")
        project_id = click.prompt("", default="", show_default=False, prompt_suffix="")
    return project_id


def _load_provision_config(ctx: click.Context, project_id: Optional[str]) -> ProvisionConfig:
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    project_id = _resolve_project_id(project_id)

    try:
        cfg = ProvisionConfig.create(project_id, base_dir=base_dir)
    except ValueError as e:
        console.error(str(e))
        sys.exit(1)

    logger.debug("Config loaded: %s", cfg)
    return cfg


def _confirm_overwrite(message: str) -> bool:
    return click.confirm(message, default=False)


@main.command()
@project_id_option
@click.pass_context
def setup(ctx: click.Context, project_id: Optional[str]) -> None:
    """배포용 서비스 계정을 만들고 역할을 부여한 뒤 (선택) 키 파일을 발급"""
    console.header("GCP Service Account Setup for Cloud Run")
    _preflight()
    cfg = _load_provision_config(ctx, project_id)

    try:
        result = provision(cfg, GcloudClient(), confirm=_confirm_overwrite)
    except CommandError as e:
        console.error(str(e))
        sys.exit(_exit_status(e.returncode))
    except CliNotFoundError as e:
        console.error(str(e))
        sys.exit(1)

    click.echo("")
    console.header("Setup Complete!")
    click.echo(render_summary(result))


@main.command()
@project_id_option
@click.pass_context
def plan(ctx: click.Context, project_id: Optional[str]) -> None:
    """setup 이 수행할 API/역할/키 파일 구성을 출력 (GCP 호출 없음)"""
    cfg = _load_provision_config(ctx, project_id)
    click.echo(plan_setup(cfg))


@main.command()
@project_id_option
@click.option(
    "-a",
    "--all",
    "show_all",
    is_flag=True,
    help="모든 체크 항목의 상세 상태를 출력합니다. (기본은 이슈만 요약)",
)
@click.pass_context
def check(ctx: click.Context, project_id: Optional[str], show_all: bool) -> None:
    """
    서비스 계정/역할/API 상태를 점검한다.
    (실제 리소스 생성/변경은 하지 않는다)
    """
    cfg = _load_provision_config(ctx, project_id)

    try:
        report, has_issues = check_setup(cfg, show_all=show_all)
    except Exception as e:  # noqa: BLE001
        logger.exception("사전 체크 중 오류 발생")
        console.error(f"체크 실패: {e}")
        sys.exit(1)

    click.echo(report)

    # 이슈가 있으면 exit 1 로 종료하여 CI 등에서 감지 가능하게 한다.
    if has_issues:
        sys.exit(1)


@main.command(name="deploy")
@project_id_option
@click.pass_context
def deploy(ctx: click.Context, project_id: Optional[str]) -> None:
    """정적 자산 이미지를 Cloud Build 로 빌드하고 Cloud Run 에 배포"""
    console.header("Cloud Run Deployment")
    _preflight()

    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    project_id = _resolve_project_id(project_id)
    try:
        cfg = DeployConfig.from_env(project_id=project_id)
    except ValueError as e:
        console.error(f"설정 로드 실패: {e}")
        sys.exit(1)

    # 상대 경로는 -C 디렉토리 기준
    if not os.path.isabs(cfg.source_dir):
        cfg.source_dir = os.path.normpath(os.path.join(base_dir, cfg.source_dir))

    try:
        result = run_deploy(cfg)
    except CommandError as e:
        console.error(str(e))
        sys.exit(_exit_status(e.returncode))
    except CliNotFoundError as e:
        console.error(str(e))
        sys.exit(1)

    click.echo("")
    console.header("Deployment Complete!")
    click.echo(render_deploy_summary(result))
