from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from textwrap import shorten
from typing import Mapping, Sequence

from .logging_utils import get_logger


logger = get_logger(__name__)


INSTALL_HINTS = {
    "gcloud": "https://cloud.google.com/sdk/docs/install",
}


class CliNotFoundError(RuntimeError):
    """필요한 외부 CLI 가 PATH 에 없을 때."""

    def __init__(self, name: str) -> None:
        hint = INSTALL_HINTS.get(name)
        message = f"{name} CLI 가 설치되어 있지 않습니다."
        if hint:
            message += f" 설치 안내: {hint}"
        super().__init__(message)
        self.name = name


class CommandError(RuntimeError):
    """
    외부 명령이 0 이 아닌 코드로 종료됨.

    returncode 를 그대로 들고 있어서 CLI 가 같은 종료 코드로 빠져나갈 수 있다.
    """

    def __init__(self, cmd: Sequence[str], returncode: int, output: str = "") -> None:
        detail = ""
        if output:
            detail = "\n" + shorten(output, width=2000)
        super().__init__(f"명령 실행 실패: {' '.join(cmd)} (exit={returncode}){detail}")
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str


def ensure_cli_available(name: str) -> str:
    """
    name 실행 파일이 PATH 에 있는지 확인하고 전체 경로를 돌려준다.
    외부 호출을 하기 전에 실패시키기 위한 preflight 용도.
    """
    path = shutil.which(name)
    if not path:
        raise CliNotFoundError(name)
    logger.debug("%s 경로: %s", name, path)
    return path


def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    stream_output: bool = False,
) -> RunResult:
    """
    subprocess 실행 공통 유틸.

    - stream_output=False: stdout/stderr 캡처, 실패 시 stderr(없으면 stdout) 요약을 CommandError 에 담는다.
    - stream_output=True : stdout/stderr 를 합쳐 실시간으로 터미널에 흘린다 (빌드/배포처럼 오래 걸리는 명령).

    타임아웃은 두지 않는다. gcloud 자체 동작을 그대로 따른다.
    """
    logger.info("명령 실행: %s", " ".join(cmd))

    if stream_output:
        try:
            proc = subprocess.Popen(  # noqa: S603
                list(cmd),
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError as e:
            raise CliNotFoundError(cmd[0]) from e

        out_lines: list[str] = []
        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                out_lines.append(line)
                sys.stdout.write(line)
                sys.stdout.flush()
            returncode = proc.wait()
        finally:
            if proc.stdout is not None:
                proc.stdout.close()

        combined = "".join(out_lines)
        if returncode != 0:
            raise CommandError(cmd, returncode, combined.strip())
        return RunResult(returncode=returncode, stdout=combined, stderr="")

    try:
        result = subprocess.run(
            list(cmd),
            check=True,
            capture_output=True,
            text=True,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError as e:
        raise CliNotFoundError(cmd[0]) from e
    except subprocess.CalledProcessError as e:
        stdout = (e.stdout or "").strip()
        stderr = (e.stderr or "").strip()
        raise CommandError(cmd, e.returncode, stderr or stdout) from e

    if result.stdout:
        logger.debug("명령 stdout: %s", shorten(result.stdout.strip(), width=2000))
    if result.stderr:
        logger.debug("명령 stderr: %s", shorten(result.stderr.strip(), width=2000))
    return RunResult(returncode=result.returncode, stdout=result.stdout or "", stderr=result.stderr or "")
