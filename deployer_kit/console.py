"""
console
-------

사람이 읽는 진행 메시지 출력 헬퍼.
성공/경고/오류를 색이 다른 마커로 구분한다.
"""

from __future__ import annotations

import click


def header(message: str) -> None:
    click.secho(f"=== {message} ===", fg="green", bold=True)
    click.echo("")


def step(message: str) -> None:
    click.secho(message, fg="green")


def info(message: str) -> None:
    click.echo(message)


def success(message: str) -> None:
    click.echo(click.style("[OK] ", fg="green") + message)


def warning(message: str) -> None:
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def error(message: str) -> None:
    click.echo(click.style("[ERROR] ", fg="red") + message, err=True)
