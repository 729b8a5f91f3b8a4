import logging
import sys


def setup_logging(verbosity: int = 0) -> None:
    """
    진행 상황은 console 모듈이 출력하므로 기본 로그 레벨은 WARNING 으로 둔다.
    -v 는 실행하는 gcloud 명령까지, -vv 는 캡처된 출력까지 보여준다.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
