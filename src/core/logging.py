"""
로깅 설정.

규칙:
- 모듈마다 logger = logging.getLogger(__name__)
- 생성 실패: ERROR + exc_info (원인은 로그에만)
- setup_logging은 여러 번 호출해도 안전
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    루트 로거 설정.

    이미 핸들러가 있으면 레벨만 갱신.

    Args:
        level: logging 레벨 (int 또는 "INFO" 같은 이름)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
