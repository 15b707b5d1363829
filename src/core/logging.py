"""
로깅 설정.

모듈마다 logger = logging.getLogger(__name__) 사용,
진입점(main)에서 setup_logging()을 한 번 호출한다.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> int:
    """
    루트 로거 설정.

    Args:
        level: 로그 레벨 이름 (DEBUG, INFO, WARNING ...)

    Returns:
        적용된 숫자 레벨
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    logging.getLogger().setLevel(numeric)
    return numeric


def uvicorn_log_level(level: str) -> str:
    """uvicorn.Config(log_level=...)용 소문자 레벨 이름."""
    name = level.lower()
    if name not in ("critical", "error", "warning", "info", "debug", "trace"):
        return "info"
    return name
