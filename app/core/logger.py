"""표준화된 로거 모듈.

서버와 클라이언트 엔진이 같은 형식으로 로그를 남기도록 한다.
"""

import logging
import os
import sys

_LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """표준화된 로거를 반환합니다.

    루트 로거가 `dictConfig`로 이미 구성된 경우(서버 실행 시)에는 핸들러를 붙이지 않고
    전파에 맡깁니다. 클라이언트 엔진처럼 단독 실행될 때만 stdout 핸들러를 붙입니다.

    Args:
        name: 로거 이름 (일반적으로 __name__ 사용).

    Returns:
        설정된 로거 인스턴스.
    """
    logger = logging.getLogger(name)

    if not logger.handlers and not logging.getLogger().handlers:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        logger.setLevel(level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)

    return logger
