"""로깅 설정

라이브러리 로거(`marketplace_client`) 하나를 구성합니다. 요청 URL이 그대로
로그에 남으므로 자격 증명 값은 `sanitize_for_log`로 가린 뒤 기록합니다.
"""
import logging
import os
import re
import sys
from typing import Optional

from marketplace_client.core.config import settings


LOGGER_NAME = "marketplace_client"

# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"

# key=value / key: value 형태의 자격 증명 값 (query string, 헤더 덤프 등)
_SENSITIVE_VALUE = re.compile(
    r"(?i)\b(\w*(?:token|password|passwd|api_?key|secret|authorization))(=|:\s*)((?:bearer\s+)?[^&\s,;]+)"
)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """로거 초기화 및 설정

    Args:
        level: 로그 레벨 (기본값: settings.log_level)
    """
    logger = logging.getLogger(LOGGER_NAME)

    log_level = (level or settings.log_level).upper()
    if IS_PRODUCTION and log_level == "DEBUG":
        log_level = "INFO"
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if IS_PRODUCTION:
            fmt = "%(asctime)s - %(levelname)s - %(message)s"
        else:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    return logger


logger = setup_logging()


def sanitize_for_log(value: str, max_length: int = 100) -> str:
    """자격 증명 값만 가린 뒤 로깅용 문자열 반환

    즐겨찾기 URI 등에는 토큰이 query string으로 섞여 들어올 수 있습니다.
    키 이름은 남기고 값만 `***`로 바꿉니다.

    Examples:
        >>> sanitize_for_log("http://fav.test/list?access_token=abc&page=2")
        'http://fav.test/list?access_token=***&page=2'

    Args:
        value: 로깅할 문자열
        max_length: 최대 길이

    Returns:
        마스킹/절단된 문자열
    """
    if not value:
        return "[empty]"

    result = _SENSITIVE_VALUE.sub(lambda m: f"{m.group(1)}{m.group(2)}***", value)

    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result
