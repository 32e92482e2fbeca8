import json
import logging
import os
import sys
from datetime import datetime, timezone


# JsonFormatter 가 최상위 필드로 끌어올리는 extra 키 목록
EXTRA_LOG_KEYS = (
    "request_id",
    "span_id",
    "method",
    "path",
    "query_params",
    "status",
    "body",
    "duration",
    "user_id",
    "proposal_id",
    "transaction_id",
    "amount",
    "error_code",
)

# 디버그 레벨에서도 명령 단위 로그를 쏟아내는 라이브러리 로거
NOISY_LOGGERS = ("pymongo", "uvicorn.access")


def setup_logger(name: str = "skillio", level: str | None = None) -> logging.Logger:
    """루트 로거에 JSON 핸들러를 걸고 서비스 로거를 반환한다.

    서비스 모듈은 logging.getLogger(__name__) 를 쓰므로 핸들러는 루트에 하나만 둔다.
    여러 번 호출해도 핸들러가 중복되지 않는다.

    Args:
        name: 서비스 로거 이름 (SERVICE_NAME 환경변수가 우선)
        level: 로그 레벨 (None 이면 LOG_LEVEL 환경변수, 없으면 INFO)
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if isinstance(existing.formatter, JsonFormatter):
            root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    return logging.getLogger(os.getenv("SERVICE_NAME", name))


class JsonFormatter(logging.Formatter):
    """한 줄짜리 JSON 로그 포맷터.

    - datetime(UTC, 밀리초), level, logger, message 를 기본으로 남긴다.
    - EXTRA_LOG_KEYS 에 해당하는 extra 값은 최상위 필드로 추가한다.
    - 예외 정보가 있으면 exc_info 필드에 문자열로 추가한다.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_record: dict[str, object] = {
            "datetime": timestamp.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_LOG_KEYS:
            if hasattr(record, key):
                log_record[key] = getattr(record, key)

        service_name = getattr(record, "service_name", None) or os.getenv(
            "SERVICE_NAME"
        )
        if service_name:
            log_record["service_name"] = service_name

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=str)
