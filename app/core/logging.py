"""
structlog 기반 로깅 설정

- 개발 환경: 컬러 콘솔, 프로덕션 환경: JSON 한 줄
- request_id, user_id를 contextvars에서 읽어 자동 주입
- 프로덕션에서는 토큰, JWT, DB 접속 정보를 마스킹
"""

import logging
import re
import sys

import structlog

from app.core.config import settings
from app.core.context import get_request_id, get_user_id

SENSITIVE_PATTERNS = [
    (re.compile(r"(Bearer\s+)[^\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+"), "***"),
    (re.compile(r"gh[pousr]_[A-Za-z0-9]{20,}"), "***"),
    (re.compile(r"(sk-)[\w-]{8,}"), r"\1***"),
    (re.compile(r"(://[^:/@\s]+:)[^@\s]+(@)"), r"\1***\2"),
    (re.compile(r"((?:token|api[_-]?key|password|secret)=)[^&\s]+", re.IGNORECASE), r"\1***"),
]

NOISY_LOGGERS = (
    "httpcore",
    "httpx",
    "urllib3",
    "openai",
    "langchain",
    "langfuse",
    "google_genai",
    "sqlalchemy.engine",
    "aiosqlite",
    "asyncpg",
    "anyio",
)


def _mask(value):
    if isinstance(value, str):
        for pattern, replacement in SENSITIVE_PATTERNS:
            value = pattern.sub(replacement, value)
        return value
    if isinstance(value, dict):
        return {k: _mask(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_mask(v) for v in value)
    return value


def add_context_processor(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """request_id와 user_id를 로그에 자동 주입 (명시적으로 넘긴 값이 우선)"""
    request_id = get_request_id()
    if request_id:
        event_dict.setdefault("request_id", request_id)

    user_id = get_user_id()
    if user_id:
        event_dict.setdefault("user_id", user_id)

    return event_dict


def mask_sensitive_processor(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """프로덕션에서 민감한 정보 마스킹"""
    if not settings.is_production:
        return event_dict
    return {key: _mask(value) for key, value in event_dict.items()}


def _shared_processors() -> list:
    processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_context_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.is_production:
        processors.append(structlog.processors.format_exc_info)
    # 마스킹은 메시지 포맷과 예외 렌더링이 끝난 뒤에 적용
    processors.append(mask_sensitive_processor)
    return processors


def setup_logging(level: str | None = None) -> None:
    """structlog 설정 초기화"""
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    shared_processors = _shared_processors()

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if settings.is_production:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # uvicorn 로그도 루트 핸들러 하나로 출력
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """structlog 로거 반환"""
    return structlog.get_logger(name)
