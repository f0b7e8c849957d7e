"""
HTTP 요청 로깅 미들웨어

- 요청 시작 시 request_id 생성 (X-Request-ID 헤더가 있으면 재사용)
- 응답 상태에 따라 로그 레벨 구분
- X-Request-ID 응답 헤더 추가
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.context import clear_context, set_request_id
from app.core.logging import get_logger

logger = get_logger(__name__)

SKIP_PATHS = {"/health", "/docs", "/openapi.json", "/redoc", "/favicon.ico"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """HTTP 요청 로깅 및 request_id 관리 미들웨어"""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        request_id = set_request_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "요청 실패",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=_elapsed_ms(start_time),
            )
            clear_context()
            raise

        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "요청 완료",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=_elapsed_ms(start_time),
            user_id=getattr(request.state, "user_id", None),
        )

        response.headers["X-Request-ID"] = request_id
        clear_context()
        return response


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)
