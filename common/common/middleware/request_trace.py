import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import ClientDisconnect
from starlette.responses import Response


REQUEST_ID_HEADER = "X-Request-Id"
SPAN_ID_HEADER = "X-Span-Id"

# 로그에서 제외할 경로 (헬스체크, 문서)
IGNORED_LOG_PATHS: frozenset[str] = frozenset(
    {"/health", "/docs", "/openapi.json", "/redoc"}
)

# 쿼리스트링에서 로그 extra 로 끌어올릴 유저 식별 파라미터
USER_QUERY_KEYS = ("user_id", "actor_id")

MAX_BODY_LOG_LENGTH = 1024


class RequestTraceMiddleware(BaseHTTPMiddleware):
    """Request/Span ID 를 붙이고 요청 단위로 한 줄씩 로그를 남기는 미들웨어.

    - X-Request-Id 가 없으면 새로 만들고, X-Span-Id 가 없으면 "0" 을 쓴다.
    - 두 값을 request.state 와 응답 헤더에 모두 싣는다.
    - 쿼리스트링의 user_id / actor_id 는 로그의 user_id 필드로 남긴다.
    - 상태를 바꾸는 요청은 바디 앞부분을 함께 남긴다.
    """

    def __init__(self, app, logger: logging.Logger | None = None) -> None:  # type: ignore[override]
        super().__init__(app)
        self._logger = logger or logging.getLogger("request_trace")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        span_id = request.headers.get(SPAN_ID_HEADER) or "0"
        request.state.request_id = request_id
        request.state.span_id = span_id

        extra = await self._build_extra(request, request_id, span_id)
        should_log = request.url.path not in IGNORED_LOG_PATHS
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception:
            if should_log:
                extra["duration"] = _format_duration(start)
                self._logger.exception("request failed", extra=extra)
            raise

        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        response.headers.setdefault(SPAN_ID_HEADER, span_id)

        if should_log:
            extra["status"] = response.status_code
            extra["duration"] = _format_duration(start)
            level = logging.WARNING if response.status_code >= 400 else logging.INFO
            self._logger.log(level, "completed request", extra=extra)

        return response

    async def _build_extra(
        self, request: Request, request_id: str, span_id: str
    ) -> dict[str, object]:
        extra: dict[str, object] = {
            "request_id": request_id,
            "span_id": span_id,
            "method": request.method,
            "path": request.url.path,
        }

        params = dict(request.query_params)
        if params:
            extra["query_params"] = params
        for key in USER_QUERY_KEYS:
            if params.get(key):
                extra["user_id"] = params[key]
                break

        if request.method in {"POST", "PUT", "PATCH", "DELETE"}:
            try:
                body = await request.body()
            except ClientDisconnect:
                body = b""
            if body:
                extra["body"] = body.decode("utf-8", errors="replace")[
                    :MAX_BODY_LOG_LENGTH
                ]

        return extra


def _format_duration(start: float) -> str:
    return f"{(time.monotonic() - start) * 1000:.3f}ms"
