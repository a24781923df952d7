"""
HTTP 접근 로그 미들웨어

요청마다 요청 ID 를 정해 로그 컨텍스트에 싣고, 처리 결과를 log_api_call 로 남깁니다.
클라이언트가 X-Request-ID 를 보내면 그 값을 그대로 이어받습니다.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from signal_relay.core.logging import get_logger, set_request_context, clear_request_context, log_api_call

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def client_address(request: Request) -> str:
    """프록시 헤더를 우선으로 클라이언트 주소 추출"""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """HTTP 요청 접근 로그 (WebSocket 핸드셰이크는 대상이 아님)"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = set_request_context(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} failed: {type(e).__name__}",
                extra={
                    "event_type": "api_error",
                    "duration_ms": (time.perf_counter() - started) * 1000,
                    "client_ip": client_address(request)
                },
                exc_info=True
            )
            clear_request_context(token)
            raise

        log_api_call(
            logger,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=(time.perf_counter() - started) * 1000,
            client_ip=client_address(request)
        )
        clear_request_context(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
