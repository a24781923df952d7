import logging
import traceback
from typing import Callable, Optional
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from signal_relay.core.errors import BaseCustomException, create_error_response

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    처리되지 않은 예외를 표준 에러 응답(500)으로 변환하는 미들웨어

    HTTPException 계열은 create_http_exception_handler 가 먼저 처리하므로 여기에는
    예상하지 못한 예외만 도달합니다. debug 가 켜져 있으면 예외 정보를 details 에 담습니다.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception on {request.method} {request.url.path}: {e!r}", exc_info=True)
            return self._internal_error(e)

    def _internal_error(self, exc: Exception) -> JSONResponse:
        details: Optional[dict] = None
        if self.debug:
            details = {
                "exception": str(exc),
                "type": type(exc).__name__,
                "traceback": traceback.format_exc()
            }

        error_response = create_error_response(
            "internal_server_error",
            "An unexpected error occurred",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            details
        )
        return JSONResponse(status_code=error_response.status_code, content=error_response.model_dump())


def create_http_exception_handler():
    """HTTPException 을 표준 에러 본문으로 바꾸는 핸들러 생성"""
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc, BaseCustomException):
            return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

        # 라우팅 실패(404/405) 등 프레임워크가 올린 예외
        if isinstance(exc.detail, str):
            error_response = create_error_response("http_error", exc.detail, exc.status_code)
        else:
            error_response = create_error_response(
                "http_error", "HTTP error occurred", exc.status_code, {"detail": exc.detail}
            )

        return JSONResponse(status_code=exc.status_code, content=error_response.model_dump())

    return http_exception_handler
