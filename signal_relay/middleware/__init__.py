from .error_handler import ErrorHandlerMiddleware, create_http_exception_handler
from .logging_middleware import LoggingMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "create_http_exception_handler",
    "LoggingMiddleware",
]
