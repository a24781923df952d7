from typing import Optional, Dict, Any
from fastapi import HTTPException, status
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """표준 에러 응답 모델"""
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
    status_code: int


# =============================================================================
# 시그널링 예외 클래스들 (WebSocket 메시지 처리)
# =============================================================================

class SignalingError(Exception):
    """
    시그널링 메시지 처리 중 발생하는 예외의 기본 클래스

    message 는 그대로 error 엔벨로프의 body.message 로 발신자에게 전달됩니다.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DecodeError(SignalingError):
    """
    잘못된 형식이거나 필수 필드가 빠진 수신 엔벨로프

    type 이 없거나 문자열이 아닌 경우는 "Unknown message type: ..." 대신 MISSING_TYPE 으로
    응답합니다. 기존 두 메시지(INVALID_JSON, MISSING_IDS)에 더해진 확장 문구입니다.
    """

    INVALID_JSON = "Invalid JSON format"
    MISSING_IDS = "Missing required fields: channelName, userId"
    MISSING_TYPE = "Missing required field: type"


class ValidationError(SignalingError):
    """릴레이 이벤트에 sdp / candidate 페이로드가 없음"""


class UnknownMessageTypeError(SignalingError):
    """지원하지 않는 메시지 타입"""

    def __init__(self, message_type: str):
        self.message_type = message_type
        super().__init__(f"Unknown message type: {message_type}")


# =============================================================================
# HTTP 커스텀 예외 클래스들
# =============================================================================

class BaseCustomException(HTTPException):
    """기본 커스텀 예외 클래스"""
    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error = error
        self.message = message
        self.details = details
        self.status_code = status_code  # status_code를 먼저 설정
        super().__init__(status_code=status_code, detail=self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """예외를 딕셔너리로 변환"""
        return {
            "error": self.error,
            "message": self.message,
            "details": self.details,
            "status_code": self.status_code
        }


class ResourceNotFoundException(BaseCustomException):
    """리소스를 찾을 수 없음 예외"""
    def __init__(
        self,
        resource: str = "Resource",
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if message is None:
            message = f"{resource} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="resource_not_found",
            message=message,
            details=details or {"resource": resource}
        )


def create_error_response(
    error: str,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None
) -> ErrorResponse:
    """표준 에러 응답 생성"""
    return ErrorResponse(
        error=error,
        message=message,
        details=details,
        status_code=status_code
    )


# =============================================================================
# 자주 사용되는 에러 팩토리 함수들
# =============================================================================

def channel_not_found_error(channel_name: str):
    """채널을 찾을 수 없음 에러"""
    return ResourceNotFoundException("Channel", details={"channel_name": channel_name})
