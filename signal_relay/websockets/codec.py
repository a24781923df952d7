import json
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from signal_relay.core.errors import DecodeError, ValidationError, UnknownMessageTypeError
from signal_relay.schemas.signaling import (
    AnyRequest,
    AnswerRequest,
    Envelope,
    IceCandidateRequest,
    JoinRequest,
    MessageType,
    OfferRequest,
    QuitRequest,
    SignalingBody,
)

MISSING_SDP_IN_OFFER = "Missing SDP in offer"
MISSING_SDP_IN_ANSWER = "Missing SDP in answer"
MISSING_CANDIDATE = "Missing candidate in ICE message"


def decode(raw: Union[str, bytes]) -> Envelope:
    """
    수신 텍스트 프레임을 엔벨로프로 디코딩합니다.

    Args:
        raw: WebSocket 으로 받은 텍스트 (바이너리 프레임은 UTF-8 로 해석)

    Returns:
        Envelope: type 과 검증된 body

    Raises:
        DecodeError: JSON 형식이 아니거나 필수 필드가 없는 경우
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise DecodeError(DecodeError.INVALID_JSON)

    try:
        data = json.loads(raw)
    except (ValueError, RecursionError):
        # 중첩이 지나치게 깊은 입력도 형식 오류로 취급
        raise DecodeError(DecodeError.INVALID_JSON)

    if not isinstance(data, dict):
        raise DecodeError(DecodeError.INVALID_JSON)

    # body 필드를 type 보다 먼저 검사
    try:
        body = SignalingBody.model_validate(data.get("body"))
    except PydanticValidationError:
        raise DecodeError(DecodeError.MISSING_IDS)

    message_type = data.get("type")
    if not isinstance(message_type, str):
        raise DecodeError(DecodeError.MISSING_TYPE)

    return Envelope(type=message_type, body=body)


def _is_missing(value: Any) -> bool:
    """null, false, "", 0, NaN 은 페이로드가 없는 것으로 봄 (빈 객체와 빈 배열은 유효)"""
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


def to_request(envelope: Envelope) -> AnyRequest:
    """
    엔벨로프를 타입별 요청 객체로 변환합니다.

    Raises:
        ValidationError: 릴레이 이벤트에 sdp / candidate 가 없는 경우
        UnknownMessageTypeError: 알 수 없는 타입
    """
    body = envelope.body
    ids = {"channel_name": body.channel_name, "user_id": body.user_id}

    if envelope.type == MessageType.JOIN.value:
        return JoinRequest(**ids)
    elif envelope.type == MessageType.QUIT.value:
        return QuitRequest(**ids)
    elif envelope.type == MessageType.SEND_OFFER.value:
        if _is_missing(body.sdp):
            raise ValidationError(MISSING_SDP_IN_OFFER)
        return OfferRequest(sdp=body.sdp, **ids)
    elif envelope.type == MessageType.SEND_ANSWER.value:
        if _is_missing(body.sdp):
            raise ValidationError(MISSING_SDP_IN_ANSWER)
        return AnswerRequest(sdp=body.sdp, **ids)
    elif envelope.type == MessageType.SEND_ICE_CANDIDATE.value:
        if _is_missing(body.candidate):
            raise ValidationError(MISSING_CANDIDATE)
        return IceCandidateRequest(candidate=body.candidate, **ids)

    raise UnknownMessageTypeError(envelope.type)


def encode(event_type: str, body: Any) -> str:
    """송신 엔벨로프 {type, body} 를 JSON 텍스트로 직렬화합니다."""
    if isinstance(body, BaseModel):
        body = body.model_dump(by_alias=True)
    if isinstance(event_type, Enum):
        event_type = event_type.value
    return json.dumps({"type": event_type, "body": body})
