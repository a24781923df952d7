from enum import Enum
from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class MessageType(str, Enum):
    """클라이언트 → 서버 메시지 타입"""
    JOIN = "join"
    QUIT = "quit"
    SEND_OFFER = "send_offer"
    SEND_ANSWER = "send_answer"
    SEND_ICE_CANDIDATE = "send_ice_candidate"


class EventType(str, Enum):
    """서버 → 클라이언트 이벤트 타입 ("recieved" 철자는 프로토콜의 일부)"""
    WELCOME = "welcome"
    JOINED = "joined"
    USER_JOINED = "user_joined"
    USER_LEFT = "user_left"
    OFFER_SDP_RECEIVED = "offer_sdp_recieved"
    ANSWER_SDP_RECEIVED = "answer_sdp_recieved"
    ICE_CANDIDATE_RECEIVED = "ice_candidate_recieved"
    ERROR = "error"


# =============================================================================
# 수신 엔벨로프
# =============================================================================

class SignalingBody(BaseModel):
    """수신 엔벨로프 body 스키마"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    channel_name: str = Field(..., alias="channelName", min_length=1, strict=True, description="채널 이름")
    user_id: str = Field(..., alias="userId", min_length=1, strict=True, description="채널 내 사용자 ID")
    sdp: Optional[Any] = Field(None, description="세션 디스크립션 (불투명 데이터)")
    candidate: Optional[Any] = Field(None, description="ICE 후보 (불투명 데이터)")


class Envelope(BaseModel):
    """디코딩된 수신 엔벨로프 {type, body}"""
    type: str
    body: SignalingBody


class SignalingRequest(BaseModel):
    """타입별로 검증된 시그널링 요청의 공통 필드"""
    channel_name: str
    user_id: str


class JoinRequest(SignalingRequest):
    type: Literal["join"] = "join"


class QuitRequest(SignalingRequest):
    type: Literal["quit"] = "quit"


class OfferRequest(SignalingRequest):
    type: Literal["send_offer"] = "send_offer"
    sdp: Any


class AnswerRequest(SignalingRequest):
    type: Literal["send_answer"] = "send_answer"
    sdp: Any


class IceCandidateRequest(SignalingRequest):
    type: Literal["send_ice_candidate"] = "send_ice_candidate"
    candidate: Any


AnyRequest = Union[JoinRequest, QuitRequest, OfferRequest, AnswerRequest, IceCandidateRequest]


# =============================================================================
# 송신 엔벨로프 body
# =============================================================================

class MessageBody(BaseModel):
    """welcome / error 이벤트 body"""
    message: str


class JoinedBody(BaseModel):
    """joined 이벤트 body (입장한 사용자에게만 전송)"""
    model_config = ConfigDict(populate_by_name=True)

    channel_name: str = Field(..., alias="channelName")
    user_id: str = Field(..., alias="userId")
    users: List[str] = Field(default_factory=list, description="현재 채널 멤버 목록")
    message: str


class MemberEventBody(BaseModel):
    """user_joined / user_left 이벤트 body"""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    message: str


# =============================================================================
# HTTP 응답 스키마
# =============================================================================

class ChannelSummary(BaseModel):
    channel_name: str
    user_count: int


class ChannelList(BaseModel):
    """채널 목록 응답"""
    channels: List[ChannelSummary] = Field(default_factory=list)
    total: int = 0


class ChannelStatus(BaseModel):
    """단일 채널 상태 응답"""
    channel_name: str
    users: List[str]
    user_count: int
    is_active: bool
