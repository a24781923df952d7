from .signaling import (
    MessageType,
    EventType,
    SignalingBody,
    Envelope,
    SignalingRequest,
    JoinRequest,
    QuitRequest,
    OfferRequest,
    AnswerRequest,
    IceCandidateRequest,
    AnyRequest,
    MessageBody,
    JoinedBody,
    MemberEventBody,
    ChannelSummary,
    ChannelList,
    ChannelStatus,
)

__all__ = [
    "MessageType",
    "EventType",
    "SignalingBody",
    "Envelope",
    "SignalingRequest",
    "JoinRequest",
    "QuitRequest",
    "OfferRequest",
    "AnswerRequest",
    "IceCandidateRequest",
    "AnyRequest",
    "MessageBody",
    "JoinedBody",
    "MemberEventBody",
    "ChannelSummary",
    "ChannelList",
    "ChannelStatus",
]
