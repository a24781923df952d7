"""
WebSocket 시그널링 모듈

주요 구성 요소:
- registry: 채널별 참여자 ↔ 연결 매핑
- codec: 엔벨로프 디코딩/인코딩
- handlers: 메시지 라우팅 엔진
- connection: WebSocket 연결 핸들 (비차단 송신)
- lifecycle: 연결 수명 주기 처리
"""

from .registry import ConnectionRegistry, RegistryStats
from .connection import WebSocketConnection
from .handlers import SignalingMessageHandler
from .lifecycle import ConnectionLifecycle

__all__ = [
    "ConnectionRegistry",
    "RegistryStats",
    "WebSocketConnection",
    "SignalingMessageHandler",
    "ConnectionLifecycle",
]
