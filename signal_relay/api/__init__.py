from fastapi import Request
from starlette.requests import HTTPConnection

from signal_relay.websockets.handlers import SignalingMessageHandler
from signal_relay.websockets.registry import ConnectionRegistry


def get_message_handler(connection: HTTPConnection) -> SignalingMessageHandler:
    """앱에 바인딩된 라우팅 엔진 반환 (HTTP / WebSocket 공용)"""
    return connection.app.state.message_handler


def get_registry(request: Request) -> ConnectionRegistry:
    """앱에 바인딩된 연결 레지스트리 반환"""
    return request.app.state.registry
