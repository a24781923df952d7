from fastapi import APIRouter, WebSocket

from signal_relay.api import get_message_handler
from signal_relay.websockets.lifecycle import ConnectionLifecycle


async def signaling_endpoint(websocket: WebSocket):
    """
    시그널링 WebSocket 엔드포인트

    연결마다 하나의 태스크로 실행되며, 메시지는 도착 순서대로 처리됩니다.

    Args:
        websocket: WebSocket 연결 객체
    """
    handler = get_message_handler(websocket)
    await ConnectionLifecycle(handler).run(websocket)


def create_websocket_router(path: str) -> APIRouter:
    """설정된 경로에 시그널링 엔드포인트를 등록한 라우터 생성"""
    router = APIRouter(tags=["WebSocket"])
    router.add_api_websocket_route(path, signaling_endpoint)
    return router
