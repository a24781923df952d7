import logging

from fastapi import WebSocket, WebSocketDisconnect

from signal_relay.core.logging import (
    clear_connection_context,
    log_websocket_event,
    set_connection_context,
)
from signal_relay.schemas.signaling import EventType, MessageBody
from signal_relay.websockets.connection import WebSocketConnection
from signal_relay.websockets.handlers import SignalingMessageHandler

logger = logging.getLogger(__name__)


class ConnectionLifecycle:
    """
    단일 WebSocket 연결의 수명 주기

    1. 연결 수락 후 welcome 전송
    2. 수신 프레임을 도착 순서대로 하나씩 처리
    3. 연결 종료(정상/오류) 시 레지스트리 정리를 정확히 한 번 수행
    """

    def __init__(self, handler: SignalingMessageHandler):
        self.handler = handler

    async def run(self, websocket: WebSocket):
        await websocket.accept()

        connection = WebSocketConnection(websocket, queue_size=self.handler.config.ws_send_queue_size)
        context_token = set_connection_context(connection.connection_id)
        log_websocket_event(logger, "connect", remote=connection.remote)

        connection.start()
        self.handler.send(connection, EventType.WELCOME, MessageBody(message=self.handler.config.welcome_message))

        try:
            await self._receive_loop(websocket, connection)

        except WebSocketDisconnect as e:
            log_websocket_event(logger, "disconnect", code=e.code, reason=e.reason)

        except Exception as e:
            logger.error(f"Unexpected error in WebSocket connection {connection!r}: {e}", exc_info=True)

        finally:
            await self.handler.handle_disconnect(connection)
            clear_connection_context(context_token)
            await connection.close()

    async def _receive_loop(self, websocket: WebSocket, connection: WebSocketConnection):
        while True:
            message = await websocket.receive()

            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))

            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""

            await self.handler.handle_raw(connection, raw)
