import asyncio
import logging
import uuid
from typing import Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """
    WebSocket 연결 핸들

    송신은 제한된 크기의 대기열에 넣고 즉시 반환하며, 별도의 writer 태스크가 소켓으로
    전송합니다. 대기열이 가득 찼거나 소켓이 닫힌 경우 try_send 는 False 를 반환합니다.
    """

    def __init__(self, websocket: WebSocket, queue_size: int = 64):
        self.websocket = websocket
        self.connection_id = uuid.uuid4().hex[:12]
        self.remote = self._format_remote(websocket)
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._writer: Optional[asyncio.Task] = None
        self._closed = False

    @staticmethod
    def _format_remote(websocket: WebSocket) -> str:
        client = websocket.client
        if client is None:
            return "unknown"
        return f"{client.host}:{client.port}"

    @property
    def is_writable(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
            and not self._queue.full()
        )

    def try_send(self, text: str) -> bool:
        """전송을 예약합니다. 즉시 보낼 수 없는 상태면 False."""
        if not self.is_writable:
            return False
        self._queue.put_nowait(text)
        return True

    def start(self):
        """writer 태스크 시작"""
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    async def _drain(self):
        while True:
            text = await self._queue.get()
            try:
                await self.websocket.send_text(text)
            except Exception as e:
                # 연결이 끊어진 경우 이후 송신은 모두 건너뜀
                logger.debug(f"Send failed on connection {self.connection_id}: {e}")
                self._closed = True
                return

    async def close(self):
        """writer 태스크 종료"""
        self._closed = True
        if self._writer is None:
            return

        writer, self._writer = self._writer, None
        writer.cancel()
        await asyncio.gather(writer, return_exceptions=True)

    def __repr__(self) -> str:
        return f"<WebSocketConnection {self.connection_id} from {self.remote}>"
