import json
import pytest
import pytest_asyncio
from typing import AsyncGenerator, Generator, List, Optional
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from signal_relay.core.config import Settings
from signal_relay.main import create_app
from signal_relay.websockets.handlers import SignalingMessageHandler
from signal_relay.websockets.registry import ConnectionRegistry


class FakeConnection:
    """테스트용 연결 핸들 (전송된 엔벨로프를 메모리에 기록)"""

    def __init__(self, name: str, writable: bool = True):
        self.name = name
        self.writable = writable
        self.sent: List[dict] = []

    @property
    def is_writable(self) -> bool:
        return self.writable

    def try_send(self, text: str) -> bool:
        if not self.writable:
            return False
        self.sent.append(json.loads(text))
        return True

    def events(self, event_type: Optional[str] = None) -> List[dict]:
        if event_type is None:
            return list(self.sent)
        return [envelope for envelope in self.sent if envelope["type"] == event_type]

    def __repr__(self) -> str:
        return f"<FakeConnection {self.name}>"


def envelope(message_type: str, channel_name: str = "c1", user_id: str = "alice", **extra) -> str:
    """수신 엔벨로프 JSON 텍스트 생성"""
    return json.dumps({
        "type": message_type,
        "body": {"channelName": channel_name, "userId": user_id, **extra}
    })


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def handler(registry) -> SignalingMessageHandler:
    return SignalingMessageHandler(registry)


@pytest.fixture
def alice() -> FakeConnection:
    return FakeConnection("alice")


@pytest.fixture
def bob() -> FakeConnection:
    return FakeConnection("bob")


@pytest.fixture
def carol() -> FakeConnection:
    return FakeConnection("carol")


@pytest.fixture
def test_settings() -> Settings:
    """테스트용 설정"""
    return Settings(
        app_name="Signal Relay Test",
        debug=True,
        log_level="WARNING",
        log_dir=None,
    )


@pytest.fixture
def app(test_settings) -> FastAPI:
    return create_app(test_settings)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """테스트용 비동기 HTTP 클라이언트"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def ws_client(app) -> Generator[TestClient, None, None]:
    """
    WebSocket 테스트 클라이언트

    컨텍스트 매니저로 열어야 모든 WebSocket 세션이 하나의 이벤트 루프를 공유합니다.
    """
    with TestClient(app) as client:
        yield client
