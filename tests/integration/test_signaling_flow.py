"""
시그널링 전체 흐름 통합 테스트

실제 WebSocket 엔드포인트에 여러 클라이언트를 연결해 join → offer/answer/ICE → quit /
disconnect 시나리오를 검증합니다.
"""

import time

from fastapi.testclient import TestClient

from conftest import envelope


SDP_OFFER = {"type": "offer", "sdp": "v=0\r\no=- 4611731400430051336 2 IN IP4 127.0.0.1\r\n"}
SDP_ANSWER = {"type": "answer", "sdp": "v=0\r\no=- 4611731400430051337 2 IN IP4 127.0.0.1\r\n"}
CANDIDATE = {"candidate": "candidate:1 1 UDP 2122252543 192.168.1.2 54400 typ host", "sdpMid": "0", "sdpMLineIndex": 0}


def connect(client: TestClient):
    """연결 후 welcome 메시지를 소비한 세션 반환"""
    session = client.websocket_connect("/")
    ws = session.__enter__()
    welcome = ws.receive_json()
    assert welcome["type"] == "welcome"
    return session, ws


def wait_for_channel_state(client: TestClient, channel_name: str, expected_status: int, timeout: float = 2.0):
    """연결 종료 정리는 비동기로 진행되므로 상태가 반영될 때까지 대기"""
    deadline = time.monotonic() + timeout
    response = client.get(f"/channels/{channel_name}")
    while response.status_code != expected_status and time.monotonic() < deadline:
        time.sleep(0.01)
        response = client.get(f"/channels/{channel_name}")
    return response


class TestSignalingFlow:
    """두 피어 간 시그널링 시나리오"""

    def test_welcome_on_connect(self, ws_client: TestClient):
        with ws_client.websocket_connect("/") as ws:
            message = ws.receive_json()

        assert message == {"type": "welcome", "body": {"message": "Connected to signaling server with PC control support"}}

    def test_join_offer_answer_ice(self, ws_client: TestClient):
        session_a, a = connect(ws_client)
        session_b, b = connect(ws_client)
        try:
            a.send_text(envelope("join", "c1", "alice"))
            joined_a = a.receive_json()
            assert joined_a["type"] == "joined"
            assert joined_a["body"]["users"] == ["alice"]

            b.send_text(envelope("join", "c1", "bob"))
            joined_b = b.receive_json()
            assert joined_b["body"]["users"] == ["alice", "bob"]
            assert a.receive_json() == {
                "type": "user_joined",
                "body": {"userId": "bob", "message": "User bob joined the channel"}
            }

            b.send_text(envelope("send_offer", "c1", "bob", sdp=SDP_OFFER))
            assert a.receive_json() == {"type": "offer_sdp_recieved", "body": SDP_OFFER}

            a.send_text(envelope("send_answer", "c1", "alice", sdp=SDP_ANSWER))
            assert b.receive_json() == {"type": "answer_sdp_recieved", "body": SDP_ANSWER}

            a.send_text(envelope("send_ice_candidate", "c1", "alice", candidate=CANDIDATE))
            assert b.receive_json() == {"type": "ice_candidate_recieved", "body": CANDIDATE}
        finally:
            session_b.__exit__(None, None, None)
            session_a.__exit__(None, None, None)

    def test_offer_without_sdp(self, ws_client: TestClient):
        session_a, a = connect(ws_client)
        session_b, b = connect(ws_client)
        try:
            a.send_text(envelope("join", "c1", "alice"))
            a.receive_json()
            b.send_text(envelope("join", "c1", "bob"))
            b.receive_json()
            a.receive_json()  # user_joined

            b.send_text(envelope("send_offer", "c1", "bob"))
            assert b.receive_json() == {"type": "error", "body": {"message": "Missing SDP in offer"}}

            # alice 가 받는 다음 메시지는 이후의 ICE 후보여야 함
            b.send_text(envelope("send_ice_candidate", "c1", "bob", candidate=CANDIDATE))
            assert a.receive_json()["type"] == "ice_candidate_recieved"

            response = ws_client.get("/channels/c1")
            assert response.json()["users"] == ["alice", "bob"]
        finally:
            session_b.__exit__(None, None, None)
            session_a.__exit__(None, None, None)

    def test_quit_then_disconnect_removes_channel(self, ws_client: TestClient):
        session_a, a = connect(ws_client)
        session_b, b = connect(ws_client)
        try:
            a.send_text(envelope("join", "c1", "alice"))
            a.receive_json()
            b.send_text(envelope("join", "c1", "bob"))
            b.receive_json()
            a.receive_json()

            a.send_text(envelope("quit", "c1", "alice"))
            assert b.receive_json() == {
                "type": "user_left",
                "body": {"userId": "alice", "message": "User alice left the channel"}
            }
            assert wait_for_channel_state(ws_client, "c1", 200).json()["users"] == ["bob"]
        finally:
            session_b.__exit__(None, None, None)

        response = wait_for_channel_state(ws_client, "c1", 404)
        assert response.status_code == 404
        session_a.__exit__(None, None, None)

    def test_disconnect_notifies_remaining_members(self, ws_client: TestClient):
        session_a, a = connect(ws_client)
        session_b, b = connect(ws_client)
        try:
            a.send_text(envelope("join", "c1", "alice"))
            a.receive_json()
            b.send_text(envelope("join", "c1", "bob"))
            b.receive_json()
            a.receive_json()

            session_b.__exit__(None, None, None)

            assert a.receive_json() == {
                "type": "user_left",
                "body": {"userId": "bob", "message": "User bob left the channel"}
            }
            assert wait_for_channel_state(ws_client, "c1", 200).json()["users"] == ["alice"]
        finally:
            session_a.__exit__(None, None, None)

    def test_malformed_json_keeps_connection_open(self, ws_client: TestClient):
        with ws_client.websocket_connect("/") as ws:
            ws.receive_json()

            ws.send_text("{this is not json")
            assert ws.receive_json() == {"type": "error", "body": {"message": "Invalid JSON format"}}

            ws.send_text('{"type": "join", "body": {}}')
            assert ws.receive_json() == {
                "type": "error",
                "body": {"message": "Missing required fields: channelName, userId"}
            }

            ws.send_text(envelope("teleport", "c1", "alice"))
            assert ws.receive_json() == {"type": "error", "body": {"message": "Unknown message type: teleport"}}

            # 연결은 유지되고 이후 메시지도 정상 처리
            ws.send_text(envelope("join", "c1", "alice"))
            assert ws.receive_json()["type"] == "joined"

        assert wait_for_channel_state(ws_client, "c1", 404).status_code == 404

    def test_group_broadcast_reaches_everyone_but_sender(self, ws_client: TestClient):
        sessions = [connect(ws_client) for _ in range(3)]
        try:
            for i, (_, ws) in enumerate(sessions):
                ws.send_text(envelope("join", "mesh", f"peer{i}"))
                assert ws.receive_json()["type"] == "joined"
                # 이미 입장한 피어들은 user_joined 수신
                for _, earlier in sessions[:i]:
                    assert earlier.receive_json()["body"]["userId"] == f"peer{i}"

            _, sender = sessions[1]
            sender.send_text(envelope("send_offer", "mesh", "peer1", sdp=SDP_OFFER))

            for index in (0, 2):
                assert sessions[index][1].receive_json() == {"type": "offer_sdp_recieved", "body": SDP_OFFER}
        finally:
            for session, _ in reversed(sessions):
                session.__exit__(None, None, None)
