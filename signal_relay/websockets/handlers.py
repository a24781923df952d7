import logging
from typing import Any, Optional, Union

from signal_relay.core.config import Settings, settings as default_settings
from signal_relay.core.errors import SignalingError
from signal_relay.core.logging import log_websocket_event
from signal_relay.schemas.signaling import (
    AnswerRequest,
    AnyRequest,
    EventType,
    IceCandidateRequest,
    JoinedBody,
    JoinRequest,
    MemberEventBody,
    MessageBody,
    OfferRequest,
    QuitRequest,
)
from signal_relay.websockets import codec
from signal_relay.websockets.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class SignalingMessageHandler:
    """
    시그널링 메시지 라우팅 엔진

    수신 프레임을 디코딩하고 타입에 따라 레지스트리를 갱신하거나 같은 채널의 다른
    멤버들에게 전달합니다. 연결별 상태는 따로 두지 않고 레지스트리 멤버십으로 판단합니다.
    """

    def __init__(self, registry: ConnectionRegistry, config: Optional[Settings] = None):
        self.registry = registry
        self.config = config or default_settings

    @staticmethod
    def send(connection: Any, event_type: Union[EventType, str], body: Any) -> bool:
        """
        한 연결에 이벤트를 전송합니다.

        Returns:
            bool: 전송 대기열에 들어갔으면 True, 연결이 쓰기 불가능하면 False
        """
        if not connection.is_writable:
            logger.debug(f"Cannot send {event_type} - connection {connection!r} not writable")
            return False
        return connection.try_send(codec.encode(event_type, body))

    def send_error(self, connection: Any, message: str) -> bool:
        return self.send(connection, EventType.ERROR, MessageBody(message=message))

    async def handle_raw(self, connection: Any, raw: Union[str, bytes]):
        """
        WebSocket 으로 받은 프레임 하나를 처리합니다.

        Args:
            connection: 메시지를 보낸 연결 핸들
            raw: 수신 텍스트 (또는 바이너리)
        """
        preview_length = self.config.log_message_preview
        if logger.isEnabledFor(logging.DEBUG):
            text = raw if isinstance(raw, str) else repr(raw)
            suffix = "..." if len(text) > preview_length else ""
            logger.debug(f"Received message: {text[:preview_length]}{suffix}")

        try:
            envelope = codec.decode(raw)
            request = codec.to_request(envelope)
        except SignalingError as e:
            logger.warning(f"Rejected message from {connection!r}: {e.message}")
            self.send_error(connection, e.message)
            return

        await self.handle_request(connection, request)

    async def handle_request(self, connection: Any, request: AnyRequest):
        if isinstance(request, JoinRequest):
            await self._handle_join(connection, request)
        elif isinstance(request, QuitRequest):
            await self._handle_quit(request)
        elif isinstance(request, OfferRequest):
            await self._relay(request, EventType.OFFER_SDP_RECEIVED, request.sdp)
        elif isinstance(request, AnswerRequest):
            await self._relay(request, EventType.ANSWER_SDP_RECEIVED, request.sdp)
        elif isinstance(request, IceCandidateRequest):
            await self._relay(request, EventType.ICE_CANDIDATE_RECEIVED, request.candidate)

    async def _handle_join(self, connection: Any, request: JoinRequest):
        channel_name, user_id = request.channel_name, request.user_id

        users = await self.registry.join(channel_name, user_id, connection)
        log_websocket_event(logger, "join", channel_name, user_id, users=users)

        self.send(connection, EventType.JOINED, JoinedBody(
            channel_name=channel_name,
            user_id=user_id,
            users=users,
            message=f"Joined channel {channel_name}"
        ))

        await self.broadcast_except_sender(channel_name, user_id, EventType.USER_JOINED, MemberEventBody(
            user_id=user_id,
            message=f"User {user_id} joined the channel"
        ))

    async def _handle_quit(self, request: QuitRequest):
        channel_name, user_id = request.channel_name, request.user_id

        removed = await self.registry.leave(channel_name, user_id)
        if not removed:
            logger.debug(f"Quit ignored - user {user_id} is not in channel {channel_name}")
            return

        log_websocket_event(logger, "quit", channel_name, user_id)
        await self.notify_user_left(channel_name, user_id)

    async def _relay(self, request: AnyRequest, event_type: EventType, payload: Any):
        log_websocket_event(
            logger, "relay", request.channel_name, request.user_id,
            level=logging.DEBUG, relay_type=event_type.value
        )
        await self.broadcast_except_sender(request.channel_name, request.user_id, event_type, payload)

    async def notify_user_left(self, channel_name: str, user_id: str) -> int:
        return await self.broadcast_except_sender(channel_name, user_id, EventType.USER_LEFT, MemberEventBody(
            user_id=user_id,
            message=f"User {user_id} left the channel"
        ))

    async def broadcast_except_sender(
        self,
        channel_name: str,
        sender_id: str,
        event_type: Union[EventType, str],
        body: Any
    ) -> int:
        """
        발신자를 제외한 채널의 모든 멤버에게 이벤트를 전송합니다.

        쓰기 불가능한 연결은 조용히 건너뛰며 재시도하지 않습니다.

        Returns:
            int: 실제로 전송이 예약된 수신자 수
        """
        recipients = await self.registry.recipients_except(channel_name, sender_id)
        if not recipients:
            logger.debug(f"No other clients in channel {channel_name} for broadcast")
            return 0

        text = codec.encode(event_type, body)
        delivered = 0
        for user_id, connection in recipients:
            if connection.is_writable and connection.try_send(text):
                delivered += 1
            else:
                logger.debug(f"Skipping client {user_id} in channel {channel_name} - not writable")

        return delivered

    async def handle_disconnect(self, connection: Any) -> int:
        """
        연결 종료 처리: 모든 바인딩을 제거하고 남은 멤버들에게 user_left 를 알립니다.

        Returns:
            int: 제거된 (channel, user) 바인딩 수
        """
        removed = await self.registry.remove_handle(connection)
        for channel_name, user_id in removed:
            log_websocket_event(logger, "disconnect_cleanup", channel_name, user_id)
            await self.notify_user_left(channel_name, user_id)
        return len(removed)
