import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryStats:
    channel_count: int
    participant_count: int


class ConnectionRegistry:
    """
    채널별 참여자와 연결 핸들의 매핑

    {channel_name: {user_id: connection}} 구조이며, 모든 연산은 하나의 asyncio.Lock 으로
    직렬화됩니다. 채널은 첫 join 시 생성되고 마지막 멤버가 나가면 즉시 제거됩니다.
    조회 연산은 항상 복사본을 반환합니다.
    """

    def __init__(self):
        # 채널별 연결 그룹: {channel_name: {user_id: connection}}
        self._channels: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def join(self, channel_name: str, user_id: str, connection: Any) -> List[str]:
        """참여자를 등록(또는 교체)하고 입장 후 멤버 목록을 반환합니다."""
        async with self._lock:
            members = self._channels.setdefault(channel_name, {})
            previous = members.get(user_id)
            members[user_id] = connection

            if previous is not None and previous is not connection:
                logger.info(f"User {user_id} in channel {channel_name} rebound to a new connection")

            return list(members.keys())

    async def leave(self, channel_name: str, user_id: str) -> bool:
        """참여자를 제거합니다. 실제로 제거된 경우에만 True."""
        async with self._lock:
            members = self._channels.get(channel_name)
            if members is None or user_id not in members:
                return False

            del members[user_id]
            self._drop_if_empty(channel_name)
            return True

    async def remove_handle(self, connection: Any) -> List[Tuple[str, str]]:
        """연결에 바인딩된 모든 (channel_name, user_id) 를 제거하고 목록을 반환합니다."""
        removed: List[Tuple[str, str]] = []

        async with self._lock:
            for channel_name in list(self._channels.keys()):
                members = self._channels[channel_name]
                for user_id in [uid for uid, conn in members.items() if conn is connection]:
                    del members[user_id]
                    removed.append((channel_name, user_id))
                self._drop_if_empty(channel_name)

        if removed:
            logger.info(
                "Removed client from channels: "
                + ", ".join(f"{channel}:{user}" for channel, user in removed)
            )
        return removed

    async def members_of(self, channel_name: str) -> List[str]:
        """채널 멤버 ID 목록 (입장 순서). 채널이 없으면 빈 목록."""
        async with self._lock:
            return list(self._channels.get(channel_name, {}).keys())

    async def recipients_except(self, channel_name: str, excluded_user_id: str) -> List[Tuple[str, Any]]:
        """excluded_user_id 를 제외한 멤버들의 (user_id, connection) 스냅샷"""
        async with self._lock:
            members = self._channels.get(channel_name, {})
            return [
                (user_id, connection)
                for user_id, connection in members.items()
                if user_id != excluded_user_id
            ]

    async def channel_names(self) -> List[str]:
        async with self._lock:
            return list(self._channels.keys())

    async def snapshot(self) -> Dict[str, List[str]]:
        """전체 채널 → 멤버 목록 복사본"""
        async with self._lock:
            return {name: list(members.keys()) for name, members in self._channels.items()}

    async def stats(self) -> RegistryStats:
        async with self._lock:
            return RegistryStats(
                channel_count=len(self._channels),
                participant_count=sum(len(members) for members in self._channels.values()),
            )

    def _drop_if_empty(self, channel_name: str):
        # 락을 잡은 상태에서만 호출
        if channel_name in self._channels and not self._channels[channel_name]:
            del self._channels[channel_name]
            logger.debug(f"Removed empty channel: {channel_name}")
