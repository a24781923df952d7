import logging
from fastapi import APIRouter, Depends

from signal_relay.api import get_registry
from signal_relay.core.errors import channel_not_found_error
from signal_relay.schemas.signaling import ChannelList, ChannelStatus, ChannelSummary
from signal_relay.websockets.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/channels", tags=["Channels"])


@router.get("", response_model=ChannelList)
async def list_channels(registry: ConnectionRegistry = Depends(get_registry)):
    """
    현재 활성화된 채널 목록을 조회합니다.

    Returns:
        ChannelList: 채널 이름과 접속자 수
    """
    snapshot = await registry.snapshot()
    channels = [
        ChannelSummary(channel_name=name, user_count=len(users))
        for name, users in snapshot.items()
    ]
    return ChannelList(channels=channels, total=len(channels))


@router.get("/{channel_name}", response_model=ChannelStatus)
async def get_channel_status(
    channel_name: str,
    registry: ConnectionRegistry = Depends(get_registry)
):
    """
    채널의 현재 상태 정보를 조회합니다.

    Args:
        channel_name: 채널 이름

    Returns:
        ChannelStatus: 채널 멤버 목록과 상태
    """
    users = await registry.members_of(channel_name)
    if not users:
        logger.info(f"Channel status requested for unknown channel {channel_name}")
        raise channel_not_found_error(channel_name)

    return ChannelStatus(
        channel_name=channel_name,
        users=users,
        user_count=len(users),
        is_active=True
    )
