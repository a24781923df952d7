"""
Signal Relay Configuration

환경 변수를 통한 설정 관리
"""

from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

from signal_relay import __version__

load_dotenv()  # .env 파일 로드


class Settings(BaseSettings):
    """시그널링 릴레이 설정"""

    # Application
    app_name: str = "Signal Relay"
    version: str = __version__
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # WebSocket
    ws_path: str = "/"
    welcome_message: str = "Connected to signaling server with PC control support"
    ws_send_queue_size: int = 64  # 연결별 송신 대기열 최대 길이

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    log_message_preview: int = 200

    # CORS
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # 추가 환경변수 무시


settings = Settings()
