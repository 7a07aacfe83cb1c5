from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os
from dotenv import load_dotenv

from src.constants import (
    CLAUDE_ANALYSIS_MODEL,
    DEFAULT_ANALYSIS_STORE_PATH,
    DEFAULT_BACKEND_URL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_ROOM_TYPE,
    MAX_BODY_BYTES,
    MSG_ERR_NO_PROVIDER,
    OPENAI_ANALYSIS_MODEL,
)
from src.contracts import RoomType


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int
    log_level: str
    max_body_bytes: int
    default_room_type: RoomType
    store_path: Path
    anthropic_api_key: Optional[str]
    openai_api_key: Optional[str]
    claude_model: str
    openai_model: str

    @classmethod
    def from_env(cls) -> "ServerConfig":
        load_dotenv()

        host = os.getenv("HOST", DEFAULT_HOST)
        port = os.getenv("PORT", str(DEFAULT_PORT))
        log_level = os.getenv("LOG_LEVEL", "INFO")
        max_body = os.getenv("MAX_BODY_BYTES", str(MAX_BODY_BYTES))
        default_room_type = os.getenv("DEFAULT_ROOM_TYPE", DEFAULT_ROOM_TYPE)
        store_path = os.getenv("ANALYSIS_STORE_PATH", DEFAULT_ANALYSIS_STORE_PATH)
        anthropic_api_key = os.getenv("ANTHROPIC_API_KEY") or None
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        claude_model = os.getenv("CLAUDE_MODEL") or CLAUDE_ANALYSIS_MODEL
        openai_model = os.getenv("OPENAI_MODEL") or OPENAI_ANALYSIS_MODEL

        return cls._validate(
            host=host,
            port=int(port),
            log_level=log_level,
            max_body_bytes=int(max_body),
            default_room_type=default_room_type,
            store_path=Path(store_path),
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            claude_model=claude_model,
            openai_model=openai_model,
        )

    @staticmethod
    def _validate(
        host: str,
        port: int,
        log_level: str,
        max_body_bytes: int,
        default_room_type: str,
        store_path: Path,
        anthropic_api_key: Optional[str],
        openai_api_key: Optional[str],
        claude_model: str,
        openai_model: str,
    ) -> "ServerConfig":
        match (anthropic_api_key, openai_api_key):
            case (None, None):
                raise ValueError(MSG_ERR_NO_PROVIDER)
            case _:
                pass

        match max_body_bytes:
            case n if n <= 0:
                raise ValueError("MAX_BODY_BYTES must be positive")
            case _:
                pass

        try:
            room_type = RoomType(default_room_type.strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in RoomType)
            raise ValueError(f"DEFAULT_ROOM_TYPE must be one of: {allowed}") from None

        return ServerConfig(
            host=host,
            port=port,
            log_level=log_level,
            max_body_bytes=max_body_bytes,
            default_room_type=room_type,
            store_path=store_path,
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            claude_model=claude_model,
            openai_model=openai_model,
        )


@dataclass(frozen=True)
class BotConfig:
    telegram_bot_token: str
    allowed_chat_id: str
    backend_url: str
    request_timeout: float
    log_level: str

    @classmethod
    def from_env(cls) -> "BotConfig":
        load_dotenv()

        token = os.getenv("TELEGRAM_BOT_TOKEN")
        chat_id = os.getenv("ALLOWED_CHAT_ID")
        backend_url = os.getenv("BACKEND_URL", DEFAULT_BACKEND_URL)
        request_timeout = os.getenv("REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
        log_level = os.getenv("LOG_LEVEL", "INFO")

        return cls._validate(
            telegram_bot_token=token,
            allowed_chat_id=chat_id,
            backend_url=backend_url.rstrip("/"),
            request_timeout=float(request_timeout),
            log_level=log_level,
        )

    @staticmethod
    def _validate(
        telegram_bot_token: Optional[str],
        allowed_chat_id: Optional[str],
        backend_url: str,
        request_timeout: float,
        log_level: str,
    ) -> "BotConfig":
        match telegram_bot_token:
            case None | "":
                raise ValueError("TELEGRAM_BOT_TOKEN must be set in .env")
            case _:
                pass

        match allowed_chat_id:
            case None | "":
                raise ValueError("ALLOWED_CHAT_ID must be set in .env")
            case _:
                pass

        return BotConfig(
            telegram_bot_token=telegram_bot_token,
            allowed_chat_id=allowed_chat_id,
            backend_url=backend_url,
            request_timeout=request_timeout,
            log_level=log_level,
        )
