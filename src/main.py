"""Entry points — `server` wires ServerConfig → RoomAnalyzer → FastAPI, `bot` wires BotConfig → TelegramClient."""
import logging
import sys

import uvicorn
from rich.logging import RichHandler

from src.analysis_store import AnalysisStore
from src.config import BotConfig, ServerConfig
from src.constants import MSG_BOT_STARTING, MSG_SERVER_STARTING
from src.generation.claude import ClaudeScenarioGenerator
from src.generation.client import ScenarioGenerator
from src.generation.openai import OpenAIScenarioGenerator
from src.server.app import create_app
from src.server.service import RoomAnalyzer
from src.telegram.client import TelegramClient


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_generator(config: ServerConfig) -> ScenarioGenerator:
    match (config.anthropic_api_key, config.openai_api_key):
        case (str() as k, _) if k:
            return ClaudeScenarioGenerator(k, config.claude_model)
        case (_, str() as k) if k:
            return OpenAIScenarioGenerator(k, config.openai_model)
        case _:
            raise ValueError("No model provider configured")


def serve() -> None:
    config = ServerConfig.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_SERVER_STARTING, config.host, config.port)

    analyzer = RoomAnalyzer(
        build_generator(config),
        AnalysisStore(config.store_path),
        default_room_type=config.default_room_type,
    )
    app = create_app(analyzer, max_body_bytes=config.max_body_bytes)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


def run_bot() -> None:
    config = BotConfig.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_BOT_STARTING)

    TelegramClient(config).run()


def main() -> None:
    match sys.argv[1:]:
        case ["bot", *_]:
            run_bot()
        case _:
            serve()


if __name__ == "__main__":
    main()
