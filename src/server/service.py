"""RoomAnalyzer — generate-then-persist pipeline behind /api/analyze-room, transport-agnostic."""
import asyncio
import logging

from src.analysis_store import AnalysisStore
from src.constants import (
    DISCLAIMER,
    MSG_ANALYSIS_DONE,
    MSG_ANALYSIS_START,
    MSG_ANALYSIS_STORED,
    MSG_ANALYSIS_TYPE,
    MSG_ERR_GENERATION,
)
from src.contracts import AnalyzeRoomRequest, AnalyzeRoomResponse, RoomType
from src.errors import GenerationError
from src.generation.client import ScenarioGenerator

logger = logging.getLogger(__name__)


class RoomAnalyzer:
    """Runs one structured-generation call per request and appends one record on success.

    Generation and persistence are not transactional: if the append fails the
    generated scenarios are discarded and the caller sees the PersistenceError.
    """

    def __init__(
        self,
        generator: ScenarioGenerator,
        store: AnalysisStore,
        default_room_type: RoomType = RoomType.LIVING_ROOM,
    ) -> None:
        self._generator = generator
        self._store = store
        self._default_room_type = default_room_type

    def effective_room_type(self, request: AnalyzeRoomRequest) -> RoomType:
        match request.manual_room_type:
            case RoomType() as manual:
                return manual
            case _:
                return self._default_room_type

    async def analyze(self, request: AnalyzeRoomRequest) -> AnalyzeRoomResponse:
        logger.info(
            MSG_ANALYSIS_START,
            len(request.image_base64),
            request.manual_room_type.value if request.manual_room_type else "none",
        )
        room_type = self.effective_room_type(request)
        logger.info(MSG_ANALYSIS_TYPE, room_type.value)

        try:
            analysis = await self._generator.generate(request.image_base64, room_type)
        except Exception as exc:
            raise GenerationError(MSG_ERR_GENERATION % exc) from exc
        logger.info(MSG_ANALYSIS_DONE, len(analysis.scenarios), room_type.value)

        record = await asyncio.to_thread(self._store.append, room_type, analysis.scenarios)
        logger.info(MSG_ANALYSIS_STORED, record.id, room_type.value)

        return AnalyzeRoomResponse(
            room_type=room_type,
            scenarios=analysis.scenarios,
            disclaimer=DISCLAIMER,
        )
