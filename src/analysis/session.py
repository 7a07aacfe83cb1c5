"""AnalysisSession — Idle → Loading → Result | Error, with user-triggered retry."""
import logging
from enum import Enum
from typing import Optional

from src.analysis.api import AnalysisApiClient
from src.capture.picker import CapturedImage
from src.constants import MSG_ANALYZE_FAILED
from src.contracts import AnalyzeRoomResponse
from src.errors import AnalysisRequestError

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESULT = "result"
    ERROR = "error"


class AnalysisSession:
    """Drives one analysis screen. Exactly one of result/error is set once the request settles."""

    def __init__(self, api: AnalysisApiClient, image: CapturedImage) -> None:
        self._api = api
        self._image = image
        self._state = AnalysisState.IDLE
        self._result: Optional[AnalyzeRoomResponse] = None
        self._error: Optional[str] = None

    @property
    def image(self) -> CapturedImage:
        return self._image

    @property
    def state(self) -> AnalysisState:
        return self._state

    @property
    def result(self) -> Optional[AnalyzeRoomResponse]:
        return self._result

    @property
    def error(self) -> Optional[str]:
        return self._error

    async def start(self) -> AnalysisState:
        match self._state:
            case AnalysisState.IDLE:
                logger.info("Analysis screen opened, starting analysis")
                return await self._run()
            case state:
                return state

    async def retry(self) -> AnalysisState:
        match self._state:
            case AnalysisState.ERROR:
                logger.info("Retrying analysis")
                return await self._run()
            case state:
                return state

    async def _run(self) -> AnalysisState:
        self._state = AnalysisState.LOADING
        self._error = None
        self._result = None
        try:
            result = await self._api.analyze_room(
                self._image.base64_payload, self._image.manual_room_type
            )
        except AnalysisRequestError as exc:
            logger.error("Analysis failed: %s", exc)
            self._error = str(exc)
            self._state = AnalysisState.ERROR
            return self._state
        except Exception:
            logger.exception("Analysis request crashed")
            self._error = MSG_ANALYZE_FAILED
            self._state = AnalysisState.ERROR
            return self._state

        logger.info("Analysis complete, room type: %s", result.room_type.value)
        self._result = result
        self._state = AnalysisState.RESULT
        return self._state
