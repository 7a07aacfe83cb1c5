"""AnalysisApiClient — one POST to /api/analyze-room, decoded strictly."""
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from src.constants import (
    ANALYZE_ROOM_PATH,
    DEFAULT_BACKEND_URL,
    DEFAULT_REQUEST_TIMEOUT,
    MSG_ANALYZE_FAILED,
    MSG_INVALID_RESPONSE,
    MSG_REQUEST_FAILED,
)
from src.contracts import AnalyzeRoomRequest, AnalyzeRoomResponse, RoomType
from src.errors import AnalysisRequestError

logger = logging.getLogger(__name__)


def error_message(response: httpx.Response) -> str:
    """Server-supplied ``error`` text, or a generic message carrying the status code."""
    fallback = MSG_REQUEST_FAILED % response.status_code
    try:
        body = response.json()
    except ValueError:
        logger.debug("Could not parse error response body")
        return fallback
    match body:
        case {"error": str() as message} if message:
            return message
        case _:
            return fallback


class AnalysisApiClient:

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    async def analyze_room(
        self, image_base64: str, manual_room_type: Optional[RoomType] = None
    ) -> AnalyzeRoomResponse:
        payload = AnalyzeRoomRequest(image_base64=image_base64, manual_room_type=manual_room_type)
        body = payload.model_dump(mode="json", by_alias=True, exclude_none=True)

        logger.info("[API] Requesting POST %s%s", self._base_url, ANALYZE_ROOM_PATH)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(ANALYZE_ROOM_PATH, json=body)
        except httpx.HTTPError as exc:
            logger.error("[API] Request to %s failed: %s", ANALYZE_ROOM_PATH, exc)
            raise AnalysisRequestError(MSG_ANALYZE_FAILED) from exc

        match response.is_success:
            case False:
                message = error_message(response)
                logger.error("[API] Error from %s: %s", ANALYZE_ROOM_PATH, message)
                raise AnalysisRequestError(message)
            case True:
                pass

        try:
            return AnalyzeRoomResponse.model_validate_json(response.content)
        except ValidationError as exc:
            logger.error("[API] Malformed analysis response: %s", exc)
            raise AnalysisRequestError(MSG_INVALID_RESPONSE) from exc
