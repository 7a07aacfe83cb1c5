"""FastAPI application exposing POST /api/analyze-room."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.constants import (
    ANALYZE_ROOM_PATH,
    HEALTH_PATH,
    MAX_BODY_BYTES,
    MSG_ANALYSIS_FAILED,
    MSG_ERR_BODY_TOO_LARGE,
    MSG_ERR_INVALID_CONTENT_LENGTH,
)
from src.contracts import AnalyzeRoomRequest, AnalyzeRoomResponse, ErrorResponse
from src.errors import AnalysisError, BadRequestError, PayloadTooLargeError
from src.server.service import RoomAnalyzer

logger = logging.getLogger(__name__)


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorResponse(error=message).model_dump())


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into 'field: message; field: message'."""
    return "; ".join(
        map(
            lambda e: f"{'.'.join(map(str, e['loc'])) or 'body'}: {e['msg']}",
            exc.errors(include_url=False),
        )
    )


async def read_limited_body(request: Request, limit: int) -> bytes:
    """Read the request body, rejecting it as soon as it is known to exceed ``limit`` bytes."""
    match request.headers.get("content-length"):
        case None:
            pass
        case declared:
            try:
                size = int(declared)
            except ValueError:
                raise BadRequestError(MSG_ERR_INVALID_CONTENT_LENGTH) from None
            match size:
                case n if n < 0:
                    raise BadRequestError(MSG_ERR_INVALID_CONTENT_LENGTH)
                case n if n > limit:
                    raise PayloadTooLargeError(limit)
                case _:
                    pass

    received = bytearray()
    async for chunk in request.stream():
        received.extend(chunk)
        if len(received) > limit:
            raise PayloadTooLargeError(limit)
    return bytes(received)


def create_app(analyzer: RoomAnalyzer, max_body_bytes: int = MAX_BODY_BYTES) -> FastAPI:
    app = FastAPI(
        title="Renovation Reality Check API",
        description="Room photo in, three renovation cost scenarios out.",
        version="1.0.0",
    )

    @app.exception_handler(PayloadTooLargeError)
    async def _too_large(request: Request, exc: PayloadTooLargeError) -> JSONResponse:
        logger.warning("Rejected oversized body on %s (limit %d bytes)", request.url.path, exc.limit)
        return _error(413, MSG_ERR_BODY_TOO_LARGE % exc.limit)

    @app.exception_handler(BadRequestError)
    async def _bad_request(request: Request, exc: BadRequestError) -> JSONResponse:
        logger.warning("Rejected request on %s: %s", request.url.path, exc)
        return _error(400, str(exc))

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
        message = describe_validation_error(exc)
        logger.warning("Invalid analysis request: %s", message)
        return _error(400, message)

    @app.exception_handler(AnalysisError)
    async def _failed(request: Request, exc: AnalysisError) -> JSONResponse:
        logger.error("%s: %s", MSG_ANALYSIS_FAILED, exc, exc_info=exc)
        return _error(500, str(exc))

    @app.get(HEALTH_PATH, tags=["meta"])
    async def healthz() -> dict:
        return {"status": "ok"}

    @app.post(
        ANALYZE_ROOM_PATH,
        tags=["rooms"],
        summary="Analyze a room photo and generate renovation cost estimates",
        response_model=AnalyzeRoomResponse,
        responses={
            400: {"model": ErrorResponse},
            413: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    async def analyze_room(request: Request) -> JSONResponse:
        body = await read_limited_body(request, max_body_bytes)
        payload = AnalyzeRoomRequest.model_validate_json(body)
        result = await analyzer.analyze(payload)
        return JSONResponse(content=result.model_dump(mode="json", by_alias=True))

    return app
