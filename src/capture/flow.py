"""CaptureFlow — permission → pick → downscale/encode → hand-off, one flow at a time."""
import asyncio
import logging
from typing import Optional

from src.capture.encode import encode_for_upload
from src.capture.picker import CapturedImage, ImagePicker, ImageSource, OnAlert, OnNavigate
from src.constants import (
    MSG_ALREADY_PROCESSING,
    MSG_CAMERA_PERMISSION,
    MSG_CAPTURE_FAILED,
    MSG_ERROR_TITLE,
    MSG_GALLERY_PERMISSION,
    MSG_PERMISSION_TITLE,
    MSG_PICK_CANCELLED,
    MSG_SELECT_FAILED,
)

logger = logging.getLogger(__name__)

_PERMISSION_MESSAGES = {
    ImageSource.CAMERA: MSG_CAMERA_PERMISSION,
    ImageSource.GALLERY: MSG_GALLERY_PERMISSION,
}
_FAILURE_MESSAGES = {
    ImageSource.CAMERA: MSG_CAPTURE_FAILED,
    ImageSource.GALLERY: MSG_SELECT_FAILED,
}


class CaptureFlow:
    """Per-screen capture pipeline.

    The in-flight token is the task running the current flow. While it is set,
    further taps are dropped rather than queued. ``reset()`` is called when the
    screen regains focus and cancels whatever was left running.
    """

    def __init__(self, picker: ImagePicker, on_alert: OnAlert, on_navigate: OnNavigate) -> None:
        self._picker = picker
        self._on_alert = on_alert
        self._on_navigate = on_navigate
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def is_processing(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    async def take_photo(self) -> Optional[CapturedImage]:
        return await self._start(ImageSource.CAMERA)

    async def choose_from_gallery(self) -> Optional[CapturedImage]:
        return await self._start(ImageSource.GALLERY)

    def reset(self) -> None:
        match self._in_flight:
            case None:
                pass
            case task:
                task.cancel()
        self._in_flight = None

    async def _start(self, source: ImageSource) -> Optional[CapturedImage]:
        match self.is_processing:
            case True:
                logger.info(MSG_ALREADY_PROCESSING)
                return None
            case False:
                pass

        task = asyncio.create_task(self._run(source))
        self._in_flight = task
        try:
            return await task
        except asyncio.CancelledError:
            # reset() cancelled the flow; only propagate if our caller is being cancelled too
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return None
        finally:
            if self._in_flight is task:
                self._in_flight = None

    async def _run(self, source: ImageSource) -> Optional[CapturedImage]:
        logger.info("Requesting %s permission", source.value)
        granted = await self._picker.request_permission(source)
        match granted:
            case False:
                logger.info("%s permission denied", source.value.capitalize())
                await self._on_alert(MSG_PERMISSION_TITLE, _PERMISSION_MESSAGES[source])
                return None
            case True:
                pass

        try:
            logger.info("Opening %s", source.value)
            picked = await self._picker.launch(source)
            match picked:
                case None:
                    logger.info(MSG_PICK_CANCELLED, source.value.capitalize())
                    return None
                case _:
                    pass

            payload = await asyncio.to_thread(encode_for_upload, picked.data)
            logger.info("Image encoded for upload, %d base64 chars", len(payload))
            captured = CapturedImage(
                reference=picked.reference,
                base64_payload=payload,
                manual_room_type=picked.manual_room_type,
            )
            await self._on_navigate(captured)
            return captured
        except Exception:
            logger.exception("Capture from %s failed", source.value)
            await self._on_alert(MSG_ERROR_TITLE, _FAILURE_MESSAGES[source])
            return None
