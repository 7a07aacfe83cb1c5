"""ScenarioGenerator — abstract base for structured-generation backends."""
from abc import ABC, abstractmethod

from src.constants import DEFAULT_IMAGE_MEDIA_TYPE
from src.contracts import RoomAnalysis, RoomType

# Leading base64 characters of each supported image format's magic bytes
_BASE64_SIGNATURES = (
    ("/9j/", "image/jpeg"),
    ("iVBORw0KGgo", "image/png"),
    ("R0lGOD", "image/gif"),
    ("UklGR", "image/webp"),
)


def split_image_payload(image_base64: str) -> tuple[str, str]:
    """Return (media_type, raw base64), stripping a data: URL header if present."""
    match image_base64.partition(","):
        case (header, ",", data) if header.startswith("data:") and header.endswith(";base64"):
            return header[len("data:"):-len(";base64")] or DEFAULT_IMAGE_MEDIA_TYPE, data
        case _:
            pass
    media_type = next(
        (mt for prefix, mt in _BASE64_SIGNATURES if image_base64.startswith(prefix)),
        DEFAULT_IMAGE_MEDIA_TYPE,
    )
    return media_type, image_base64


class ScenarioGenerator(ABC):
    @abstractmethod
    async def generate(self, image_base64: str, room_type: RoomType) -> RoomAnalysis:
        """Produce three validated scenarios for the photographed room. Raises on failure."""
        ...
