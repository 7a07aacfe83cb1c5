"""Abstract interfaces the host UI supplies to the capture flow."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from src.contracts import RoomType


class ImageSource(str, Enum):
    CAMERA = "camera"
    GALLERY = "gallery"


@dataclass(frozen=True)
class PickedImage:
    reference: str
    data: bytes
    manual_room_type: Optional[RoomType] = None


@dataclass(frozen=True)
class CapturedImage:
    """Navigation parameters for the analysis screen. base64_payload is always the downscaled copy."""

    reference: str
    base64_payload: str
    manual_room_type: Optional[RoomType] = None


# on_alert signature: (title, message) -> None
OnAlert = Callable[[str, str], Awaitable[None]]
OnNavigate = Callable[[CapturedImage], Awaitable[None]]


class ImagePicker(ABC):
    @abstractmethod
    async def request_permission(self, source: ImageSource) -> bool: ...

    @abstractmethod
    async def launch(self, source: ImageSource) -> Optional[PickedImage]:
        """Show the camera or gallery. Returns None when the user cancels."""
        ...
