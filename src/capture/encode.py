import base64
import io

from PIL import Image, ImageOps, UnidentifiedImageError

from src.constants import MSG_IMAGE_UNREADABLE, UPLOAD_JPEG_QUALITY, UPLOAD_MAX_EDGE
from src.errors import ImageProcessingError


def downscale(data: bytes, max_edge: int = UPLOAD_MAX_EDGE, quality: int = UPLOAD_JPEG_QUALITY) -> bytes:
    """Lossy re-encode: honour EXIF orientation, cap the long edge, write JPEG."""
    try:
        with Image.open(io.BytesIO(data)) as original:
            image = ImageOps.exif_transpose(original).convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageProcessingError(MSG_IMAGE_UNREADABLE) from exc
    image.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


def encode_for_upload(data: bytes, max_edge: int = UPLOAD_MAX_EDGE, quality: int = UPLOAD_JPEG_QUALITY) -> str:
    return base64.standard_b64encode(downscale(data, max_edge, quality)).decode()
