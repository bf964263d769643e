from __future__ import annotations

from io import BytesIO

import structlog
from PIL import Image, UnidentifiedImageError

logger = structlog.get_logger(__name__)

DEFAULT_JPEG_QUALITY = 50


def recompress_photo(photo: bytes, *, quality: int = DEFAULT_JPEG_QUALITY) -> bytes | None:
    """Re-encode ``photo`` as a reduced-quality JPEG.

    Returns ``None`` when the bytes are not a decodable image.
    """
    try:
        with Image.open(BytesIO(photo)) as image:
            image.load()
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            buffer = BytesIO()
            image.save(buffer, format="JPEG", quality=quality, optimize=True)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.info("photo_recompress_skipped", error=str(exc))
        return None
    return buffer.getvalue()


def prepare_photo_for_upload(photo: bytes, *, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    return recompress_photo(photo, quality=quality) or photo
