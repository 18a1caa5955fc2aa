"""
Validation for uploaded identity-document images.

Checks size and content type, and opens the file with Pillow to make sure
it is a real, non-corrupted image.
"""

import logging
from io import BytesIO
from typing import Tuple

from PIL import Image

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024  # 5MB
MAX_IMAGE_PIXELS = 25_000_000  # 25MP
ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/heif": "heif",
}

Image.MAX_IMAGE_PIXELS = MAX_IMAGE_PIXELS


def validate_id_image(file_bytes: bytes, content_type: str) -> Tuple[bool, str]:
    """
    Validate an uploaded ID image.

    Args:
        file_bytes: Raw uploaded file bytes
        content_type: MIME type from the upload

    Returns:
        Tuple of (is_valid, error_message). error_message is empty string if valid.
    """
    if not file_bytes:
        return False, "ID image is required"

    if len(file_bytes) > MAX_FILE_SIZE_BYTES:
        return False, f"File size exceeds maximum of {MAX_FILE_SIZE_BYTES // (1024 * 1024)}MB"

    if not content_type or content_type not in ALLOWED_CONTENT_TYPES:
        return False, f"Invalid file type '{content_type}'. Allowed: JPEG, PNG, WebP, HEIC"

    try:
        img = Image.open(BytesIO(file_bytes))
        width, height = img.size
        if width * height > MAX_IMAGE_PIXELS:
            return False, f"Image dimensions too large ({width}x{height})"
        img.verify()
    except Image.DecompressionBombError:
        return False, "Image dimensions too large (possible decompression bomb)"
    except Exception as e:
        return False, f"Invalid or corrupted image file: {str(e)}"

    return True, ""


def extension_for(content_type: str) -> str:
    """File extension for an allowed content type."""
    return ALLOWED_CONTENT_TYPES.get(content_type, "bin")
