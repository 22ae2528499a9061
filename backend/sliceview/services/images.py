from __future__ import annotations

import os
import re
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from sliceview.core.errors import UnsupportedImageError


# Modes Pillow's PNG writer accepts as-is.
_PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}
DEFAULT_BASE_NAME = "image"


def decode_image(image_bytes: bytes, *, max_pixels: int | None = None) -> Image.Image:
    """
    Decode an uploaded raster into a fully loaded PIL image.
    EXIF orientation is applied (as a browser would when displaying it) and
    modes PNG cannot hold are converted to RGBA.
    """
    if not image_bytes:
        raise UnsupportedImageError("Please select an image file.")

    try:
        img = Image.open(BytesIO(image_bytes))
        # open() only parses the header; reject oversize rasters before decoding pixels.
        if max_pixels is not None and img.width * img.height > max_pixels:
            raise UnsupportedImageError(
                f"Image is too large: {img.width}x{img.height} exceeds {max_pixels} pixels."
            )
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise UnsupportedImageError(f"Please select an image file. ({e})") from e
    except (OSError, SyntaxError) as e:
        # Truncated or corrupt files surface as OSError/SyntaxError from the plugins.
        raise UnsupportedImageError(f"Could not decode image: {e}") from e

    img = ImageOps.exif_transpose(img)
    if img.mode not in _PNG_MODES:
        img = img.convert("RGBA")
    return img


def derive_base_name(filename: str | None) -> str:
    """'scans/long page.final.jpeg' -> 'long page.final'"""
    name = os.path.basename((filename or "").replace("\\", "/"))
    name = re.sub(r"\.[^/.]+$", "", name).strip()
    return name or DEFAULT_BASE_NAME
