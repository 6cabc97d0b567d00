import io
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

IMAGE_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".bmp",
    ".tif",
    ".tiff",
    ".webp",
    ".heic",
}


def image_size(data: bytes) -> Optional[Tuple[int, int]]:
    """Return ``(width, height)`` of an encoded image, or None if undecodable.

    The pixel data is decoded in full so truncated files are rejected here
    rather than when the image is written back.
    """
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return image.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return None


def image_mime(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format or "", "image/png")
    except (UnidentifiedImageError, OSError, ValueError):
        return "image/png"


def to_png(data: bytes) -> bytes:
    """Re-encode any Pillow-readable image as PNG."""
    with Image.open(io.BytesIO(data)) as image:
        if image.format == "PNG":
            return data
        output = io.BytesIO()
        image.save(output, format="PNG")
        return output.getvalue()


def to_dib(data: bytes) -> bytes:
    """Encode as a Windows device-independent bitmap (BMP minus file header)."""
    with Image.open(io.BytesIO(data)) as image:
        output = io.BytesIO()
        image.convert("RGB").save(output, format="BMP")
        return output.getvalue()[14:]
