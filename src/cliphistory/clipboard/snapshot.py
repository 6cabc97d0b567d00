"""Classify the live clipboard into a history item.

The reader is stateless: it looks at whatever the clipboard offers right
now and never writes to it.
"""

import logging
from typing import Optional

from cliphistory.clipboard.base import Clipboard, ClipboardContents
from cliphistory.models import ClipboardItem, ImageItem, TextItem, WebImageItem
from cliphistory.utils.images import IMAGE_EXTENSIONS, image_size

logger = logging.getLogger(__name__)


def _image_bytes(contents: ClipboardContents) -> Optional[bytes]:
    if contents.image_data and image_size(contents.image_data) is not None:
        return contents.image_data

    path = contents.image_path
    if path is not None and path.suffix.lower() in IMAGE_EXTENSIONS:
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read copied image file {path}: {e}")
            return None
        if image_size(data) is not None:
            return data

    return None


def classify(contents: ClipboardContents) -> Optional[ClipboardItem]:
    """Image (web image when a source URL rides along), then text, then nothing."""
    image_data = _image_bytes(contents)
    if image_data is not None:
        if contents.source_url:
            return WebImageItem.create(image_data, contents.source_url)
        return ImageItem.create(image_data)

    if contents.text is not None:
        return TextItem.create(contents.text)

    return None


def read_snapshot(clipboard: Clipboard) -> Optional[ClipboardItem]:
    try:
        contents = clipboard.read_contents()
    except Exception:
        logger.exception("Failed to read clipboard contents")
        return None
    return classify(contents)
