import logging
from pathlib import Path
from typing import Optional

try:
    from AppKit import (
        NSPasteboard,
        NSPasteboardTypeFileURL,
        NSPasteboardTypePNG,
        NSPasteboardTypeString,
        NSPasteboardTypeTIFF,
        NSPasteboardTypeURL,
    )
    from Foundation import NSURL, NSData
    HAS_APPKIT = True
except ImportError:
    HAS_APPKIT = False

from cliphistory.clipboard.base import Clipboard, ClipboardContents
from cliphistory.utils.images import IMAGE_EXTENSIONS, image_mime, to_png

logger = logging.getLogger(__name__)

CHROMIUM_SOURCE_URL = "org.chromium.source-url"


class MacOSClipboard(Clipboard):

    def __init__(self) -> None:
        if not HAS_APPKIT:
            raise RuntimeError("PyObjC (pyobjc-framework-Cocoa) is required on macOS")
        self._pasteboard = NSPasteboard.generalPasteboard()

    def change_count(self) -> int:
        return int(self._pasteboard.changeCount())

    def read_contents(self) -> ClipboardContents:
        try:
            types = list(self._pasteboard.types() or [])
        except Exception:
            logger.debug("Could not list pasteboard types", exc_info=True)
            return ClipboardContents()

        image_data = None
        for pb_type in (NSPasteboardTypePNG, NSPasteboardTypeTIFF):
            if pb_type in types:
                image_data = self._get_data(pb_type)
                if image_data:
                    break

        image_path = None
        if image_data is None and NSPasteboardTypeFileURL in types:
            image_path = self._get_image_file()

        source_url = None
        for pb_type in (NSPasteboardTypeURL, CHROMIUM_SOURCE_URL):
            if pb_type in types:
                source_url = self._get_string(pb_type)
                if source_url:
                    break

        text = None
        if NSPasteboardTypeString in types:
            text = self._get_string(NSPasteboardTypeString)

        return ClipboardContents(
            image_data=image_data,
            image_path=image_path,
            source_url=source_url,
            text=text,
        )

    def _get_data(self, pb_type) -> Optional[bytes]:
        try:
            data = self._pasteboard.dataForType_(pb_type)
            if data:
                return bytes(data)
        except Exception:
            logger.debug("Could not read pasteboard data for %s", pb_type, exc_info=True)
        return None

    def _get_string(self, pb_type) -> Optional[str]:
        try:
            value = self._pasteboard.stringForType_(pb_type)
            if value is not None:
                return str(value)
        except Exception:
            logger.debug("Could not read pasteboard string for %s", pb_type, exc_info=True)
        return None

    def _get_image_file(self) -> Optional[Path]:
        try:
            file_urls = self._pasteboard.readObjectsForClasses_options_([NSURL], None)
        except Exception:
            return None

        for url in file_urls or []:
            if url.isFileURL():
                path = Path(url.path())
                if path.suffix.lower() in IMAGE_EXTENSIONS and path.is_file():
                    return path
        return None

    def write_text(self, text: str) -> bool:
        self._pasteboard.clearContents()
        return bool(self._pasteboard.setString_forType_(text, NSPasteboardTypeString))

    def write_image(self, data: bytes) -> bool:
        if image_mime(data) == "image/tiff":
            pb_type = NSPasteboardTypeTIFF
        else:
            data = to_png(data)
            pb_type = NSPasteboardTypePNG
        ns_data = NSData.dataWithBytes_length_(data, len(data))
        self._pasteboard.clearContents()
        return bool(self._pasteboard.setData_forType_(ns_data, pb_type))

    def clear(self) -> bool:
        self._pasteboard.clearContents()
        return True
