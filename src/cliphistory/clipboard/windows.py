import io
import logging
import os
import time
from pathlib import Path
from typing import Optional, Tuple

import win32clipboard as wc
import win32con
from PIL import ImageGrab

from cliphistory.clipboard.base import Clipboard, ClipboardContents
from cliphistory.clipboard.cf_html import parse_html_source_url
from cliphistory.utils.images import IMAGE_EXTENSIONS, to_dib

logger = logging.getLogger(__name__)


class WindowsClipboard(Clipboard):

    def __init__(self) -> None:
        self._html_format = wc.RegisterClipboardFormat("HTML Format")

    def change_count(self) -> int:
        return int(wc.GetClipboardSequenceNumber())

    def _open(self) -> bool:
        for _ in range(3):
            try:
                wc.OpenClipboard()
                return True
            except Exception:
                time.sleep(0.05)
        logger.debug("Clipboard is held by another process")
        return False

    def _close(self) -> None:
        try:
            wc.CloseClipboard()
        except Exception:
            logger.debug("CloseClipboard failed", exc_info=True)

    def read_contents(self) -> ClipboardContents:
        image_data, image_path = self._from_imagegrab()

        source_url = None
        text = None
        if not self._open():
            return ClipboardContents(image_data=image_data, image_path=image_path)

        try:
            if wc.IsClipboardFormatAvailable(self._html_format):
                try:
                    html = wc.GetClipboardData(self._html_format)
                except Exception:
                    html = None
                if isinstance(html, str):
                    html = html.encode("utf-8")
                if html:
                    source_url = parse_html_source_url(html)

            if wc.IsClipboardFormatAvailable(wc.CF_UNICODETEXT):
                try:
                    text = wc.GetClipboardData(wc.CF_UNICODETEXT)
                except Exception:
                    text = None
        finally:
            self._close()

        return ClipboardContents(
            image_data=image_data,
            image_path=image_path,
            source_url=source_url,
            text=text,
        )

    def _from_imagegrab(self) -> Tuple[Optional[bytes], Optional[Path]]:
        try:
            clipboard_data = ImageGrab.grabclipboard()
        except Exception:
            return None, None

        if clipboard_data is None:
            return None, None

        if isinstance(clipboard_data, (list, tuple)):
            for path in clipboard_data:
                normalized_path = os.path.normpath(str(path))
                if (
                    os.path.splitext(normalized_path)[1].lower() in IMAGE_EXTENSIONS
                    and os.path.isfile(normalized_path)
                ):
                    return None, Path(normalized_path)
            return None, None

        if hasattr(clipboard_data, "save"):
            output = io.BytesIO()
            try:
                clipboard_data.save(output, format="PNG")
            except Exception:
                return None, None
            return output.getvalue(), None

        return None, None

    def _replace(self, fmt: int, data) -> bool:
        if not self._open():
            return False
        try:
            wc.EmptyClipboard()
            if data is not None:
                wc.SetClipboardData(fmt, data)
            return True
        except Exception as e:
            logger.error(f"Clipboard write failed: {e}")
            return False
        finally:
            self._close()

    def write_text(self, text: str) -> bool:
        return self._replace(wc.CF_UNICODETEXT, text)

    def write_image(self, data: bytes) -> bool:
        return self._replace(win32con.CF_DIB, to_dib(data))

    def clear(self) -> bool:
        return self._replace(wc.CF_UNICODETEXT, None)
