import threading

from cliphistory.clipboard.base import Clipboard, ClipboardContents


class MemoryClipboard(Clipboard):
    """Process-local clipboard with a real change counter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._contents = ClipboardContents()
        self._change_count = 0
        self.writes = 0

    def change_count(self) -> int:
        with self._lock:
            return self._change_count

    def read_contents(self) -> ClipboardContents:
        with self._lock:
            return self._contents

    def set_contents(self, contents: ClipboardContents) -> None:
        """Replace the contents as another application would."""
        with self._lock:
            self._contents = contents
            self._change_count += 1

    def write_text(self, text: str) -> bool:
        self.set_contents(ClipboardContents(text=text))
        self.writes += 1
        return True

    def write_image(self, data: bytes) -> bool:
        self.set_contents(ClipboardContents(image_data=data))
        self.writes += 1
        return True

    def clear(self) -> bool:
        self.set_contents(ClipboardContents())
        self.writes += 1
        return True
