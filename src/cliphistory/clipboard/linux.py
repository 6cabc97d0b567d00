import hashlib
import logging
import os
import shutil
import subprocess
import threading
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import unquote, urlparse

from cliphistory.clipboard.base import Clipboard, ClipboardContents
from cliphistory.utils.images import IMAGE_EXTENSIONS, image_mime

logger = logging.getLogger(__name__)


class LinuxClipboard(Clipboard):
    """wl-clipboard under Wayland, xclip under X11.

    Neither tool exposes a change counter, so one is derived from a digest
    of the offered payload and bumped whenever the digest moves.
    """

    _FILE_TARGETS = ("x-special/gnome-copied-files", "text/uri-list")
    _IMAGE_TARGETS = (
        "image/png",
        "image/jpeg",
        "image/jpg",
        "image/pjpeg",
        "image/bmp",
        "image/x-ms-bmp",
        "image/webp",
        "image/gif",
        "image/tiff",
    )
    _TEXT_TARGETS = (
        "text/plain;charset=utf-8",
        "text/plain;charset=utf8",
        "utf8_string",
        "text/plain",
        "string",
    )
    _SOURCE_URL_TARGETS = (
        "text/x-moz-url-priv",
        "chromium/x-source-url",
        "text/x-moz-url",
    )

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_digest: Optional[str] = None
        self._counter = 0

    def change_count(self) -> int:
        digest = self._digest(self.read_contents())
        with self._lock:
            if digest != self._last_digest:
                self._last_digest = digest
                self._counter += 1
            return self._counter

    def read_contents(self) -> ClipboardContents:
        strategies = (
            self._from_wayland,
            self._from_xclip,
        )

        for strategy in strategies:
            try:
                result = strategy()
            except Exception:
                logger.debug("Clipboard strategy %s failed", strategy.__name__, exc_info=True)
                result = None
            if result:
                return result

        return ClipboardContents()

    @staticmethod
    def _digest(contents: ClipboardContents) -> str:
        md5 = hashlib.md5()
        md5.update(contents.image_data or b"")
        md5.update(str(contents.image_path or "").encode("utf-8"))
        md5.update((contents.source_url or "").encode("utf-8"))
        md5.update((contents.text or "").encode("utf-8"))
        return md5.hexdigest()

    def _has_wayland(self) -> bool:
        return bool(os.environ.get("WAYLAND_DISPLAY")) and shutil.which("wl-paste") is not None

    def _from_wayland(self) -> Optional[ClipboardContents]:
        if not self._has_wayland():
            return None

        types = self._parse_type_list(
            self._run_command(["wl-paste", "--list-types"], timeout=1.5)
        )

        def reader(target: str) -> Optional[bytes]:
            command = ["wl-paste", "--type", target]
            if target.lower().startswith("text/"):
                command.append("--no-newline")
            return self._run_command(command, timeout=1.5)

        result = self._extract_from_types(types, reader)
        if result:
            return result

        text_bytes = self._run_command(
            ["wl-paste", "--no-newline"], timeout=1.5)
        if text_bytes:
            return ClipboardContents(text=self._decode_text(text_bytes))

        return None

    def _from_xclip(self) -> Optional[ClipboardContents]:
        if not shutil.which("xclip"):
            return None

        types = self._parse_type_list(
            self._run_command(
                ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"],
                timeout=1.5,
            )
        )

        def reader(target: str) -> Optional[bytes]:
            return self._run_command(
                ["xclip", "-selection", "clipboard", "-t", target, "-o"],
                timeout=1.5,
            )

        result = self._extract_from_types(types, reader)
        if result:
            return result

        text_bytes = self._run_command(
            ["xclip", "-selection", "clipboard", "-o"],
            timeout=1.5,
        )
        if text_bytes:
            return ClipboardContents(text=self._decode_text(text_bytes))

        return None

    def _extract_from_types(
        self,
        types: List[str],
        reader: Callable[[str], Optional[bytes]],
    ) -> Optional[ClipboardContents]:
        if not types:
            return None

        available = {target.lower(): target for target in types}

        image_data = None
        for target in self._IMAGE_TARGETS:
            if target in available:
                image_data = reader(available[target]) or None
                if image_data:
                    break

        image_path = None
        if image_data is None:
            for target in self._FILE_TARGETS:
                if target in available:
                    data = reader(available[target])
                    image_path = self._first_image_path(data) if data else None
                    if image_path:
                        break

        source_url = None
        for target in self._SOURCE_URL_TARGETS:
            if target in available:
                data = reader(available[target])
                source_url = self._first_line(data) if data else None
                if source_url:
                    break

        text = None
        for target in self._TEXT_TARGETS:
            if target in available:
                data = reader(available[target])
                if data is not None:
                    text = self._decode_text(data)
                    break

        if image_data is None and image_path is None and text is None:
            return None
        return ClipboardContents(
            image_data=image_data,
            image_path=image_path,
            source_url=source_url,
            text=text,
        )

    def _first_image_path(self, data: bytes) -> Optional[Path]:
        for path in self._parse_paths(data):
            if path.suffix.lower() in IMAGE_EXTENSIONS and path.is_file():
                return path
        return None

    @staticmethod
    def _decode_text(data: bytes) -> str:
        # Firefox publishes its URL targets as UTF-16.
        if data.startswith((b"\xff\xfe", b"\xfe\xff")) or b"\x00" in data:
            return data.decode("utf-16", errors="ignore")
        return data.decode("utf-8", errors="ignore")

    def _first_line(self, data: bytes) -> Optional[str]:
        for line in self._decode_text(data).splitlines():
            line = line.strip().strip("\x00")
            if line:
                return line
        return None

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _parse_paths(self, data: bytes) -> List[Path]:
        text = data.decode("utf-8", errors="ignore")
        lines = [line.strip() for line in text.replace(
            "\r", "\n").split("\n") if line.strip()]
        if lines and lines[0].lower() in {"copy", "cut"}:
            lines = lines[1:]

        paths: List[Path] = []
        for entry in lines:
            if entry.startswith("#"):
                continue
            parsed = urlparse(entry)
            if parsed.scheme == "file":
                candidate = Path(unquote(parsed.path))
            else:
                candidate = Path(unquote(entry))

            paths.append(candidate)

        return paths

    def _run_command(self, command: List[str], timeout: float) -> Optional[bytes]:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=timeout,
            )
            return result.stdout
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return None

    def _copy(self, mime: Optional[str], payload: bytes) -> bool:
        if shutil.which("wl-copy") and os.environ.get("WAYLAND_DISPLAY"):
            command = ["wl-copy"]
            if mime:
                command += ["--type", mime]
        elif shutil.which("xclip"):
            command = ["xclip", "-selection", "clipboard"]
            if mime:
                command += ["-t", mime]
        else:
            logger.warning("Neither wl-copy nor xclip is available")
            return False

        try:
            subprocess.run(command, input=payload, check=True, timeout=2.0)
            return True
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as e:
            logger.error(f"Clipboard write failed: {e}")
            return False

    def write_text(self, text: str) -> bool:
        return self._copy(None, text.encode("utf-8"))

    def write_image(self, data: bytes) -> bool:
        return self._copy(image_mime(data), data)

    def clear(self) -> bool:
        if shutil.which("wl-copy") and os.environ.get("WAYLAND_DISPLAY"):
            try:
                subprocess.run(["wl-copy", "--clear"], check=True, timeout=2.0)
                return True
            except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as e:
                logger.error(f"Clipboard clear failed: {e}")
                return False
        return self._copy(None, b"")
