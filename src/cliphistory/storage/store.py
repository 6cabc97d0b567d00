import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from cliphistory.models import ClipboardItem
from cliphistory.storage.codec import CodecError, decode_items, encode_items

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = Path.home() / "Documents" / "ClipboardManagerData" / "clipboard_history.json"


class HistoryStore:
    """Single-file persistence for the clipboard history.

    Every save rewrites the whole file. Failures never propagate: a load
    that cannot read the file yields an empty history, a failed save is
    logged and the in-memory history stays authoritative.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DEFAULT_STORAGE_PATH
        self.writable = self._ensure_directory()
        logger.info(f"History storage location: {self.path}")

    def _ensure_directory(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.warning(
                f"Cannot create {self.path.parent}, history will not persist this session: {e}")
            return False

    def load(self) -> List[ClipboardItem]:
        if not self.path.exists():
            logger.info(f"No saved clipboard history at {self.path}")
            return []

        try:
            items = decode_items(self.path.read_bytes())
        except (OSError, CodecError) as e:
            logger.error(f"Error loading clipboard history: {e}")
            return []

        logger.info(f"Loaded {len(items)} items from {self.path}")
        return items

    def save(self, items: Iterable[ClipboardItem]) -> bool:
        if not self.writable:
            logger.debug("Storage unavailable, skipping history save")
            return False

        items = list(items)
        tmp_name = None
        try:
            payload = encode_items(items)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, ValueError) as e:
            logger.error(f"Error saving clipboard history: {e}")
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

        logger.debug(f"Saved {len(items)} items to {self.path}")
        return True

    def clear_all(self) -> bool:
        try:
            self.path.unlink()
            logger.info(f"Deleted history file {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Could not delete history file: {e}")
        return self.save([])
