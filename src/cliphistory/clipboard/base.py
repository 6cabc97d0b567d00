import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cliphistory.models import ClipboardItem, ImageItem, TextItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClipboardContents:
    """Raw view of what the clipboard currently offers, before classification."""
    image_data: Optional[bytes] = None
    image_path: Optional[Path] = None
    source_url: Optional[str] = None
    text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.image_data is None
            and self.image_path is None
            and self.text is None
        )


class Clipboard(ABC):

    @abstractmethod
    def change_count(self) -> int:
        pass

    @abstractmethod
    def read_contents(self) -> ClipboardContents:
        pass

    @abstractmethod
    def write_text(self, text: str) -> bool:
        pass

    @abstractmethod
    def write_image(self, data: bytes) -> bool:
        pass

    @abstractmethod
    def clear(self) -> bool:
        pass

    def write_item(self, item: ClipboardItem) -> bool:
        try:
            if isinstance(item, TextItem):
                return self.write_text(item.text)
            if isinstance(item, ImageItem):
                return self.write_image(item.image_data)
        except Exception:
            logger.exception("Failed to write %s item to clipboard", item.kind.value)
            return False
        logger.warning("Unsupported clipboard item type: %r", item)
        return False
