from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import cached_property
from typing import ClassVar, Optional, Tuple
from urllib.parse import urlparse

import ulid

from cliphistory.utils.images import image_size

PREVIEW_LENGTH = 100


class ItemKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    WEB_IMAGE = "web_image"


def new_item_id() -> str:
    return str(ulid.new())


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


@dataclass(frozen=True, eq=False)
class ClipboardItem:
    """Immutable history entry. Identity is the ``item_id``, never the payload."""
    item_id: str
    created_at: datetime

    kind: ClassVar[ItemKind]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClipboardItem):
            return NotImplemented
        return self.item_id == other.item_id

    def __hash__(self) -> int:
        return hash(self.item_id)

    @property
    def preview(self) -> str:
        return self.make_preview()

    def make_preview(self, limit: int = PREVIEW_LENGTH) -> str:
        raise NotImplementedError

    def is_equivalent(self, other: "ClipboardItem") -> bool:
        raise NotImplementedError

    def formatted_timestamp(self) -> str:
        return self.created_at.strftime("%b %d, %Y at %H:%M")

    def relative_timestamp(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        seconds = int((now - self.created_at).total_seconds())
        if seconds < 60:
            return "just now"
        if seconds < 3600:
            return _plural(seconds // 60, "minute")
        if seconds < 86400:
            return _plural(seconds // 3600, "hour")
        days = (now.date() - self.created_at.date()).days
        if days <= 1:
            return "yesterday"
        if days < 7:
            return f"{days} days ago"
        return self.formatted_timestamp()


@dataclass(frozen=True, eq=False)
class TextItem(ClipboardItem):
    text: str
    source_url: Optional[str] = None

    kind: ClassVar[ItemKind] = ItemKind.TEXT

    @classmethod
    def create(
        cls,
        text: str,
        source_url: Optional[str] = None,
        *,
        item_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "TextItem":
        if source_url is None:
            source_url = parse_url(text)
        return cls(
            item_id=item_id or new_item_id(),
            created_at=created_at or datetime.now(),
            text=text,
            source_url=source_url,
        )

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def make_preview(self, limit: int = PREVIEW_LENGTH) -> str:
        collapsed = " ".join(self.text.split())
        if len(collapsed) > limit:
            return collapsed[:limit] + "..."
        return collapsed

    def is_equivalent(self, other: ClipboardItem) -> bool:
        return isinstance(other, TextItem) and other.text == self.text


@dataclass(frozen=True, eq=False)
class ImageItem(ClipboardItem):
    image_data: bytes

    kind: ClassVar[ItemKind] = ItemKind.IMAGE

    def __post_init__(self) -> None:
        if self.image_size is None:
            raise ValueError(f"{type(self).__name__} requires decodable image data")

    @classmethod
    def create(
        cls,
        image_data: bytes,
        *,
        item_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "ImageItem":
        return cls(
            item_id=item_id or new_item_id(),
            created_at=created_at or datetime.now(),
            image_data=image_data,
        )

    @cached_property
    def image_size(self) -> Optional[Tuple[int, int]]:
        return image_size(self.image_data)

    def make_preview(self, limit: int = PREVIEW_LENGTH) -> str:
        width, height = self.image_size
        return f"Image ({width}x{height})"

    def is_equivalent(self, other: ClipboardItem) -> bool:
        # Dimensions only: two different images of the same size collide.
        return isinstance(other, ImageItem) and other.image_size == self.image_size


@dataclass(frozen=True, eq=False)
class WebImageItem(ImageItem):
    source_url: str

    kind: ClassVar[ItemKind] = ItemKind.WEB_IMAGE

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.source_url:
            raise ValueError("WebImageItem requires a source URL")

    @classmethod
    def create(
        cls,
        image_data: bytes,
        source_url: str,
        *,
        item_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "WebImageItem":
        return cls(
            item_id=item_id or new_item_id(),
            created_at=created_at or datetime.now(),
            image_data=image_data,
            source_url=source_url,
        )

    def make_preview(self, limit: int = PREVIEW_LENGTH) -> str:
        host = urlparse(self.source_url).hostname or self.source_url
        return f"{super().make_preview(limit)} from {host}"


def parse_url(text: str) -> Optional[str]:
    """Return ``text`` stripped if it reads as a single URL with a scheme."""
    candidate = text.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return None
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return None
    # Single-letter schemes are Windows drive letters, not URLs.
    if len(parsed.scheme) < 2 or not (parsed.netloc or parsed.path):
        return None
    return candidate
