import base64
import binascii
import json
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel

from cliphistory.models import ClipboardItem, ImageItem, ItemKind, TextItem, WebImageItem

logger = logging.getLogger(__name__)


class CodecError(ValueError):
    """The stored document is not a readable history."""


class ItemRecord(BaseModel):
    """On-disk shape of one history entry; image bytes are inlined as base64."""
    itemId: str
    timestamp: datetime
    kind: ItemKind
    text: Optional[str] = None
    image: Optional[str] = None
    sourceUrl: Optional[str] = None

    @classmethod
    def from_item(cls, item: ClipboardItem) -> "ItemRecord":
        record = cls(itemId=item.item_id, timestamp=item.created_at, kind=item.kind)
        if isinstance(item, TextItem):
            record.text = item.text
            record.sourceUrl = item.source_url
        elif isinstance(item, ImageItem):
            record.image = base64.b64encode(item.image_data).decode("ascii")
            if isinstance(item, WebImageItem):
                record.sourceUrl = item.source_url
        return record

    def _image_bytes(self) -> bytes:
        if not self.image:
            raise ValueError(f"{self.kind.value} record {self.itemId} has no image")
        try:
            return base64.b64decode(self.image, validate=True)
        except binascii.Error as e:
            raise ValueError(f"record {self.itemId} has malformed image data: {e}") from e

    def to_item(self) -> ClipboardItem:
        if self.kind is ItemKind.TEXT:
            if self.text is None:
                raise ValueError(f"text record {self.itemId} has no text")
            return TextItem.create(
                self.text,
                self.sourceUrl,
                item_id=self.itemId,
                created_at=self.timestamp,
            )
        if self.kind is ItemKind.WEB_IMAGE:
            if not self.sourceUrl:
                raise ValueError(f"web image record {self.itemId} has no source URL")
            return WebImageItem.create(
                self._image_bytes(),
                self.sourceUrl,
                item_id=self.itemId,
                created_at=self.timestamp,
            )
        return ImageItem.create(
            self._image_bytes(),
            item_id=self.itemId,
            created_at=self.timestamp,
        )


def encode_items(items: Iterable[ClipboardItem]) -> bytes:
    records = [ItemRecord.from_item(item).model_dump(mode="json") for item in items]
    return json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")


def decode_items(data: bytes) -> List[ClipboardItem]:
    """Decode a stored history.

    Raises ``CodecError`` when the document itself is unreadable. Individual
    records that fail validation are logged and skipped.
    """
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        raise CodecError(f"history is not valid JSON: {e}") from e

    if not isinstance(raw, list):
        raise CodecError(f"history must be a JSON list, got {type(raw).__name__}")

    items: List[ClipboardItem] = []
    seen = set()
    for index, entry in enumerate(raw):
        try:
            item = ItemRecord.model_validate(entry).to_item()
        except ValueError as e:
            logger.warning(f"Skipping unreadable history record #{index}: {e}")
            continue
        if item.item_id in seen:
            logger.warning(f"Skipping duplicate history record {item.item_id}")
            continue
        seen.add(item.item_id)
        items.append(item)
    return items
