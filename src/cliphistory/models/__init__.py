from cliphistory.models.clipboarditem import (
    ClipboardItem,
    ImageItem,
    ItemKind,
    TextItem,
    WebImageItem,
    new_item_id,
    parse_url,
)

__all__ = [
    'ClipboardItem',
    'ImageItem',
    'ItemKind',
    'TextItem',
    'WebImageItem',
    'new_item_id',
    'parse_url',
]
