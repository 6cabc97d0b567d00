"""
Storage package for cliphistory.

JSON persistence of the clipboard history with inline image data.
"""

from cliphistory.storage.codec import CodecError, ItemRecord, decode_items, encode_items
from cliphistory.storage.store import DEFAULT_STORAGE_PATH, HistoryStore

__all__ = [
    'CodecError',
    'DEFAULT_STORAGE_PATH',
    'HistoryStore',
    'ItemRecord',
    'decode_items',
    'encode_items',
]
