from cliphistory.clipboard.base import Clipboard, ClipboardContents
from cliphistory.clipboard.factory import get_clipboard, get_clipboard_class
from cliphistory.clipboard.memory import MemoryClipboard
from cliphistory.clipboard.snapshot import classify, read_snapshot

__all__ = [
    'Clipboard',
    'ClipboardContents',
    'MemoryClipboard',
    'classify',
    'get_clipboard',
    'get_clipboard_class',
    'read_snapshot',
]
