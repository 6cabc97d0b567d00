import platform
from typing import Type

from cliphistory.clipboard.base import Clipboard


def get_clipboard_class() -> Type[Clipboard]:
    system = platform.system()

    if system == "Windows":
        from cliphistory.clipboard.windows import WindowsClipboard
        return WindowsClipboard
    elif system == "Linux":
        from cliphistory.clipboard.linux import LinuxClipboard
        return LinuxClipboard
    elif system == "Darwin":
        from cliphistory.clipboard.macos import MacOSClipboard
        return MacOSClipboard
    else:
        raise NotImplementedError(f"Platform '{system}' is not supported")


def get_clipboard() -> Clipboard:
    clipboard_class = get_clipboard_class()
    return clipboard_class()
