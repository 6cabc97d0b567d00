import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from cliphistory.services.clipboard_monitor import DEFAULT_POLL_INTERVAL
from cliphistory.services.history_engine import DEFAULT_MAX_ITEMS
from cliphistory.storage.store import DEFAULT_STORAGE_PATH


def _to_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _to_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class HistoryConfig:
    storage_path: Path = DEFAULT_STORAGE_PATH
    max_items: int = DEFAULT_MAX_ITEMS
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if self.max_items < 1:
            raise ValueError(f"max_items must be >= 1, got {self.max_items}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "HistoryConfig":
        load_dotenv(dotenv_path=env_path)

        storage = os.getenv("CLIPHISTORY_STORAGE_PATH")
        storage_path = Path(storage).expanduser() if storage else DEFAULT_STORAGE_PATH

        return cls(
            storage_path=storage_path,
            max_items=_to_int("CLIPHISTORY_MAX_ITEMS", DEFAULT_MAX_ITEMS),
            poll_interval=_to_float("CLIPHISTORY_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        )
