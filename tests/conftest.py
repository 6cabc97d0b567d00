import io
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from PIL import Image

# Make src importable
REPO_ROOT = Path(__file__).resolve().parent.parent
SRC = REPO_ROOT / "src"
sys.path.insert(0, str(SRC))

from cliphistory.clipboard import MemoryClipboard  # noqa: E402
from cliphistory.services import HistoryEngine, ManualScheduler  # noqa: E402
from cliphistory.storage import HistoryStore  # noqa: E402


def make_png(width: int = 4, height: int = 3, color=(255, 0, 0)) -> bytes:
    output = io.BytesIO()
    Image.new("RGB", (width, height), color).save(output, format="PNG")
    return output.getvalue()


def pixels(data: bytes) -> bytes:
    with Image.open(io.BytesIO(data)) as image:
        return image.convert("RGBA").tobytes()


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 15, 12, 0, 0))


@pytest.fixture
def store(tmp_path):
    return HistoryStore(tmp_path / "data" / "clipboard_history.json")


@pytest.fixture
def engine(store, clock):
    return HistoryEngine(store, clock=clock)


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def scheduler():
    return ManualScheduler()
