"""Service layer for cliphistory."""

from .clipboard_monitor import ClipboardMonitor
from .history_engine import Direction, HistoryEngine, RemovalResult
from .scheduler import ManualScheduler, ScheduledTask, Scheduler, ThreadScheduler

__all__ = [
    "ClipboardMonitor",
    "Direction",
    "HistoryEngine",
    "ManualScheduler",
    "RemovalResult",
    "ScheduledTask",
    "Scheduler",
    "ThreadScheduler",
]
