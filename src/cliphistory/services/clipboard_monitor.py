import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from cliphistory.clipboard import Clipboard, read_snapshot
from cliphistory.models import ClipboardItem
from cliphistory.services.history_engine import HistoryEngine
from cliphistory.services.scheduler import ScheduledTask, Scheduler, ThreadScheduler

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5


class ClipboardMonitor:
    """Polls the clipboard change counter and feeds new content to the engine."""

    def __init__(
        self,
        clipboard: Clipboard,
        engine: HistoryEngine,
        scheduler: Optional[Scheduler] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        reader: Callable[[Clipboard], Optional[ClipboardItem]] = read_snapshot,
    ) -> None:
        """Initialise the monitor.

        Args:
            clipboard: Backend providing the change counter and contents.
            engine: History that receives newly detected items.
            scheduler: Tick source; a ``ThreadScheduler`` when omitted.
            poll_interval: Seconds between probes.
            reader: Turns the clipboard into an item, or None.
        """
        self.clipboard = clipboard
        self.engine = engine
        self.scheduler = scheduler or ThreadScheduler()
        self.poll_interval = poll_interval
        self._reader = reader
        self._lock = threading.RLock()
        self._task: Optional[ScheduledTask] = None
        self._baseline: Optional[int] = None
        self._is_running = False
        self._is_paused = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    # ---------------------------------------------------------------------
    # Lifecycle management
    # ---------------------------------------------------------------------
    def start(self) -> None:
        with self._lock:
            if self._is_running:
                logger.debug("ClipboardMonitor already running")
                return

            logger.info("Starting clipboard monitor (interval=%ss)", self.poll_interval)
            self._is_running = True
            self._is_paused = False
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            logger.info("Stopping clipboard monitor")
            self._is_running = False
            self._is_paused = False
            self._unschedule()

    def pause(self) -> None:
        """Stop probing entirely until ``resume``."""
        with self._lock:
            if not self._is_running or self._is_paused:
                return
            self._is_paused = True
            self._unschedule()
            logger.debug("Clipboard monitor paused")

    def resume(self) -> None:
        """Restart probing from the clipboard's current counter."""
        with self._lock:
            if not self._is_running or not self._is_paused:
                return
            self._is_paused = False
            self._schedule()
            logger.debug("Clipboard monitor resumed")

    @contextmanager
    def paused(self) -> Iterator[None]:
        """Suspend probing while the caller writes to the clipboard itself."""
        was_active = self._is_running and not self._is_paused
        self.pause()
        try:
            yield
        finally:
            if was_active:
                self.resume()

    def _schedule(self) -> None:
        with self.engine.lock:
            self._baseline = self.clipboard.change_count()
        self._task = self.scheduler.schedule(self.poll_interval, self._tick)

    def _unschedule(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()

    # ---------------------------------------------------------------------
    # Probing
    # ---------------------------------------------------------------------
    def _tick(self) -> None:
        # A tick that would wait on a UI call is dropped, not queued.
        if not self.engine.lock.acquire(blocking=False):
            logger.debug("History busy, skipping clipboard probe")
            return
        try:
            self.check_now()
        except Exception:
            logger.exception("Clipboard probe failed")
        finally:
            self.engine.lock.release()

    def check_now(self) -> bool:
        """Probe once; return True when a new item was added to the history."""
        with self.engine.lock:
            count = self.clipboard.change_count()
            if count == self._baseline:
                return False
            self._baseline = count

            item = self._reader(self.clipboard)
            if item is None:
                logger.debug("Clipboard changed but holds nothing classifiable")
                return False
            return self.engine.ingest(item)

    # ---------------------------------------------------------------------
    # Context manager helpers
    # ---------------------------------------------------------------------
    def __enter__(self) -> "ClipboardMonitor":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
