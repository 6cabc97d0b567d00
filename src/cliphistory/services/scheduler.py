import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List

logger = logging.getLogger(__name__)


class ScheduledTask(ABC):

    @abstractmethod
    def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):

    @abstractmethod
    def schedule(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` every ``interval`` seconds until the task is cancelled."""


class _ThreadTask(ScheduledTask):

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        # Ticks run back to back on this thread, so they never overlap.
        while not self._stop_event.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Scheduled callback failed")

    def cancel(self) -> None:
        # Waits out an in-flight tick; once this returns the callback is done.
        self._stop_event.set()
        if threading.current_thread() is not self._thread:
            self._thread.join()

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()


class ThreadScheduler(Scheduler):

    def schedule(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        return _ThreadTask(interval, callback)


class _ManualTask(ScheduledTask):

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler that only ticks when told to; lets tests drive time by hand."""

    def __init__(self) -> None:
        self._tasks: List[_ManualTask] = []

    def schedule(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        task = _ManualTask(interval, callback)
        self._tasks.append(task)
        return task

    @property
    def active_tasks(self) -> List[ScheduledTask]:
        self._tasks = [task for task in self._tasks if not task.cancelled]
        return list(self._tasks)

    def run_pending(self) -> int:
        ran = 0
        for task in self.active_tasks:
            if not task.cancelled:
                task.callback()
                ran += 1
        return ran

    def advance(self, ticks: int = 1) -> int:
        return sum(self.run_pending() for _ in range(ticks))
