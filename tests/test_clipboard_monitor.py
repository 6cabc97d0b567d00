import threading
import time

from cliphistory.clipboard import ClipboardContents, MemoryClipboard
from cliphistory.services import ClipboardMonitor, ThreadScheduler
from conftest import make_png


def copy(clipboard, **contents):
    clipboard.set_contents(ClipboardContents(**contents))


def test_existing_content_is_not_ingested_on_start(engine, clipboard, scheduler):
    copy(clipboard, text="already there")
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()

    scheduler.advance(3)

    assert engine.items == []


def test_new_content_is_ingested(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()

    copy(clipboard, text="hello")
    scheduler.advance()
    copy(clipboard, image_data=make_png(3, 3), source_url="https://example.com/x.png")
    scheduler.advance()

    assert [item.kind.value for item in engine.items] == ["web_image", "text"]


def test_unchanged_counter_skips_reading(engine, clipboard, scheduler):
    reads = []

    def reader(cb):
        reads.append(cb.change_count())
        return None

    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler, reader=reader)
    monitor.start()

    scheduler.advance(5)
    assert reads == []

    copy(clipboard, text="x")
    scheduler.advance(5)
    assert len(reads) == 1


def test_unclassifiable_change_is_ignored(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()

    copy(clipboard)
    scheduler.advance()

    assert engine.items == []


def test_pause_stops_scheduling(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()
    assert len(scheduler.active_tasks) == 1

    monitor.pause()
    assert monitor.is_paused
    assert scheduler.active_tasks == []
    assert scheduler.advance(3) == 0


def test_resume_rebaselines(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()

    monitor.pause()
    clipboard.write_text("written by us")
    monitor.resume()
    scheduler.advance()

    assert engine.items == []

    copy(clipboard, text="from another app")
    scheduler.advance()
    assert [item.text for item in engine.items] == ["from another app"]


def test_paused_context_manager(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()

    with monitor.paused():
        assert monitor.is_paused
        clipboard.clear()

    assert not monitor.is_paused
    scheduler.advance()
    assert engine.items == []


def test_paused_context_keeps_stopped_monitor_stopped(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    with monitor.paused():
        pass
    assert not monitor.is_running
    assert scheduler.active_tasks == []


def test_stop_and_context_manager(engine, clipboard, scheduler):
    with ClipboardMonitor(clipboard, engine, scheduler=scheduler) as monitor:
        assert monitor.is_running
        assert len(scheduler.active_tasks) == 1
    assert not monitor.is_running
    assert scheduler.active_tasks == []


def test_start_twice_schedules_once(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()
    monitor.start()
    assert len(scheduler.active_tasks) == 1


def test_tick_skips_when_engine_is_busy(engine, clipboard, scheduler):
    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler)
    monitor.start()
    copy(clipboard, text="later")

    acquired = threading.Event()
    release = threading.Event()

    def hold_lock():
        with engine.lock:
            acquired.set()
            release.wait(timeout=5)

    holder = threading.Thread(target=hold_lock)
    holder.start()
    acquired.wait(timeout=5)
    try:
        scheduler.advance()
        assert engine.items == []
    finally:
        release.set()
        holder.join(timeout=5)

    scheduler.advance()
    assert [item.text for item in engine.items] == ["later"]


def test_reader_errors_are_contained(engine, clipboard, scheduler):
    calls = []

    def reader(cb):
        calls.append(1)
        raise RuntimeError("backend exploded")

    monitor = ClipboardMonitor(clipboard, engine, scheduler=scheduler, reader=reader)
    monitor.start()
    copy(clipboard, text="a")
    scheduler.advance()
    copy(clipboard, text="b")
    scheduler.advance()

    assert len(calls) == 2
    assert monitor.is_running


def test_thread_scheduler_drives_real_ticks(engine):
    clipboard = MemoryClipboard()
    monitor = ClipboardMonitor(clipboard, engine, scheduler=ThreadScheduler(), poll_interval=0.01)
    monitor.start()
    try:
        copy(clipboard, text="threaded")
        deadline = time.monotonic() + 5
        while not engine.items and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        monitor.stop()

    assert [item.text for item in engine.items] == ["threaded"]


def test_thread_task_cancel_waits_for_running_tick():
    started = threading.Event()
    release = threading.Event()
    finished = []

    def slow_tick():
        started.set()
        release.wait(5)
        finished.append(True)

    task = ThreadScheduler().schedule(0.01, slow_tick)
    assert started.wait(5)
    timer = threading.Timer(0.2, release.set)
    timer.start()
    try:
        task.cancel()
    finally:
        timer.cancel()
        release.set()

    assert task.cancelled
    assert finished == [True]
