#!/usr/bin/env python3

import argparse
import dataclasses
import logging
import signal
import sys
import time
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from cliphistory.clipboard import Clipboard, get_clipboard
from cliphistory.config import HistoryConfig
from cliphistory.models import ClipboardItem
from cliphistory.services import (
    ClipboardMonitor,
    Direction,
    HistoryEngine,
    RemovalResult,
    Scheduler,
)
from cliphistory.storage import HistoryStore

logger = logging.getLogger(__name__)


class ClipHistoryApp:
    """Wires clipboard, history, persistence and monitor for a UI to drive.

    Clipboard writes made on behalf of the UI happen with the monitor
    paused, so they are never read back as new content.
    """

    def __init__(
        self,
        config: Optional[HistoryConfig] = None,
        clipboard: Optional[Clipboard] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or HistoryConfig.from_env()
        self.clipboard = clipboard or get_clipboard()
        self.store = HistoryStore(self.config.storage_path)
        self.engine = HistoryEngine(
            self.store, max_items=self.config.max_items, clock=clock)
        self.monitor = ClipboardMonitor(
            self.clipboard,
            self.engine,
            scheduler=scheduler,
            poll_interval=self.config.poll_interval,
        )
        self.running = False

    @property
    def filtered_items(self) -> List[ClipboardItem]:
        return self.engine.filtered_items

    @property
    def filter_date(self) -> Optional[date]:
        return self.engine.filter_date

    def subscribe(self, callback: Callable[[List[ClipboardItem]], None]) -> Callable[[], None]:
        return self.engine.subscribe(callback)

    def select(self, index: int) -> ClipboardItem:
        item = self.engine.select(index)
        with self.monitor.paused():
            if not self.clipboard.write_item(item):
                logger.warning(f"Could not copy {item.kind.value} item back to the clipboard")
        return item

    def remove(self, item_id: str) -> RemovalResult:
        with self.monitor.paused():
            result = self.engine.remove(item_id)
            if result.clear_clipboard and not self.clipboard.clear():
                logger.warning("Could not clear the clipboard after removing its item")
        return result

    def clear_all(self) -> None:
        self.engine.clear_all()

    def set_filter(self, day: Union[date, datetime, None]) -> None:
        self.engine.set_filter(day)

    def navigate_day(self, direction: Direction) -> Optional[date]:
        return self.engine.navigate_day(direction)

    def start(self):
        if self.running:
            return

        logger.info(
            f"Starting cliphistory - {len(self.engine.items)} items, storage: {self.store.path}")
        self.running = True
        self.monitor.start()

    def stop(self):
        if not self.running:
            return

        self.running = False
        self.monitor.stop()
        logger.info("cliphistory stopped")

    def run_forever(self):
        self.start()

        try:
            while self.running:
                time.sleep(1.0)
        except KeyboardInterrupt:
            print("\nStopping...")
        finally:
            self.stop()


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="cliphistory - Clipboard history tracker"
    )

    parser.add_argument(
        "-s", "--storage",
        type=Path,
        default=None,
        help="History file (default: ~/Documents/ClipboardManagerData/clipboard_history.json)"
    )

    parser.add_argument(
        "-i", "--poll-interval",
        type=float,
        default=None,
        help="Clipboard polling interval in seconds (default: 0.5)"
    )

    parser.add_argument(
        "-m", "--max-items",
        type=int,
        default=None,
        help="Number of history entries to keep (default: 20)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    return parser.parse_args(argv)


def build_config(args) -> HistoryConfig:
    config = HistoryConfig.from_env()
    overrides = {}
    if args.storage is not None:
        overrides["storage_path"] = args.storage.expanduser()
    if args.poll_interval is not None:
        overrides["poll_interval"] = args.poll_interval
    if args.max_items is not None:
        overrides["max_items"] = args.max_items
    return dataclasses.replace(config, **overrides)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    try:
        app = ClipHistoryApp(config=build_config(args))
    except (ValueError, NotImplementedError, RuntimeError) as e:
        logger.error(f"Cannot start: {e}")
        sys.exit(2)

    def signal_handler(signum, frame):
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print("cliphistory running. Press Ctrl+C to stop")
    app.run_forever()


if __name__ == "__main__":
    main()
