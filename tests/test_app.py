from datetime import date, timedelta

import pytest

from cliphistory.clipboard import ClipboardContents
from cliphistory.config import HistoryConfig
from cliphistory.main import ClipHistoryApp
from cliphistory.models import ImageItem, TextItem
from cliphistory.services import Direction
from conftest import make_png


@pytest.fixture
def app(tmp_path, clipboard, scheduler, clock):
    config = HistoryConfig(storage_path=tmp_path / "history.json")
    app = ClipHistoryApp(config=config, clipboard=clipboard, scheduler=scheduler, clock=clock)
    app.start()
    yield app
    app.stop()


def copy_text(clipboard, scheduler, value):
    clipboard.set_contents(ClipboardContents(text=value))
    scheduler.advance()


def test_copies_flow_into_history(app, clipboard, scheduler):
    copy_text(clipboard, scheduler, "hello")
    copy_text(clipboard, scheduler, "hello")
    copy_text(clipboard, scheduler, "world")

    assert [item.text for item in app.filtered_items] == ["world", "hello"]


def test_select_writes_back_without_reingesting(app, clipboard, scheduler):
    copy_text(clipboard, scheduler, "first")
    copy_text(clipboard, scheduler, "second")

    item = app.select(1)
    scheduler.advance(3)

    assert item.text == "first"
    assert clipboard.read_contents().text == "first"
    assert [i.text for i in app.filtered_items] == ["second", "first"]
    assert app.engine.active_item_id == item.item_id
    assert not app.monitor.is_paused


def test_select_image_writes_image(app, clipboard, scheduler):
    png = make_png(4, 4)
    clipboard.set_contents(ClipboardContents(image_data=png))
    scheduler.advance()
    copy_text(clipboard, scheduler, "text after")

    item = app.select(1)

    assert isinstance(item, ImageItem)
    assert clipboard.read_contents().image_data == png


def test_remove_active_clears_clipboard(app, clipboard, scheduler):
    copy_text(clipboard, scheduler, "hello")
    copy_text(clipboard, scheduler, "world")
    world = app.filtered_items[0]

    result = app.remove(world.item_id)
    scheduler.advance()

    assert result.removed and result.clear_clipboard
    assert clipboard.read_contents().is_empty
    assert [i.text for i in app.filtered_items] == ["hello"]


def test_remove_inactive_leaves_clipboard(app, clipboard, scheduler):
    copy_text(clipboard, scheduler, "hello")
    copy_text(clipboard, scheduler, "world")
    hello = app.filtered_items[1]
    writes_before = clipboard.writes

    result = app.remove(hello.item_id)

    assert result.removed and not result.clear_clipboard
    assert clipboard.writes == writes_before
    assert clipboard.read_contents().text == "world"


def test_history_survives_restart(tmp_path, clipboard, scheduler, clock):
    config = HistoryConfig(storage_path=tmp_path / "history.json")
    first = ClipHistoryApp(config=config, clipboard=clipboard, scheduler=scheduler, clock=clock)
    first.start()
    copy_text(clipboard, scheduler, "persisted")
    first.stop()

    second = ClipHistoryApp(config=config, clipboard=clipboard, scheduler=scheduler, clock=clock)
    assert [item.text for item in second.filtered_items] == ["persisted"]

    second.clear_all()
    third = ClipHistoryApp(config=config, clipboard=clipboard, scheduler=scheduler, clock=clock)
    assert third.filtered_items == []


def test_filter_and_navigation_passthrough(app, clock):
    app.engine.ingest(TextItem.create("old", created_at=clock.now - timedelta(days=2)))
    app.engine.ingest(TextItem.create("new", created_at=clock.now))

    assert app.navigate_day(Direction.BACKWARD) == clock.now.date()
    assert [i.text for i in app.filtered_items] == ["new"]

    app.set_filter(date(2024, 5, 13))
    assert app.filter_date == date(2024, 5, 13)
    assert [i.text for i in app.filtered_items] == ["old"]

    app.set_filter(None)
    assert len(app.filtered_items) == 2


def test_subscribe_passthrough(app, clipboard, scheduler):
    seen = []
    app.subscribe(seen.append)
    copy_text(clipboard, scheduler, "notify me")
    assert [[i.text for i in view] for view in seen] == [["notify me"]]
