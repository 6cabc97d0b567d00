from pathlib import Path

import pytest

from cliphistory.config import HistoryConfig
from cliphistory.main import build_config, parse_args
from cliphistory.storage import DEFAULT_STORAGE_PATH

ENV_VARS = ("CLIPHISTORY_STORAGE_PATH", "CLIPHISTORY_MAX_ITEMS", "CLIPHISTORY_POLL_INTERVAL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # setenv first so teardown also undoes anything load_dotenv writes
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def test_defaults(tmp_path):
    config = HistoryConfig.from_env(env_path=tmp_path / "missing.env")
    assert config.storage_path == DEFAULT_STORAGE_PATH
    assert config.max_items == 20
    assert config.poll_interval == 0.5


def test_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIPHISTORY_STORAGE_PATH", str(tmp_path / "h.json"))
    monkeypatch.setenv("CLIPHISTORY_MAX_ITEMS", "7")
    monkeypatch.setenv("CLIPHISTORY_POLL_INTERVAL", "0.25")

    config = HistoryConfig.from_env(env_path=tmp_path / "missing.env")

    assert config.storage_path == tmp_path / "h.json"
    assert config.max_items == 7
    assert config.poll_interval == 0.25


def test_reads_dotenv_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("CLIPHISTORY_MAX_ITEMS=5\nCLIPHISTORY_POLL_INTERVAL=2\n")

    config = HistoryConfig.from_env(env_path=env_file)

    assert config.max_items == 5
    assert config.poll_interval == 2.0


def test_environment_beats_dotenv(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("CLIPHISTORY_MAX_ITEMS=5\n")
    monkeypatch.setenv("CLIPHISTORY_MAX_ITEMS", "9")

    assert HistoryConfig.from_env(env_path=env_file).max_items == 9


@pytest.mark.parametrize("name, value", [
    ("CLIPHISTORY_MAX_ITEMS", "many"),
    ("CLIPHISTORY_MAX_ITEMS", "0"),
    ("CLIPHISTORY_POLL_INTERVAL", "fast"),
    ("CLIPHISTORY_POLL_INTERVAL", "-1"),
])
def test_invalid_values(monkeypatch, tmp_path, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        HistoryConfig.from_env(env_path=tmp_path / "missing.env")


def test_cli_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIPHISTORY_MAX_ITEMS", "9")
    args = parse_args(["--storage", str(tmp_path / "cli.json"), "-i", "1.5"])

    config = build_config(args)

    assert config.storage_path == Path(tmp_path / "cli.json")
    assert config.poll_interval == 1.5
    assert config.max_items == 9
