from __future__ import annotations

from datetime import datetime
import json
import os
from pathlib import Path
import time

from loguru import logger
import pytest

from infrastructure.logging import find_latest_log_file, init_logging
from infrastructure.settings import JsonSettings
from infrastructure.utils import format_stored_datetime, parse_stored_datetime


def test_settings_dotted_access(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"selection": {"long_press_ms": "750"}, "storage": {"path": "data/t.json"}}),
        encoding="utf-8",
    )
    settings = JsonSettings(path)

    assert settings.get("selection.long_press_ms") == "750"
    assert settings.get_int("selection.long_press_ms", 500) == 750
    assert settings.get("selection.missing", 1) == 1
    assert settings.resolve_path("storage.path", "x") == (tmp_path / "data" / "t.json").resolve()


def test_settings_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        JsonSettings(tmp_path / "absent.json")


def test_settings_from_dict_falls_back_on_bad_ints() -> None:
    settings = JsonSettings.from_dict({"selection": {"long_press_ms": "soon"}})
    assert settings.get_int("selection.long_press_ms", 500) == 500


def test_shipped_settings_file_is_valid() -> None:
    settings = JsonSettings(Path(__file__).parent.parent / "settings.json")
    assert settings.get_int("selection.long_press_ms", 0) == 500
    assert settings.get("clipboard.copy_suffix") == " (Copy)"


def test_datetime_round_trip_and_legacy_epoch() -> None:
    dt = datetime(2024, 5, 1, 8, 30, 15, 123456)
    assert parse_stored_datetime(format_stored_datetime(dt)) == dt
    assert parse_stored_datetime(0) == datetime.fromtimestamp(0)
    assert parse_stored_datetime("yesterday") is None
    assert parse_stored_datetime(None) is None
    assert format_stored_datetime(None) == ""


def test_init_logging_writes_to_directory(tmp_path: Path) -> None:
    init_logging(str(tmp_path), level="DEBUG")
    logger.info("hello from test")
    logger.complete()
    logger.remove()

    latest = find_latest_log_file(str(tmp_path))
    assert latest is not None
    assert "hello from test" in latest.read_text(encoding="utf-8")


def test_find_latest_log_file_picks_newest(tmp_path: Path) -> None:
    older = tmp_path / "app_20240101.log"
    newer = tmp_path / "app_20240102.log"
    older.write_text("a", encoding="utf-8")
    newer.write_text("b", encoding="utf-8")
    past = time.time() - 100
    os.utime(older, (past, past))

    assert find_latest_log_file(str(tmp_path)) == newer
    assert find_latest_log_file(str(tmp_path / "missing")) is None
