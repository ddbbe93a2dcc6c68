"""Tests for settings files, logging setup and atomic writes"""

import logging
from pathlib import Path

import pytest

from quill.config import Settings
from quill.logger import CustomFormatter, configure_logging
from quill.utils.move import atomic_write


def test_missing_settings_file_gives_defaults(tmp_path: Path):
    loaded = Settings.load_from_file(tmp_path / "missing.json")
    assert loaded.QUILL_DATA_FILE_SUFFIX == ".quill_data"
    assert loaded.UNDO_LIMIT == 100


def test_invalid_settings_file_gives_defaults(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert Settings.load_from_file(path).DEFAULT_TITLE == "Default Quill notebook"

    path.write_text('{"UNDO_LIMIT": "many"}', encoding="utf-8")
    assert Settings.load_from_file(path).UNDO_LIMIT == 100


def test_settings_roundtrip(tmp_path: Path):
    path = tmp_path / "nested" / "config.json"
    Settings(UNDO_LIMIT=5, DEFAULT_TITLE="Sketches").save_to_file(path)

    loaded = Settings.load_from_file(path)

    assert loaded.UNDO_LIMIT == 5
    assert loaded.DEFAULT_TITLE == "Sketches"


def test_storage_paths():
    settings = Settings()
    notebook_dir = settings.notebook_dir(Path("/data"), "abc")

    assert notebook_dir == Path("/data/notebook_abc")
    assert settings.index_file(notebook_dir).name == "index.quill_data"
    assert settings.page_file(notebook_dir, "p1").name == "page_p1.quill_data"


def test_configure_logging_writes_file(tmp_path: Path):
    root_logger = logging.getLogger()
    handlers_before = list(root_logger.handlers)
    try:
        log_file = configure_logging(tmp_path / "logs")
        logging.getLogger("Book").warning("hello from the test")
        for handler in root_logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert "hello from the test" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(root_logger.handlers):
            if handler not in handlers_before:
                root_logger.removeHandler(handler)
                handler.close()


def test_custom_formatter_colours_by_level():
    record = logging.LogRecord("Book", logging.ERROR, __file__, 1, "broken", None, None)
    formatted = CustomFormatter().format(record)

    assert formatted.startswith(CustomFormatter.red)
    assert "broken" in formatted


def test_atomic_write_replaces_file(tmp_path: Path):
    target = tmp_path / "out.bin"
    target.write_bytes(b"old")

    with atomic_write(target) as f:
        _ = f.write(b"new")

    assert target.read_bytes() == b"new"
    assert list(tmp_path.iterdir()) == [target]


def test_atomic_write_keeps_original_on_error(tmp_path: Path):
    target = tmp_path / "out.bin"
    target.write_bytes(b"old")

    with pytest.raises(RuntimeError):
        with atomic_write(target) as f:
            _ = f.write(b"partial")
            raise RuntimeError("interrupted")

    assert target.read_bytes() == b"old"
    assert list(tmp_path.iterdir()) == [target]
