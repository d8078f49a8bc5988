"""Shared test fixtures for QuickLingo."""

import pytest

from quicklingo import i18n
from quicklingo import logger as quicklingo_logger
from quicklingo.core import database as db


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the app_config storage at a throwaway SQLite file."""
    db_file = tmp_path / "quicklingo-test.db"
    monkeypatch.setattr(db, "DB_FILE", db_file)
    monkeypatch.setattr(quicklingo_logger, "_log_mode_cache", None)
    return db_file


@pytest.fixture(autouse=True)
def fresh_language_cache():
    i18n.clear_cache()
    yield
    i18n.clear_cache()
