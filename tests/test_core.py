"""Tests for configuration, database bootstrap and error messages."""

import logging
import os
import sqlite3

import pytest

from school_registry.app.core import db
from school_registry.app.core.config import Settings
from school_registry.app.core.db import get_database_path, init_db
from school_registry.app.core.logging_config import connection_logger, format_peer, setup_logging
from school_registry.app.core.errors import (
    PersonNotFound,
    ProtocolError,
    SchoolMismatch,
    StoreError,
    UnknownMethod,
    ValidationError,
)


def test_settings_defaults_can_be_overridden():
    settings = Settings(port=9999, database_url="other.db")
    assert settings.port == 9999
    assert settings.database_url == "other.db"
    assert settings.max_frame_bytes > 0


def test_database_path_resolution(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert get_database_path("data.db") == os.path.join(str(tmp_path), "data.db")
    assert get_database_path("/var/lib/registry.db") == "/var/lib/registry.db"


def test_init_db_is_repeatable(tmp_path):
    path = str(tmp_path / "registry.db")
    init_db(path)
    init_db(path)
    conn = sqlite3.connect(path)
    try:
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
    finally:
        conn.close()
    assert {"schools", "persons", "classes", "class_students"} <= tables


def test_error_messages_and_families():
    assert str(UnknownMethod()) == "unknown route"
    assert str(ProtocolError()) == "invalid json"
    assert str(PersonNotFound("student not found")) == "student not found"
    assert str(SchoolMismatch()) == "student can only enroll in classes from one school"
    assert isinstance(PersonNotFound(), ValidationError)
    assert not isinstance(StoreError(), ValidationError)


class _PragmaFailingConnection:
    closed = False

    def execute(self, sql):
        raise sqlite3.OperationalError("disk I/O error")

    def close(self):
        self.closed = True


def test_connection_is_closed_when_setup_fails(monkeypatch):
    failing = _PragmaFailingConnection()
    monkeypatch.setattr(db.sqlite3, "connect", lambda *args, **kwargs: failing)

    with pytest.raises(StoreError, match="cannot open database"):
        db.get_connection("unused.db")
    assert failing.closed is True


def test_setup_logging_configures_package_logger_once(tmp_path):
    settings = Settings(log_level="debug", log_file=str(tmp_path / "registry.log"))
    name = "school_registry_logging_test"
    logger = setup_logging(settings, logger_name=name)
    try:
        assert logger is logging.getLogger(name)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        setup_logging(Settings(log_level="WARNING"), logger_name=name)
        assert len(logger.handlers) == 2
        assert logger.level == logging.WARNING
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_connection_logger_prefixes_peer(caplog):
    log = connection_logger(logging.getLogger("school_registry.test"), ("127.0.0.1", 5050))
    with caplog.at_level(logging.INFO, logger="school_registry.test"):
        log.info("opened")
    assert caplog.messages == ["[127.0.0.1:5050] opened"]
    assert format_peer(None) == "None"
