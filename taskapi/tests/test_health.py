"""Tests for the health check endpoint and logging setup."""

import logging
from datetime import datetime

from fastapi.testclient import TestClient

from taskapi.logging_setup import setup_logging


def test_health_check(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00")).tzinfo is not None


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    before = list(root.handlers)
    before_level = root.level
    try:
        setup_logging("DEBUG")
        setup_logging("warning")
        added = [h for h in root.handlers if h.get_name() == "taskapi-console"]
        assert len(added) == 1
        assert root.level == logging.WARNING
        assert logging.getLogger("sqlalchemy").level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(before_level)


def test_setup_logging_unknown_level_falls_back_to_info():
    root = logging.getLogger()
    before_handlers = list(root.handlers)
    before_level = root.level
    try:
        setup_logging("chatty")
        assert root.level == logging.INFO
    finally:
        for handler in list(root.handlers):
            if handler not in before_handlers:
                root.removeHandler(handler)
        root.setLevel(before_level)
