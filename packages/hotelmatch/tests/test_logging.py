"""Tests for log output configuration."""

import json

import pytest
import structlog

from hotelmatch.logging import build_processors


def test_console_is_default():
    assert isinstance(build_processors()[-1], structlog.dev.ConsoleRenderer)


def test_json_renders_one_object_per_event():
    renderer = build_processors("json")[-1]
    line = renderer(None, "info", {"event": "supplier_imported", "supplier_hotel_id": 7, "action": "auto_map"})
    assert json.loads(line) == {"event": "supplier_imported", "supplier_hotel_id": 7, "action": "auto_map"}


def test_unknown_format():
    with pytest.raises(ValueError):
        build_processors("xml")
