"""
Tests for structured logging setup.
"""

import json
import logging

from oneway.logging_config import FeatureFilter, get_logger, setup_logging


def test_json_records_carry_feature(restore_root_logging, capsys):
    setup_logging(level="INFO", fmt="json")
    get_logger("oneway.test", feature="TodoFeature").info("Committed state")

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["message"] == "Committed state"
    assert record["feature"] == "TodoFeature"
    assert record["level"] == "INFO"
    assert record["logger"] == "oneway.test"


def test_text_format_and_default_feature(restore_root_logging, capsys):
    setup_logging(level="WARNING", fmt="text")
    logging.getLogger("oneway.plain").info("hidden")
    logging.getLogger("oneway.plain").warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out
    assert "[feature=N/A]" in out


def test_setup_replaces_root_handlers(restore_root_logging):
    setup_logging(fmt="text")
    setup_logging(fmt="text")
    assert len(restore_root_logging.handlers) == 1
    assert logging.getLogger("asyncio").level == logging.WARNING


def test_env_level_is_used(restore_root_logging, monkeypatch):
    monkeypatch.setenv("ONEWAY_LOG_LEVEL", "ERROR")
    setup_logging(fmt="text")
    assert restore_root_logging.level == logging.ERROR


def test_feature_filter_fills_missing_field():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert FeatureFilter().filter(record) is True
    assert record.feature == "N/A"
