import json
import logging

import pytest

from services.core.logging_config import CustomJsonFormatter, setup_logging


@pytest.fixture
def clean_root_logger():
    """Restores the root logger after a test reconfigures it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def _engine_handlers(root):
    return [h for h in root.handlers if getattr(h, "_assessment_engine", False)]


def test_json_formatter_adds_fields():
    formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(module)s %(lineno)d %(message)s')
    record = logging.LogRecord("services.assessment_engine.scorer", logging.WARNING, __file__, 42,
                               "Rejected submission", None, None)
    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Rejected submission"
    assert payload["level"] == "WARNING"
    assert payload["name"] == "services.assessment_engine.scorer"
    assert payload["lineno"] == 42
    assert isinstance(payload["timestamp"], float)


def test_setup_logging_is_idempotent(clean_root_logger):
    for handler in _engine_handlers(clean_root_logger):
        clean_root_logger.removeHandler(handler)

    setup_logging("DEBUG")
    setup_logging("WARNING")

    assert len(_engine_handlers(clean_root_logger)) == 1
    assert clean_root_logger.level == logging.WARNING


def test_plain_output(clean_root_logger):
    for handler in _engine_handlers(clean_root_logger):
        clean_root_logger.removeHandler(handler)

    setup_logging("info", json_output=False)
    (handler,) = _engine_handlers(clean_root_logger)

    assert not isinstance(handler.formatter, CustomJsonFormatter)
    assert clean_root_logger.level == logging.INFO


def test_unknown_level_falls_back_to_info(clean_root_logger):
    setup_logging("VERBOSE")
    assert clean_root_logger.level == logging.INFO
