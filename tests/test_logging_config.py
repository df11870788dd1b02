import json
import logging

import pytest

from ghcomments.logging_config import JsonLineFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def test_structured_format_emits_json(restore_root_logger):
    setup_logging("warning", "structured")
    (handler,) = restore_root_logger.handlers
    assert isinstance(handler.formatter, JsonLineFormatter)
    assert restore_root_logger.level == logging.WARNING

    record = logging.LogRecord("ghcomments.test", logging.ERROR, __file__, 1, 'say "hi"', None, None)
    line = json.loads(handler.formatter.format(record))
    assert line["level"] == "ERROR"
    assert line["logger"] == "ghcomments.test"
    assert line["message"] == 'say "hi"'


@pytest.mark.parametrize("format_type", ["dev", "structured"])
def test_unknown_level_falls_back_to_info(restore_root_logger, format_type):
    setup_logging("chatty", format_type)
    assert restore_root_logger.level == logging.INFO
