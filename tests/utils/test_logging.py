import json
import logging

import pytest

from litegen.utils.logging import setup_logging


def _console_handlers(logger):
    return [h for h in logger.handlers if h.get_name() == "litegen-console"]


def test_setup_logging_sets_level():
    logger = setup_logging("DEBUG")
    assert logger.name == "litegen"
    assert logger.level == logging.DEBUG


def test_setup_logging_is_idempotent():
    logger = setup_logging("INFO")
    setup_logging("INFO")
    assert len(_console_handlers(logger)) == 1


def test_text_format(capsys):
    setup_logging("INFO")
    logging.getLogger("litegen.engine").info("Interpreter initialized")
    out = capsys.readouterr().out
    assert "[INFO] [litegen.engine] Interpreter initialized" in out


def test_json_format(capsys):
    setup_logging("INFO", json_format=True)
    logging.getLogger("litegen.engine").info("Interpreter initialized")
    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "Interpreter initialized"
    assert record["levelname"] == "INFO"
    assert record["name"] == "litegen.engine"


def test_setup_logging_accepts_lowercase():
    assert setup_logging("warning").level == logging.WARNING


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError, match="VERBOSE"):
        setup_logging("verbose")
