import json
import logging

import pytest

from clubthreads.observability.logging_config import setup_logging
from clubthreads.utils.correlation import CorrelationContext


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_logs_carry_service_and_correlation(capsys):
    setup_logging(level="INFO", log_format="json", service_name="svc-test")

    with CorrelationContext("cid-42"):
        logging.getLogger("clubthreads.test").info(
            "Topic threads built", extra={"topic_id": "t1"}
        )

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "Topic threads built"
    assert record["level"] == "INFO"
    assert record["service"] == "svc-test"
    assert record["correlation_id"] == "cid-42"
    assert record["topic_id"] == "t1"


def test_text_format(capsys):
    setup_logging(level="WARNING", log_format="text")

    logging.getLogger("clubthreads.test").info("hidden")
    logging.getLogger("clubthreads.test").warning("shown")

    captured = capsys.readouterr()
    assert "hidden" not in captured.err
    assert "clubthreads.test - WARNING - shown" in captured.err
    assert captured.out == ""
