from __future__ import annotations

import io
import json
import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from piecework.core.catalog import TaskCatalog
from piecework.core.logging_config import configure_logging, get_logger, reset_logging
from piecework.core.schema import TaskDefinition


@pytest.fixture()
def stream():
    reset_logging()
    buffer = io.StringIO()
    configure_logging(level="INFO", stream=buffer)
    yield buffer
    reset_logging()


def _records(buffer: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


def test_price_change_is_logged_as_json(stream):
    catalog = TaskCatalog(
        [TaskDefinition(id=12, description="Débardage", category="Débardage", unit="par quintal", price=Decimal("1.65"))]
    )
    catalog.set_price(12, Decimal("2.00"))

    records = _records(stream)
    assert len(records) == 1
    record = records[0]
    assert record["logger"] == "piecework.catalog"
    assert record["level"] == "INFO"
    assert record["task_id"] == 12
    assert record["old_price"] == "1.65"
    assert record["new_price"] == "2.00"
    assert record["version"] == 2


def test_configure_logging_is_idempotent(stream):
    other = io.StringIO()
    configure_logging(level="DEBUG", stream=other)

    get_logger("tests").info("hello", extra={"amount": Decimal("3.5")})

    assert other.getvalue() == ""
    assert _records(stream)[0]["amount"] == "3.5"
    get_logger("tests").debug("hidden")
    assert len(_records(stream)) == 1
