import json

import pytest
import structlog

from devtools_assistant.config import AssistantConfig
from devtools_assistant.context import create_context
from devtools_assistant.log import get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_output_renders_one_object_per_event(capsys) -> None:
    setup_logging("INFO", json_output=True)

    get_logger("tests").info("tool_executed", tool_id="uuid")

    record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert record["event"] == "tool_executed"
    assert record["tool_id"] == "uuid"
    assert record["level"] == "info"


def test_context_applies_configured_level(capsys) -> None:
    create_context(AssistantConfig(log_level="WARNING", log_json=True))

    get_logger("tests").info("hidden_event")
    get_logger("tests").warning("shown_event")

    lines = capsys.readouterr().err.strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["shown_event"]
