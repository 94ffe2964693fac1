import asyncio

from pydantic import BaseModel

from devtools_assistant.agent.registry import ToolDefinition, ToolRegistry
from devtools_assistant.types import InvocationStatus


class EchoInput(BaseModel):
    text: str


def test_tool_observer_captures_latency_and_payload() -> None:
    registry = ToolRegistry()

    def _handler(data: EchoInput) -> str:
        return data.text.upper()

    registry.register(ToolDefinition(id="echo", description="uppercase", handler=_handler, input_schema=EchoInput))

    observed = []
    registry.set_observer(observed.append)
    result = asyncio.run(registry.execute("echo", {"text": "hello"}))
    registry.set_observer(None)

    assert result.message == "HELLO"
    assert result.execution_time_ms >= 0.0
    assert len(observed) == 1
    assert observed[0].tool_id == "echo"
    assert observed[0].input_payload == {"text": "hello"}
    assert observed[0].status is InvocationStatus.SUCCEEDED
    assert observed[0].latency_ms >= 0.0


def test_observer_not_called_for_unknown_tool() -> None:
    registry = ToolRegistry()
    observed = []
    registry.set_observer(observed.append)

    asyncio.run(registry.execute("ghost", {}))

    assert observed == []
