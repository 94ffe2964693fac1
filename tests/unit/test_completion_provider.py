import asyncio

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage

from devtools_assistant.config import CompletionConfig
from devtools_assistant.errors import CompletionError
from devtools_assistant.llm.provider import LangChainCompletionProvider, create_chat_model


class ExplodingModel:
    async def ainvoke(self, messages):
        raise ConnectionError("connection refused")


class BlockContentModel:
    async def ainvoke(self, messages):
        return AIMessage(content=[{"type": "text", "text": "first"}, {"type": "text", "text": "second"}])


def test_langchain_model_reply_is_returned() -> None:
    provider = LangChainCompletionProvider(FakeListChatModel(responses=["hello there"]))
    config = CompletionConfig(model="fake-model")

    response = asyncio.run(provider.send([HumanMessage(content="hi")], config))

    assert response.message == "hello there"


def test_list_content_is_flattened() -> None:
    provider = LangChainCompletionProvider(BlockContentModel())

    response = asyncio.run(provider.send([HumanMessage(content="hi")], CompletionConfig(model="configured")))

    assert response.message == "first second"
    assert response.model == "configured"


def test_provider_errors_become_completion_errors() -> None:
    provider = LangChainCompletionProvider(ExplodingModel())

    with pytest.raises(CompletionError, match="connection refused"):
        asyncio.run(provider.send([HumanMessage(content="hi")], CompletionConfig()))


def test_no_chat_model_without_api_key(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert create_chat_model(CompletionConfig()) is None
