from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from npc_gateway.config.app_config import AppConfig
from npc_gateway.config.llm_config import LlmConfig
from npc_gateway.main import create_app
from npc_gateway.services.chat_service import ChatService
from npc_gateway.services.llm_service import LLMService


class FakeLLM:
    """Stands in for ChatOpenAI; records every call."""

    def __init__(self, content: Any = "", error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[list[Any]] = []

    async def ainvoke(self, messages: list[Any]) -> AIMessage:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.content)


def make_app_config(shared_secret: str | None = None, public_cors: str = "*") -> AppConfig:
    return AppConfig(_env_file=None, SHARED_SECRET=shared_secret, PUBLIC_CORS=public_cors)


def make_llm_config(api_key: str | None = "sk-test") -> LlmConfig:
    return LlmConfig(
        _env_file=None, OPENAI_API_KEY=api_key, OPENAI_BASE_URL=None, MODEL="gpt-4o-mini", LLM_TIMEOUT=30
    )


def make_service(
    fake: FakeLLM | None,
    shared_secret: str | None = None,
    api_key: str | None = "sk-test",
) -> ChatService:
    llm_config = make_llm_config(api_key)
    return ChatService(
        llm_config=llm_config,
        app_config=make_app_config(shared_secret),
        llm_service=LLMService(llm_config=llm_config, llm=fake),
    )


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM(content='{"reply":"Aye.","intent":"none","targets":[]}')


@pytest.fixture
def client_factory() -> Callable[..., TestClient]:
    """Build a TestClient around a ChatService with the given fake model."""

    def _factory(
        fake: FakeLLM | None,
        shared_secret: str | None = None,
        api_key: str | None = "sk-test",
        public_cors: str = "*",
    ) -> TestClient:
        service = make_service(fake, shared_secret=shared_secret, api_key=api_key)
        app = create_app(make_app_config(shared_secret, public_cors), chat_service=service)
        return TestClient(app)

    return _factory
