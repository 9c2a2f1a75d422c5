"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from todo_agent.llm.client import ModelResponse
from todo_agent.todos.store import TaskStore


class ScriptedModel:
    """ChatModel that replays canned responses and records every request."""

    def __init__(self, responses: list[ModelResponse | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[Any] = []
        self.tools: list[list[dict[str, Any]]] = []
        self.release: asyncio.Event | None = None

    async def complete(self, transcript, tools) -> ModelResponse:
        self.calls.append(transcript)
        self.tools.append(tools)
        if self.release is not None:
            await self.release.wait()
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeImages:
    """ImageGenerator that returns a fixed data URL or raises ``error``."""

    def __init__(
        self,
        data_url: str = "data:image/png;base64,AAAA",
        error: Exception | None = None,
    ) -> None:
        self.data_url = data_url
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.data_url


@pytest.fixture
def task_store() -> TaskStore:
    return TaskStore()


@pytest.fixture
def fake_images() -> FakeImages:
    return FakeImages()


@pytest.fixture
def images_factory():
    """Factory for FakeImages with custom behaviour."""
    return FakeImages


@pytest.fixture
def scripted_model():
    """Factory: ``scripted_model(resp1, resp2, ...)``."""

    def _make(*responses: ModelResponse | Exception) -> ScriptedModel:
        return ScriptedModel(list(responses))

    return _make
