"""Tests du client OpenAI (SDK simulé)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import httpx
import openai
import pytest

from backend.domain.errors import ServiceUnavailable, StreamFailure
from backend.infra.llm.openai_client import OpenAILLM


class FakeStream:
    """Itérable asynchrone imitant `openai.AsyncStream`."""

    def __init__(self, items, error: Exception | None = None) -> None:
        self._items = list(items)
        self._error = error
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._items:
            yield item
        if self._error is not None:
            raise self._error

    async def close(self) -> None:
        self.closed = True


def _delta(text: str, model: str = "gpt-4o-2024-08-06"):
    return SimpleNamespace(
        choices=[SimpleNamespace(delta=SimpleNamespace(content=text))], usage=None, model=model
    )


def _usage(prompt: int, completion: int, model: str = "gpt-4o-2024-08-06"):
    return SimpleNamespace(
        choices=[],
        usage=SimpleNamespace(
            prompt_tokens=prompt, completion_tokens=completion, total_tokens=prompt + completion
        ),
        model=model,
    )


def _client(create: AsyncMock) -> Mock:
    client = Mock()
    client.chat.completions.create = create
    return client


async def _collect(llm: OpenAILLM) -> list:
    return [
        c
        async for c in llm.stream(
            [{"role": "user", "content": "hi"}], model="gpt-4o", temperature=0.8, max_tokens=50
        )
    ]


def test_disabled_without_key() -> None:
    assert OpenAILLM(api_key=None).enabled is False


@pytest.mark.asyncio
async def test_disabled_client_raises() -> None:
    with pytest.raises(ServiceUnavailable):
        await OpenAILLM().complete([], model="gpt-4o", temperature=0.1, max_tokens=10)


@pytest.mark.asyncio
async def test_stream_yields_deltas_then_usage() -> None:
    stream = FakeStream([_delta("Hel"), _delta("lo"), _delta(""), _usage(12, 3)])
    create = AsyncMock(return_value=stream)
    llm = OpenAILLM(client=_client(create))

    out = await _collect(llm)

    assert [c.type for c in out] == ["content", "content", "usage"]
    assert "".join(c.content for c in out) == "Hello"
    assert out[-1].usage.prompt_tokens == 12
    assert out[-1].usage.completion_tokens == 3
    assert out[-1].model == "gpt-4o-2024-08-06"
    assert stream.closed is True
    kwargs = create.await_args.kwargs
    assert kwargs["stream"] is True
    assert kwargs["stream_options"] == {"include_usage": True}


@pytest.mark.asyncio
async def test_stream_error_is_wrapped_and_closes_response() -> None:
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
    stream = FakeStream([_delta("partial")], error=error)
    llm = OpenAILLM(client=_client(AsyncMock(return_value=stream)))

    with pytest.raises(StreamFailure):
        await _collect(llm)
    assert stream.closed is True


@pytest.mark.asyncio
async def test_complete_json_mode() -> None:
    resp = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content='{"brandName": "Nova"}'))]
    )
    create = AsyncMock(return_value=resp)
    llm = OpenAILLM(client=_client(create))

    text = await llm.complete(
        [{"role": "user", "content": "extract"}],
        model="gpt-4o-mini",
        temperature=0.1,
        max_tokens=100,
        json_mode=True,
    )

    assert text == '{"brandName": "Nova"}'
    assert create.await_args.kwargs["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_complete_without_choices_returns_empty_text() -> None:
    llm = OpenAILLM(client=_client(AsyncMock(return_value=SimpleNamespace(choices=[]))))

    text = await llm.complete(
        [{"role": "system", "content": "extract"}],
        model="gpt-4o-mini",
        temperature=0.1,
        max_tokens=100,
        json_mode=True,
    )

    assert text == ""
