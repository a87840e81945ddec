"""
Shared fixtures: a scripted stub transport for the Gemini endpoint and a
recording sleep so retry tests never wait in real time.
"""

import random
from typing import Any

import httpx
import pytest

from groundgen.core.config import ClientConfig
from groundgen.services.generation_client import GroundedGenerationClient
from groundgen.services.retry_policy import RetryPolicy, exponential_backoff

TEST_CONFIG = ClientConfig(api_key="test-key", model="gemini-test", base_url="https://gemini.test/v1beta")


def ok_body(text: str = "Generated answer.", attributions: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """A well-formed generateContent response with one candidate."""
    candidate: dict[str, Any] = {"content": {"parts": [{"text": text}], "role": "model"}}
    if attributions is not None:
        candidate["groundingMetadata"] = {"groundingAttributions": attributions}
    return {"candidates": [candidate]}


class ScriptedTransport:
    """
    Replays a script of outcomes, one per request. Each item is a status code,
    a (status, body) pair, a ready httpx.Response, or an exception instance to raise.
    """

    def __init__(self, script: list[Any]) -> None:
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.script:
            raise AssertionError("transport called more times than scripted")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        if isinstance(item, tuple):
            status, body = item
        else:
            status, body = item, (ok_body() if 200 <= item < 300 else {"error": {"code": item}})
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=str(body))


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_client(sleep: RecordingSleep):
    """Factory: make_client(script, sleep_fn=None) -> (client, transport) wired to the recording sleep."""

    def _make(script: list[Any], sleep_fn=None) -> tuple[GroundedGenerationClient, ScriptedTransport]:
        transport = ScriptedTransport(script)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        policy = RetryPolicy(max_attempts=5, backoff=exponential_backoff(1.0, 1.0, rng=random.Random(7)))
        client = GroundedGenerationClient(TEST_CONFIG, retry_policy=policy, http_client=http_client, sleep=sleep_fn or sleep)
        return client, transport

    return _make
