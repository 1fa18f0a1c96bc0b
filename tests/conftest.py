"""Shared test fixtures: HTTP clients backed by httpx.MockTransport."""

import json

import httpx
import pytest


class RecordingHandler:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, status_code=200, json_body=None, content=None, headers=None, error=None):
        self.status_code = status_code
        self.json_body = json_body
        self.content = content
        self.headers = headers or {}
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(f"simulated {self.error.__name__}", request=request)
        if self.json_body is not None:
            return httpx.Response(self.status_code, json=self.json_body, headers=self.headers)
        return httpx.Response(self.status_code, content=self.content or b"", headers=self.headers)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self):
        return json.loads(self.last_request.content)


@pytest.fixture
def mock_http():
    """Factory returning ``(handler, httpx.Client)`` wired to a mock transport."""
    clients = []

    def factory(**kwargs):
        handler = RecordingHandler(**kwargs)
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return handler, client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def openai_chat_body():
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "hi there"},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 9, "completion_tokens": 3, "total_tokens": 12},
    }


@pytest.fixture
def anthropic_message_body():
    return {
        "id": "msg_123",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-5-sonnet-20240620",
        "content": [{"type": "text", "text": "Hello!"}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 10, "output_tokens": 5},
    }
