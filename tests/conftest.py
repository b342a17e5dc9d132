import json

import httpx
import pytest
from fastapi.testclient import TestClient

from guruji.core.config import Settings
from guruji.main import create_application
from guruji.services.completion import CompletionService


def completion_body(content="Breathe, and the answer arrives.", usage=None):
    return {
        "id": "chatcmpl-1",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": usage or {"prompt_tokens": 12, "completion_tokens": 8, "total_tokens": 20},
    }


class UpstreamRecorder:
    """MockTransport handler that records requests and replays a fixed response."""

    def __init__(self, status_code=200, body=None, error=None):
        self.status_code = status_code
        self.body = completion_body() if body is None else body
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(f"{self.error.__name__} raised", request=request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payloads(self):
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DEEPSEEK_API_KEY="test-key",
        DEEPSEEK_API_URL="https://upstream.test/chat/completions",
    )


@pytest.fixture
def upstream():
    return UpstreamRecorder()


@pytest.fixture
def completion_service(settings, upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return CompletionService(settings, client=client)


@pytest.fixture
def app(settings, completion_service):
    return create_application(settings, completion_service=completion_service)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)
