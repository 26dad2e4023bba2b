import json

import httpx
import pytest
from fastapi.testclient import TestClient

from support_desk.core.config import Settings, get_settings
from support_desk.main import app
from support_desk.orchestrator.factory import get_llm_transport

TEST_API_KEY = "sk-test-1234567890"

# --- HELPERS ---

def make_settings(**overrides) -> Settings:
    """Settings independent of the developer's environment and .env file."""
    values = {
        "USE_DUMMY_AI": True,
        "OPENAI_API_KEY": None,
        "OPENAI_MODEL": "gpt-4o-mini",
        "OPENAI_BASE_URL": "https://api.openai.test/v1",
        "STREAM_CHUNK_DELAY": 0,
        "FULFILLMENT_DELAY": 0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def completion_body(content) -> dict:
    """A non-streaming chat-completion response body."""
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def sse_body(*tokens, done: bool = True, extra_lines=()) -> bytes:
    """A streaming chat-completion body, one ``data:`` event per token."""
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": token}}]})
        for token in tokens
    ]
    lines.extend(extra_lines)
    if done:
        lines.append("data: [DONE]")
    return ("\n\n".join(lines) + "\n\n").encode("utf-8")


class FakeOpenAI:
    """Records outbound chat-completion requests and answers from a queue."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def reply_json(self, body: dict, status_code: int = 200):
        self.responses.append(httpx.Response(status_code, json=body))

    def reply_content(self, content):
        self.reply_json(completion_body(content))

    def reply_tokens(self, *tokens, done: bool = True, extra_lines=()):
        self.reply_stream(sse_body(*tokens, done=done, extra_lines=extra_lines))

    def reply_text(self, text: str, status_code: int):
        self.responses.append(httpx.Response(status_code, text=text))

    def reply_stream(self, body: bytes):
        self.responses.append(httpx.Response(
            200, content=body, headers={"content-type": "text/event-stream"}
        ))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected upstream call: {request.url}")
        return self.responses.pop(0)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


# --- FIXTURES ---

@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def dummy_settings():
    return make_settings()


@pytest.fixture
def openai_settings():
    return make_settings(USE_DUMMY_AI=False, OPENAI_API_KEY=TEST_API_KEY)


@pytest.fixture
def api(fake_openai):
    """
    FastAPI test client factory.

    ``api(settings)`` wires the given settings and the fake upstream into
    the app; overrides are removed after the test.
    """
    def build(settings: Settings) -> TestClient:
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_llm_transport] = lambda: fake_openai.transport
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


@pytest.fixture
def dummy_client(api, dummy_settings) -> TestClient:
    return api(dummy_settings)


@pytest.fixture
def openai_client(api, openai_settings) -> TestClient:
    return api(openai_settings)
