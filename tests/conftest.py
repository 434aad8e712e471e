"""
Pytest configuration and fixtures.
"""

import os

import pytest

# Must be set before app modules are imported (app.main loads settings at import)
TEST_ENV = {
    "VETNIKO_ENV": "test",
    "VETNIKO_GEMINI_API_KEY": "test_gemini_key",
    "VETNIKO_API_BASE_URL": "http://backend.test",
}

for _key, _value in TEST_ENV.items():
    os.environ[_key] = _value

os.environ.pop("MLFLOW_TRACKING_URI", None)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; start every test from the env."""
    from app.vet_service.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakePart:
    def __init__(self, text=None, inline_data=None):
        self.text = text
        self.inline_data = inline_data


class FakeInlineData:
    def __init__(self, data, mime_type=None):
        self.data = data
        self.mime_type = mime_type


class FakeContent:
    def __init__(self, parts):
        self.parts = parts


class FakeCandidate:
    def __init__(self, parts):
        self.content = FakeContent(parts)


class FakeResponse:
    def __init__(self, text=None, candidates=None):
        self.text = text
        self.candidates = candidates or []


class FakeGeminiClient:
    """Records generate_content calls and replays a canned response or error."""

    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response
        self._error = error
        self.models = self

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response


@pytest.fixture
def fake_gemini():
    return FakeGeminiClient


@pytest.fixture
def text_response():
    """Build a Gemini text response."""

    def _build(text):
        return FakeResponse(text=text, candidates=[FakeCandidate([FakePart(text=text)])])

    return _build


@pytest.fixture
def audio_response():
    """Build a Gemini TTS response; ``data=None`` gives a part without audio."""

    def _build(data=None, mime_type="audio/L16;codec=pcm;rate=24000"):
        inline = FakeInlineData(data, mime_type) if data is not None else None
        return FakeResponse(candidates=[FakeCandidate([FakePart(inline_data=inline)])])

    return _build
