"""
Pytest configuration and fixtures.
"""

import os

# Module-level settings are built at import time
API_KEY = "test-api-key"
os.environ["API_KEY"] = API_KEY
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["ELEVENLABS_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""

import base64

import fakeredis.aioredis
import httpx
import pytest
from fastapi.testclient import TestClient

from live_translator.config import Settings
from live_translator.dependencies import get_redis, get_settings, get_upstream_transport
from live_translator.main import app

AUDIO_BYTES = b"mock audio data"
AUDIO_B64 = base64.b64encode(AUDIO_BYTES).decode("ascii")
TTS_AUDIO = b"\x01\x02\x03\x04\x05"


def chat_completion(content):
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }


def openai_error(status, message):
    return lambda request: httpx.Response(
        status, json={"error": {"message": message, "type": "error"}}
    )


class FakeUpstream:
    """Stands in for OpenAI and ElevenLabs behind an httpx.MockTransport.

    Each service attribute is a callable building a fresh response per call.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.stt = lambda request: httpx.Response(200, text="Hello, how are you?\n")
        self.translation = lambda request: httpx.Response(
            200, json=chat_completion("Hola, ¿cómo estás?")
        )
        self.tts = lambda request: httpx.Response(
            200, content=TTS_AUDIO, headers={"content-type": "audio/mpeg"}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/audio/transcriptions"):
            return self.stt(request)
        if path.endswith("/chat/completions"):
            return self.translation(request)
        if "/text-to-speech/" in path:
            return self.tts(request)
        return httpx.Response(404, json={"error": {"message": f"Unexpected path {path}"}})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, fragment: str) -> list[httpx.Request]:
        return [r for r in self.requests if fragment in r.url.path]


@pytest.fixture
def make_settings():
    """Build isolated Settings with working test credentials."""

    def _make(**overrides) -> Settings:
        values = {
            "api_key": API_KEY,
            "openai_api_key": "test_openai_key",
            "elevenlabs_api_key": "test_elevenlabs_key",
            "elevenlabs_default_voice_id": "test_voice_id",
            "elevenlabs_model_id": "eleven_turbo_v2_5",
            "openai_stt_model": "whisper-1",
            "rate_limit_enabled": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def fake_redis():
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def use_settings(make_settings):
    """Swap the settings the app injects for the rest of the test."""

    def _use(**overrides) -> Settings:
        s = make_settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: s
        return s

    return _use


@pytest.fixture
def client(use_settings, upstream, fake_redis):
    use_settings()
    app.dependency_overrides[get_upstream_transport] = lambda: upstream.transport
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app, headers={"Authorization": f"Bearer {API_KEY}"}) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def ptt_body():
    return {
        "audio": AUDIO_B64,
        "sourceLanguage": "en",
        "targetLanguage": "es",
        "audioFormat": "mp3",
    }
