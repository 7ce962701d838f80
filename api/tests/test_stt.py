"""
Unit tests for the Whisper STT adapter.
"""

import httpx
import pytest

from conftest import FakeUpstream, openai_error
from live_translator.errors import (
    InvalidApiKey,
    RateLimitExceeded,
    ServiceUnavailable,
    UpstreamError,
)
from live_translator.models.stt import WhisperSTT


@pytest.fixture
def fake():
    return FakeUpstream()


@pytest.mark.asyncio
async def test_transcribe_returns_stripped_text(make_settings, fake):
    stt = WhisperSTT(make_settings(), fake.transport)

    text = await stt.transcribe(b"audio", "webm", "fr")

    assert text == "Hello, how are you?"
    [request] = fake.requests
    assert b'filename="audio.webm"' in request.content
    assert b"Content-Type: audio/webm" in request.content
    assert b'name="language"\r\n\r\nfr' in request.content


@pytest.mark.asyncio
async def test_transcribe_auto_omits_language(make_settings, fake):
    stt = WhisperSTT(make_settings(), fake.transport)

    await stt.transcribe(b"audio", "mp3", "auto")

    [request] = fake.requests
    assert b'name="language"' not in request.content


@pytest.mark.asyncio
async def test_transcribe_uses_configured_model(make_settings, fake):
    stt = WhisperSTT(make_settings(openai_stt_model="gpt-4o-transcribe"), fake.transport)

    await stt.transcribe(b"audio", "mp3", "en")

    assert b'name="model"\r\n\r\ngpt-4o-transcribe' in fake.requests[0].content


@pytest.mark.asyncio
async def test_transcribe_without_key_makes_no_call(make_settings, fake):
    stt = WhisperSTT(make_settings(openai_api_key=""), fake.transport)

    with pytest.raises(ServiceUnavailable) as exc:
        await stt.transcribe(b"audio", "mp3", "en")

    assert exc.value.status_code == 503
    assert fake.requests == []


@pytest.mark.asyncio
async def test_transcribe_rate_limited(make_settings, fake):
    fake.stt = openai_error(429, "Rate limit reached for whisper-1")
    stt = WhisperSTT(make_settings(), fake.transport)

    with pytest.raises(RateLimitExceeded) as exc:
        await stt.transcribe(b"audio", "mp3", "en")

    assert exc.value.upstream_status == 429
    assert exc.value.message == "Rate limit reached for whisper-1"


@pytest.mark.asyncio
async def test_transcribe_bad_key(make_settings, fake):
    fake.stt = openai_error(401, "Incorrect API key provided")
    stt = WhisperSTT(make_settings(), fake.transport)

    with pytest.raises(InvalidApiKey):
        await stt.transcribe(b"audio", "mp3", "en")


@pytest.mark.asyncio
async def test_transcribe_upstream_status_passes_through(make_settings, fake):
    fake.stt = lambda request: httpx.Response(503, text="upstream overloaded")
    stt = WhisperSTT(make_settings(), fake.transport)

    with pytest.raises(UpstreamError) as exc:
        await stt.transcribe(b"audio", "mp3", "en")

    assert exc.value.status_code == 503
    assert exc.value.error == "STT request failed"
    assert exc.value.details == "upstream overloaded"


@pytest.mark.asyncio
async def test_transcribe_timeout(make_settings, fake):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    fake.stt = slow
    stt = WhisperSTT(make_settings(), fake.transport)

    with pytest.raises(UpstreamError) as exc:
        await stt.transcribe(b"audio", "mp3", "en")

    assert exc.value.status_code == 500
    assert exc.value.upstream_status is None
    assert "timed out" in exc.value.details
