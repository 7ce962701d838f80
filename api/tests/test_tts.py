"""
Unit tests for the ElevenLabs TTS adapter and its audio stream.
"""

import json

import httpx
import pytest

from conftest import TTS_AUDIO, FakeUpstream
from live_translator.errors import (
    InvalidApiKey,
    RateLimitExceeded,
    ServiceUnavailable,
    TtsGenerationFailed,
)
from live_translator.models.tts import ElevenLabsTTS


async def collect(stream):
    return b"".join([chunk async for chunk in stream])


@pytest.fixture
def fake():
    return FakeUpstream()


@pytest.mark.asyncio
async def test_synthesize_streams_audio(make_settings, fake):
    tts = ElevenLabsTTS(make_settings(), fake.transport)

    stream = await tts.synthesize("Hola")

    assert stream.media_type == "audio/mp3"
    assert await collect(stream) == TTS_AUDIO
    [request] = fake.requests
    assert request.url.params["optimize_streaming_latency"] == "4"
    assert json.loads(request.content)["text"] == "Hola"


@pytest.mark.asyncio
async def test_stream_is_not_restartable(make_settings, fake):
    tts = ElevenLabsTTS(make_settings(), fake.transport)
    stream = await tts.synthesize("Hola")
    await collect(stream)

    with pytest.raises(RuntimeError):
        await collect(stream)


@pytest.mark.asyncio
async def test_stream_close_before_reading(make_settings, fake):
    tts = ElevenLabsTTS(make_settings(), fake.transport)
    stream = await tts.synthesize("Hola")

    await stream.aclose()
    await stream.aclose()


@pytest.mark.parametrize(
    "override, settings_value, expected",
    [
        ("req_voice", "cfg_voice", "req_voice"),
        (None, "cfg_voice", "cfg_voice"),
        (None, "", "21m00Tcm4TlvDq8ikWAM"),
    ],
)
def test_resolve_voice(make_settings, override, settings_value, expected):
    tts = ElevenLabsTTS(make_settings(elevenlabs_default_voice_id=settings_value))

    assert tts.resolve_voice(override) == expected


@pytest.mark.parametrize(
    "override, settings_value, expected",
    [
        ("eleven_multilingual_v2", "eleven_flash_v2_5", "eleven_multilingual_v2"),
        (None, "eleven_flash_v2_5", "eleven_flash_v2_5"),
        (None, "", "eleven_turbo_v2_5"),
    ],
)
def test_resolve_model(make_settings, override, settings_value, expected):
    tts = ElevenLabsTTS(make_settings(elevenlabs_model_id=settings_value))

    assert tts.resolve_model(override) == expected


@pytest.mark.asyncio
async def test_synthesize_custom_latency_and_format(make_settings, fake):
    tts = ElevenLabsTTS(make_settings(), fake.transport)

    stream = await tts.synthesize("Hola", output_format="pcm_16000", optimize_latency=2)

    assert stream.media_type == "audio/pcm"
    [request] = fake.requests
    assert request.url.params["optimize_streaming_latency"] == "2"
    assert request.url.params["output_format"] == "pcm_16000"
    await stream.aclose()


@pytest.mark.asyncio
async def test_synthesize_without_key(make_settings, fake):
    tts = ElevenLabsTTS(make_settings(elevenlabs_api_key=""), fake.transport)

    with pytest.raises(ServiceUnavailable) as exc:
        await tts.synthesize("Hola")

    assert exc.value.error == "TTS service not configured"
    assert fake.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error_type",
    [
        (401, InvalidApiKey),
        (429, RateLimitExceeded),
        (400, TtsGenerationFailed),
        (500, TtsGenerationFailed),
    ],
)
async def test_synthesize_upstream_errors(make_settings, fake, status, error_type):
    fake.tts = lambda request: httpx.Response(
        status, json={"detail": {"status": "error", "message": "upstream said no"}}
    )
    tts = ElevenLabsTTS(make_settings(), fake.transport)

    with pytest.raises(error_type) as exc:
        await tts.synthesize("Hola")

    assert exc.value.upstream_status == status
    assert exc.value.details == "upstream said no"


@pytest.mark.asyncio
async def test_synthesize_generation_failed_keeps_status(make_settings, fake):
    fake.tts = lambda request: httpx.Response(422, text="voice not found")
    tts = ElevenLabsTTS(make_settings(), fake.transport)

    with pytest.raises(TtsGenerationFailed) as exc:
        await tts.synthesize("Hola")

    assert exc.value.status_code == 422
    assert exc.value.error == "TTS generation failed"
