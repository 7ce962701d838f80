import logging
from typing import AsyncIterator

import httpx

from live_translator.config import Settings
from live_translator.errors import ServiceUnavailable
from live_translator.models.upstream import response_error, transport_error
from live_translator.services.audio import audio_mime_type

logger = logging.getLogger("live_translator")

DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"  # Rachel
DEFAULT_MODEL_ID = "eleven_turbo_v2_5"
DEFAULT_OUTPUT_FORMAT = "mp3"

# Highest streaming-latency optimization tier ElevenLabs exposes
MAX_LATENCY_OPTIMIZATION = 4

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "use_speaker_boost": True,
}


class AudioStream:
    """Synthesized audio still being received from upstream.

    Owns the open response and its client; iterate it once to forward the
    bytes, then it closes itself. `aclose` is safe to call at any point.
    """

    def __init__(
        self,
        response: httpx.Response,
        client: httpx.AsyncClient,
        output_format: str,
    ):
        self._response = response
        self._client = client
        self.output_format = output_format
        self._consumed = False
        self._closed = False

    @property
    def media_type(self) -> str:
        return audio_mime_type(self.output_format)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError("Audio stream already consumed")
        self._consumed = True
        try:
            async for chunk in self._response.aiter_bytes():
                if chunk:
                    yield chunk
        finally:
            await self.aclose()

    async def aclose(self):
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()
        await self._client.aclose()


class ElevenLabsTTS:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.transport = transport

    @property
    def configured(self) -> bool:
        return self.settings.tts_configured

    def resolve_voice(self, voice_id: str | None = None) -> str:
        return voice_id or self.settings.elevenlabs_default_voice_id or DEFAULT_VOICE_ID

    def resolve_model(self, model_id: str | None = None) -> str:
        return model_id or self.settings.elevenlabs_model_id or DEFAULT_MODEL_ID

    async def synthesize(
        self,
        text: str,
        voice_id: str | None = None,
        model_id: str | None = None,
        output_format: str | None = None,
        optimize_latency: int = MAX_LATENCY_OPTIMIZATION,
    ) -> AudioStream:
        """Start streaming synthesis of `text`.

        Returns once upstream has accepted the request; the audio body is
        read lazily through the returned stream.
        """
        if not self.configured:
            logger.error("ELEVENLABS_API_KEY is not configured")
            raise ServiceUnavailable("tts")

        voice = self.resolve_voice(voice_id)
        model = self.resolve_model(model_id)
        output_format = output_format or DEFAULT_OUTPUT_FORMAT

        logger.info(
            "[TTS] voice=%s, model=%s, format=%s, latency=%d, %d chars",
            voice, model, output_format, optimize_latency, len(text),
        )

        client = httpx.AsyncClient(
            base_url=self.settings.elevenlabs_base_url,
            timeout=self.settings.tts_timeout_s,
            transport=self.transport,
        )
        request = client.build_request(
            "POST",
            f"/text-to-speech/{voice}/stream",
            params={
                "optimize_streaming_latency": optimize_latency,
                "output_format": output_format,
            },
            headers={"xi-api-key": self.settings.elevenlabs_api_key},
            json={
                "model_id": model,
                "text": text,
                "voice_settings": VOICE_SETTINGS,
            },
        )

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise transport_error("tts", e) from e

        if not response.is_success:
            try:
                await response.aread()
            except httpx.HTTPError as e:
                raise transport_error("tts", e) from e
            finally:
                await response.aclose()
                await client.aclose()
            raise response_error("tts", response)

        return AudioStream(response, client, output_format)
