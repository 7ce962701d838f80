import logging

import httpx

from live_translator.config import Settings
from live_translator.errors import ServiceUnavailable
from live_translator.languages import whisper_language
from live_translator.models.upstream import response_error, transport_error
from live_translator.services.audio import audio_filename, audio_mime_type

logger = logging.getLogger("live_translator")

# Sampling temperature for Whisper decoding
STT_TEMPERATURE = 0.2


class WhisperSTT:
    """OpenAI Whisper transcription over the REST API."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.transport = transport

    @property
    def configured(self) -> bool:
        return self.settings.stt_configured

    async def transcribe(
        self, audio: bytes, audio_format: str, source_language: str
    ) -> str:
        """Transcribe an audio clip. Returns the stripped transcript, possibly empty."""
        if not self.configured:
            logger.error("OPENAI_API_KEY is not configured")
            raise ServiceUnavailable("stt")

        data = {
            "model": self.settings.openai_stt_model,
            "response_format": "text",
            "temperature": str(STT_TEMPERATURE),
        }
        language = whisper_language(source_language)
        if language is not None:
            data["language"] = language

        files = {
            "file": (audio_filename(audio_format), audio, audio_mime_type(audio_format)),
        }

        logger.info("[STT] %d bytes of %s, language=%s", len(audio), audio_format, language or "auto")
        try:
            async with httpx.AsyncClient(
                base_url=self.settings.openai_base_url,
                timeout=self.settings.stt_timeout_s,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    "/audio/transcriptions",
                    headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
                    data=data,
                    files=files,
                )
        except httpx.HTTPError as e:
            raise transport_error("stt", e) from e

        if not response.is_success:
            raise response_error("stt", response)

        return response.text.strip()
