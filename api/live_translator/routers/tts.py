import logging

from fastapi import APIRouter
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from live_translator.dependencies import SettingsDep, TTSDep
from live_translator.errors import ValidationError
from live_translator.routers.ptt import CORS_HEADERS, ERROR_RESPONSES
from live_translator.schemas.tts import TTSRequest

logger = logging.getLogger("live_translator")
router = APIRouter()

DEFAULT_LATENCY_OPTIMIZATION = 2


@router.post(
    "/tts",
    summary="Text-to-Speech",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"audio/mp3": {}}, "description": "Synthesized speech"},
        **ERROR_RESPONSES,
    },
)
async def text_to_speech(req: TTSRequest, tts: TTSDep, settings: SettingsDep):
    """Synthesize text with ElevenLabs and stream the audio back.

    Voice, model and output format default to the server configuration.
    `optimize_streaming_latency` defaults to 2, a balance between quality and
    time to first byte.
    """
    text = req.text.strip()
    if not text:
        raise ValidationError("Text is required")
    if len(text) > settings.tts_max_chars:
        raise ValidationError(f"Text exceeds {settings.tts_max_chars} character limit")

    latency = req.optimize_streaming_latency
    if latency is None:
        latency = DEFAULT_LATENCY_OPTIMIZATION

    stream = await tts.synthesize(
        text,
        voice_id=req.voice_id,
        model_id=req.model_id,
        output_format=req.output_format,
        optimize_latency=latency,
    )

    return StreamingResponse(
        stream,
        media_type=stream.media_type,
        headers={"Cache-Control": "no-store", **CORS_HEADERS},
        background=BackgroundTask(stream.aclose),
    )


@router.options("/tts", include_in_schema=False)
async def text_to_speech_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)
