import base64
import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from live_translator.dependencies import PipelineDep
from live_translator.schemas.ptt import ErrorResponse, PttRequestBody
from live_translator.services.pipeline import PipelineResult

logger = logging.getLogger("live_translator")
router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

EXPOSED_HEADERS = (
    "X-STT-Latency",
    "X-Translation-Latency",
    "X-TTS-Latency",
    "X-Total-Latency",
    "X-Source-Text",
    "X-Target-Text",
    "X-Failed-Stage",
)

ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 401, 429, 500, 503)
}

LATENCY_HEADERS = {
    "stt": "X-STT-Latency",
    "translation": "X-Translation-Latency",
    "tts": "X-TTS-Latency",
    "total": "X-Total-Latency",
}


def _b64_header(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def failure_headers(result: PipelineResult) -> dict[str, str]:
    """Latencies of the stages that ran, and the stage that failed."""
    headers = {
        LATENCY_HEADERS[stage]: str(ms)
        for stage, ms in result.stage_latencies_ms.items()
    }
    if result.failed_stage:
        headers["X-Failed-Stage"] = result.failed_stage
    headers["Access-Control-Expose-Headers"] = ", ".join(EXPOSED_HEADERS)
    return headers


def result_headers(result: PipelineResult) -> dict[str, str]:
    """Diagnostic headers: stage latencies and the base64 texts."""
    latencies = result.stage_latencies_ms
    return {
        "Cache-Control": "no-store",
        **CORS_HEADERS,
        "Access-Control-Expose-Headers": ", ".join(EXPOSED_HEADERS),
        **{LATENCY_HEADERS[stage]: str(latencies[stage]) for stage in LATENCY_HEADERS},
        "X-Source-Text": _b64_header(result.source_text),
        "X-Target-Text": _b64_header(result.target_text),
    }


@router.post(
    "/ptt",
    summary="Push-to-talk translation",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"audio/mp3": {}}, "description": "Synthesized speech"},
        **ERROR_RESPONSES,
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": PttRequestBody.model_json_schema(by_alias=True)
                }
            },
        }
    },
)
async def push_to_talk(request: Request, pipeline: PipelineDep):
    """Translate a recorded clip: STT -> translation -> TTS.

    The body is JSON with base64 `audio`, `sourceLanguage` (or `auto`) and
    `targetLanguage`; `audioFormat`, `voiceId`, `modelId` and `outputFormat`
    are optional. The response streams the synthesized audio as soon as
    upstream starts sending it. `X-*-Latency` headers carry stage timings in
    ms; `X-Source-Text` and `X-Target-Text` carry the texts in base64.
    """
    started_at = time.perf_counter()
    body = await request.body()

    result = await pipeline.run(body, started_at=started_at)

    return StreamingResponse(
        result.audio_stream,
        media_type=result.audio_stream.media_type,
        headers=result_headers(result),
        background=BackgroundTask(result.close),
    )


@router.options("/ptt", include_in_schema=False)
async def push_to_talk_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)
